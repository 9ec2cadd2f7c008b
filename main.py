#!/usr/bin/env python3
"""
Matrix login wizard - command line entry point.

Logs in to a homeserver or resets an account password through email validation.
"""

import argparse
import asyncio
import getpass
import sys
from typing import List, Optional

from loguru import logger

from login_wizard.core.exceptions import ConfigurationError, LoginWizardError, TransportError
from login_wizard.core.logger import setup_structured_logging
from login_wizard.core.settings import WizardSettings, load_settings
from login_wizard.services.auth.wizard import LoginWizard

MAX_CONFIRM_ATTEMPTS = 5


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(description="Matrix login wizard")
    parser.add_argument(
        "--homeserver", help="Homeserver base URL (defaults to HOMESERVER_URL from the environment)"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (defaults to LOG_LEVEL)",
    )
    parser.add_argument("--log-dir", default=None, help="Directory for rotating log files")

    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login", help="Login with a password")
    login_parser.add_argument("identifier", help="User name, Matrix id or email address")
    login_parser.add_argument("--device-name", default=None, help="Display name of the new device")

    reset_parser = subparsers.add_parser(
        "reset-password", help="Reset the account password through email validation"
    )
    reset_parser.add_argument("email", help="Email address bound to the account")
    reset_parser.add_argument(
        "--logout-devices",
        action="store_true",
        default=None,
        help="Sign out every device once the password is changed",
    )

    return parser


def settings_from_args(args: argparse.Namespace) -> WizardSettings:
    """Load settings, applying command line overrides."""
    overrides = {}
    if args.homeserver:
        overrides["homeserver_url"] = args.homeserver
    if args.log_level:
        overrides["log_level"] = args.log_level
    return load_settings(**overrides)


def read_new_password() -> str:
    """Prompt twice for the new password."""
    while True:
        password = getpass.getpass("New password: ")
        if not password:
            print("Password must not be empty")
            continue
        if getpass.getpass("Repeat new password: ") == password:
            return password
        print("Passwords do not match")


async def run_login(wizard: LoginWizard, identifier: str, device_name: Optional[str]) -> int:
    """Login and print the new session."""
    password = getpass.getpass("Password: ")
    session = await wizard.login_async(identifier, password, device_name)
    print(f"Logged in as {session.user_id} (device {session.credentials.device_id})")
    print(f"Homeserver: {session.connection_config.homeserver_uri}")
    return 0


async def run_reset_password(wizard: LoginWizard, email: str) -> int:
    """Send the validation email, wait for the user, then apply the new password."""
    new_password = read_new_password()
    await wizard.reset_password_async(email, new_password)
    print(f"A validation email was sent to {email}.")

    for attempt in range(1, MAX_CONFIRM_ATTEMPTS + 1):
        await asyncio.to_thread(input, "Follow the link in the email, then press Enter... ")
        try:
            await wizard.reset_password_mail_confirmed_async()
        except TransportError as e:
            logger.warning(f"Confirmation attempt {attempt} failed: {e.message}")
            print(f"Confirmation failed: {e.message}")
            continue
        print("Password changed.")
        return 0

    print("Giving up: the email link was not validated.")
    return 1


async def run(args: argparse.Namespace, settings: WizardSettings) -> int:
    """Run the selected command."""
    kwargs = {}
    if getattr(args, "logout_devices", None):
        kwargs["logout_devices"] = True

    async with LoginWizard.from_settings(settings, **kwargs) as wizard:
        if args.command == "login":
            return await run_login(wizard, args.identifier, args.device_name)
        return await run_reset_password(wizard, args.email)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_args(args)
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        return 2

    setup_structured_logging(
        settings.log_level,
        json_format=settings.log_json,
        log_dir=args.log_dir,
        diagnose=settings.is_development(),
    )

    try:
        return asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except LoginWizardError as e:
        logger.error(f"{args.command} failed: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
