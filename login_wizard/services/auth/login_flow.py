"""Password login - picks the identifier type and turns credentials into a session."""

import re
from typing import Optional

from loguru import logger

from ...core.exceptions import ResponseFormatError
from ...utils.masking import mask_identifier
from .api import AuthAPI
from .models import (
    Credentials,
    HomeServerConnectionConfig,
    LoginIdentifier,
    PasswordLoginParams,
    ThirdPartyIdentifier,
    ThreePidMedium,
    UserIdentifier,
)
from .session import Session, SessionFactory
from .transport import ApiTransport

# Same grammar as android.util.Patterns.EMAIL_ADDRESS, matched against the whole input
EMAIL_ADDRESS_PATTERN = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)


def is_email_address(value: str) -> bool:
    """Check whether ``value`` is an email address."""
    return EMAIL_ADDRESS_PATTERN.fullmatch(value) is not None


def classify_identifier(login: str) -> LoginIdentifier:
    """
    Classify a raw login string.

    Args:
        login: What the user typed (user name, Matrix id or email address)

    Returns:
        ThirdPartyIdentifier for email addresses, UserIdentifier otherwise
    """
    if is_email_address(login):
        return ThirdPartyIdentifier(medium=ThreePidMedium.EMAIL, address=login)
    return UserIdentifier(user=login)


def build_login_params(
    login: str, password: str, device_name: Optional[str] = None
) -> PasswordLoginParams:
    """Build the single login request matching the identifier type."""
    identifier = classify_identifier(login)
    if isinstance(identifier, ThirdPartyIdentifier):
        return PasswordLoginParams.third_party_identifier(
            identifier.medium, identifier.address, password, device_name
        )
    return PasswordLoginParams.user_identifier(identifier.user, password, device_name)


class LoginFlow:
    """Logs in with an identifier and a password."""

    def __init__(
        self,
        connection_config: HomeServerConnectionConfig,
        transport: ApiTransport,
        session_factory: SessionFactory,
        auth_api: Optional[AuthAPI] = None,
    ):
        self.connection_config = connection_config
        self._transport = transport
        self._session_factory = session_factory
        self._auth_api = auth_api or AuthAPI()

    async def login(self, login: str, password: str, device_name: Optional[str] = None) -> Session:
        """
        Login to the homeserver.

        Args:
            login: User name, Matrix id or email address
            password: Account password
            device_name: Initial display name of the new device

        Returns:
            Authenticated session

        Raises:
            TransportError: Propagated unchanged from the transport
        """
        params = build_login_params(login, password, device_name)
        logger.info(
            f"Logging in {mask_identifier(login)} with identifier type {params.identifier.type}"
        )

        credentials = await self._transport.execute(self._auth_api.login(params))
        if not isinstance(credentials, Credentials):
            raise ResponseFormatError("login returned no credentials")

        session = await self._session_factory.create_session(credentials, self.connection_config)
        logger.info(f"Login successful for {mask_identifier(login)}")
        return session
