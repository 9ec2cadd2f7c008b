"""Login wizard - public surface for login and password reset."""

from typing import Any, Optional

from loguru import logger

from ...core.exceptions import InvalidFlowStateError
from ...core.result import Failure, ResultCallback
from ...core.settings import WizardSettings, get_settings
from .login_flow import LoginFlow
from .models import HomeServerConnectionConfig
from .reset_flow import PasswordResetFlow
from .secret import CorrelationSecretProvider
from .session import DefaultSessionCreator, Session, SessionFactory
from .tasks import NO_OP_CANCELABLE, AsyncTaskBridge, Cancelable
from .transport import AiohttpTransport, ApiTransport


class LoginWizard:
    """
    Login and password reset against one homeserver.

    Every callback style operation returns a ``Cancelable`` and reports
    ``Success``/``Failure`` to its callback. The ``*_async`` variants are
    plain coroutines for callers that prefer awaiting.

    The wizard does not serialise operations; a caller needing ordering
    between ``reset_password`` and ``reset_password_mail_confirmed`` waits
    for one to complete before issuing the other.
    """

    def __init__(
        self,
        connection_config: HomeServerConnectionConfig,
        transport: ApiTransport,
        session_factory: Optional[SessionFactory] = None,
        bridge: Optional[AsyncTaskBridge] = None,
        secret_provider: Optional[CorrelationSecretProvider] = None,
        default_device_name: Optional[str] = None,
        logout_devices: Optional[bool] = None,
    ):
        """
        Initialize the wizard.

        Args:
            connection_config: Homeserver the wizard talks to
            transport: Request executor
            session_factory: Builds the session after login
            bridge: Schedules operations and delivers callbacks
            secret_provider: Source of the reset flow client secret
            default_device_name: Device display name used when login gets none
            logout_devices: Forwarded to the password reset confirmation
        """
        self.connection_config = connection_config
        self.default_device_name = default_device_name
        self._transport = transport
        self._bridge = bridge or AsyncTaskBridge()

        self._login_flow = LoginFlow(
            connection_config=connection_config,
            transport=transport,
            session_factory=session_factory or DefaultSessionCreator(),
        )
        self._reset_flow = PasswordResetFlow(
            transport=transport,
            secret_provider=secret_provider,
            logout_devices=logout_devices,
        )

        logger.debug(f"LoginWizard initialized for {connection_config.homeserver_uri}")

    @classmethod
    def from_settings(
        cls, settings: Optional[WizardSettings] = None, **kwargs: Any
    ) -> "LoginWizard":
        """
        Build a wizard with the default aiohttp transport.

        Args:
            settings: Settings to use (application settings when None)
            **kwargs: Extra keyword arguments for the constructor

        Returns:
            LoginWizard instance
        """
        settings = settings or get_settings()
        config = HomeServerConnectionConfig(
            homeserver_uri=settings.homeserver_url,
            identity_server_uri=settings.identity_server_url,
        )
        kwargs.setdefault("default_device_name", settings.default_device_name)
        return cls(config, AiohttpTransport.from_settings(settings), **kwargs)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the transport when it holds resources."""
        close = getattr(self._transport, "close", None)
        if close is not None:
            await close()

    @property
    def login_flow(self) -> LoginFlow:
        return self._login_flow

    @property
    def reset_flow(self) -> PasswordResetFlow:
        return self._reset_flow

    # Awaitable API

    async def login_async(
        self, login: str, password: str, device_name: Optional[str] = None
    ) -> Session:
        """
        Login with a user name, Matrix id or email address.

        Returns:
            Authenticated session

        Raises:
            TransportError: Login request failed
        """
        return await self._login_flow.login(
            login, password, device_name or self.default_device_name
        )

    async def reset_password_async(self, email: str, new_password: str) -> None:
        """
        Send the password reset validation email.

        Raises:
            TransportError: Request failed
        """
        await self._reset_flow.initiate(email, new_password)

    async def reset_password_mail_confirmed_async(self) -> None:
        """
        Apply the new password after the email link was followed.

        Raises:
            InvalidFlowStateError: reset_password has not succeeded yet
            TransportError: Request failed
        """
        await self._reset_flow.confirm_mail_validated()

    # Callback API

    def login(
        self,
        login: str,
        password: str,
        device_name: Optional[str],
        callback: ResultCallback,
    ) -> Cancelable:
        """Login; the callback receives the Session."""
        return self._bridge.run(self.login_async(login, password, device_name), callback, "login")

    def reset_password(
        self, email: str, new_password: str, callback: ResultCallback
    ) -> Cancelable:
        """Send the password reset validation email; the callback receives None."""
        return self._bridge.run(
            self.reset_password_async(email, new_password), callback, "reset_password"
        )

    def reset_password_mail_confirmed(self, callback: ResultCallback) -> Cancelable:
        """
        Apply the new password; the callback receives None.

        Without a pending reset the callback is invoked immediately with
        ``Failure(InvalidFlowStateError)`` and nothing is scheduled.
        """
        try:
            self._reset_flow.check_can_confirm()
        except InvalidFlowStateError as e:
            logger.error(f"reset_password_mail_confirmed rejected: {e.message}")
            callback(Failure(e))
            return NO_OP_CANCELABLE

        return self._bridge.run(
            self.reset_password_mail_confirmed_async(), callback, "reset_password_mail_confirmed"
        )
