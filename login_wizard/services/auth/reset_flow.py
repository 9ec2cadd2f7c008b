"""Password reset through email validation.

The flow has two states. ``NoPendingReset`` is the initial state.
``PendingReset`` is entered when the homeserver accepted a requestToken
call and sent the validation email. Confirming a pending reset applies the
new password and returns to ``NoPendingReset``.

Both requests carry the same client secret, generated once per flow, so the
homeserver can tie the confirmation to the three-pid session it opened.

Operations take no lock against each other: callers issuing ``initiate`` and
``confirm_mail_validated`` concurrently get the state of whichever request
completes last. Only the send-attempt counter is guarded.
"""

from typing import Optional

from loguru import logger
from pydantic import SecretStr

from ...core.exceptions import InvalidFlowStateError, ResponseFormatError
from ...utils.masking import mask_email, mask_secret
from .api import AuthAPI
from .models import (
    NO_PENDING_RESET,
    PendingReset,
    RequestTokenParams,
    RequestTokenResponse,
    ResetPasswordMailConfirmedParams,
    ResetState,
)
from .secret import AttemptCounter, CorrelationSecretProvider
from .transport import ApiTransport

NO_RESET_IN_PROGRESS = "No password reset in progress, call initiate() first"


class PasswordResetFlow:
    """Email verified password reset state machine."""

    def __init__(
        self,
        transport: ApiTransport,
        secret_provider: Optional[CorrelationSecretProvider] = None,
        auth_api: Optional[AuthAPI] = None,
        logout_devices: Optional[bool] = None,
    ):
        """
        Initialize the flow.

        Args:
            transport: Transport used for both requests
            secret_provider: Source of the client secret (asked once, here)
            auth_api: Endpoint definitions
            logout_devices: Value of logout_devices on confirmation (omitted when None)
        """
        self._transport = transport
        self._auth_api = auth_api or AuthAPI()
        self._client_secret = (secret_provider or CorrelationSecretProvider()).generate()
        self._send_attempt = AttemptCounter()
        self._state: ResetState = NO_PENDING_RESET
        self.logout_devices = logout_devices

    @property
    def client_secret(self) -> str:
        return self._client_secret

    @property
    def send_attempt(self) -> int:
        """Send attempt the next ``initiate`` call will use."""
        return self._send_attempt.value

    @property
    def state(self) -> ResetState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return isinstance(self._state, PendingReset)

    async def initiate(self, email: str, new_password: str) -> None:
        """
        Ask the homeserver to send a validation email.

        The send attempt is consumed before the request is sent, so it
        advances on every call whatever the outcome.

        Args:
            email: Email address bound to the account
            new_password: Password applied once the email is validated

        Raises:
            TransportError: Propagated unchanged; the pending state is left as it was
        """
        send_attempt = self._send_attempt.next()
        params = RequestTokenParams(
            email=email, client_secret=self._client_secret, send_attempt=send_attempt
        )
        logger.info(
            f"Requesting password reset email for {mask_email(email)} "
            f"(send_attempt={send_attempt}, client_secret={mask_secret(self._client_secret)})"
        )

        response = await self._transport.execute(self._auth_api.reset_password(params))
        if not isinstance(response, RequestTokenResponse):
            raise ResponseFormatError("requestToken returned no sid")

        if self.is_pending:
            logger.info("Replacing previous pending password reset")
        self._state = PendingReset(new_password=SecretStr(new_password), sid=response.sid)
        logger.info(f"Password reset email sent, waiting for validation (sid={response.sid})")

    async def confirm_mail_validated(self) -> None:
        """
        Apply the new password once the user followed the email link.

        Raises:
            InvalidFlowStateError: No reset is pending; nothing is sent
            TransportError: Propagated unchanged; the reset stays pending
        """
        pending = self._state
        if not isinstance(pending, PendingReset):
            raise InvalidFlowStateError(NO_RESET_IN_PROGRESS)

        params = ResetPasswordMailConfirmedParams.create(
            client_secret=self._client_secret,
            sid=pending.sid,
            new_password=pending.new_password.get_secret_value(),
            logout_devices=self.logout_devices,
        )
        logger.info(f"Confirming password reset (sid={pending.sid})")

        await self._transport.execute(self._auth_api.reset_password_mail_confirmed(params))

        # A newer initiate() may have replaced the state while the request was in flight
        if self._state is pending:
            self._state = NO_PENDING_RESET
        logger.info("Password reset confirmed")

    def check_can_confirm(self) -> None:
        """
        Raise when no reset is pending.

        Raises:
            InvalidFlowStateError: No reset is pending
        """
        if not self.is_pending:
            raise InvalidFlowStateError(NO_RESET_IN_PROGRESS)
