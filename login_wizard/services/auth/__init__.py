"""Auth services - password login and email verified password reset."""

from login_wizard.services.auth.api import AuthAPI, ApiRequest
from login_wizard.services.auth.login_flow import LoginFlow, classify_identifier, is_email_address
from login_wizard.services.auth.models import (
    NO_PENDING_RESET,
    Credentials,
    HomeServerConnectionConfig,
    NoPendingReset,
    PendingReset,
    ResetState,
    ThirdPartyIdentifier,
    ThreePidMedium,
    UserIdentifier,
)
from login_wizard.services.auth.reset_flow import PasswordResetFlow
from login_wizard.services.auth.secret import AttemptCounter, CorrelationSecretProvider
from login_wizard.services.auth.session import DefaultSessionCreator, Session, SessionFactory
from login_wizard.services.auth.tasks import (
    NO_OP_CANCELABLE,
    AsyncTaskBridge,
    Cancelable,
    TaskCancelable,
)
from login_wizard.services.auth.transport import AiohttpTransport, ApiTransport
from login_wizard.services.auth.wizard import LoginWizard

__all__ = [
    "LoginWizard",
    "LoginFlow",
    "PasswordResetFlow",
    "CorrelationSecretProvider",
    "AttemptCounter",
    "AsyncTaskBridge",
    "Cancelable",
    "TaskCancelable",
    "NO_OP_CANCELABLE",
    "ApiTransport",
    "AiohttpTransport",
    "AuthAPI",
    "ApiRequest",
    "SessionFactory",
    "DefaultSessionCreator",
    "Session",
    "Credentials",
    "HomeServerConnectionConfig",
    "UserIdentifier",
    "ThirdPartyIdentifier",
    "ThreePidMedium",
    "ResetState",
    "NoPendingReset",
    "PendingReset",
    "NO_PENDING_RESET",
    "classify_identifier",
    "is_email_address",
]
