"""Auth API Models - wire payloads and flow state."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ThreePidMedium(str, Enum):
    """Third party identifier medium."""

    EMAIL = "email"
    MSISDN = "msisdn"


class UserIdentifier(BaseModel):
    """Login identifier for a plain Matrix user name or user id."""

    type: Literal["m.id.user"] = "m.id.user"
    user: str


class ThirdPartyIdentifier(BaseModel):
    """Login identifier for a third party id (email address, phone number)."""

    type: Literal["m.id.thirdparty"] = "m.id.thirdparty"
    medium: ThreePidMedium
    address: str


LoginIdentifier = Union[UserIdentifier, ThirdPartyIdentifier]


class PasswordLoginParams(BaseModel):
    """Body of POST /login for the m.login.password flow."""

    type: Literal["m.login.password"] = "m.login.password"
    identifier: LoginIdentifier
    password: str = Field(repr=False)
    initial_device_display_name: Optional[str] = None

    @classmethod
    def user_identifier(
        cls, user: str, password: str, device_name: Optional[str] = None
    ) -> "PasswordLoginParams":
        """Build login params for a user name."""
        return cls(
            identifier=UserIdentifier(user=user),
            password=password,
            initial_device_display_name=device_name,
        )

    @classmethod
    def third_party_identifier(
        cls,
        medium: ThreePidMedium,
        address: str,
        password: str,
        device_name: Optional[str] = None,
    ) -> "PasswordLoginParams":
        """Build login params for a third party identifier."""
        return cls(
            identifier=ThirdPartyIdentifier(medium=medium, address=address),
            password=password,
            initial_device_display_name=device_name,
        )


class WellKnownBaseConfig(BaseModel):
    """Server entry of a discovery document."""

    base_url: Optional[str] = None


class WellKnown(BaseModel):
    """Discovery information the homeserver may attach to a login response."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    homeserver: Optional[WellKnownBaseConfig] = Field(default=None, alias="m.homeserver")
    identity_server: Optional[WellKnownBaseConfig] = Field(
        default=None, alias="m.identity_server"
    )


class Credentials(BaseModel):
    """Credentials issued by the homeserver on successful login."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    access_token: str = Field(repr=False)
    home_server: Optional[str] = None
    device_id: Optional[str] = None
    refresh_token: Optional[str] = Field(default=None, repr=False)
    well_known: Optional[WellKnown] = None


class HomeServerConnectionConfig(BaseModel):
    """Where the homeserver lives."""

    model_config = ConfigDict(frozen=True)

    homeserver_uri: str
    identity_server_uri: Optional[str] = None


class RequestTokenParams(BaseModel):
    """Body of POST /account/password/email/requestToken."""

    email: str
    client_secret: str = Field(repr=False)
    send_attempt: int


class RequestTokenResponse(BaseModel):
    """Response of a successful requestToken call."""

    sid: str
    submit_url: Optional[str] = None


class ThreePidCredentials(BaseModel):
    """Proof that the client validated a three-pid session."""

    client_secret: str = Field(repr=False)
    sid: str


class EmailIdentityAuth(BaseModel):
    """User-interactive auth stage backed by a validated email."""

    type: Literal["m.login.email.identity"] = "m.login.email.identity"
    threepid_creds: ThreePidCredentials


class ResetPasswordMailConfirmedParams(BaseModel):
    """Body of POST /account/password once the email link has been followed."""

    auth: EmailIdentityAuth
    new_password: str = Field(repr=False)
    logout_devices: Optional[bool] = None

    @classmethod
    def create(
        cls,
        client_secret: str,
        sid: str,
        new_password: str,
        logout_devices: Optional[bool] = None,
    ) -> "ResetPasswordMailConfirmedParams":
        """Build confirmation params from the three-pid session."""
        return cls(
            auth=EmailIdentityAuth(
                threepid_creds=ThreePidCredentials(client_secret=client_secret, sid=sid)
            ),
            new_password=new_password,
            logout_devices=logout_devices,
        )


class MatrixErrorBody(BaseModel):
    """Standard error body of the client-server API."""

    errcode: Optional[str] = None
    error: Optional[str] = None
    retry_after_ms: Optional[int] = None


@dataclass(frozen=True)
class NoPendingReset:
    """No reset is waiting for email confirmation."""


@dataclass(frozen=True)
class PendingReset:
    """A reset request succeeded and waits for the email link to be followed."""

    new_password: SecretStr
    sid: str


NO_PENDING_RESET = NoPendingReset()

ResetState = Union[NoPendingReset, PendingReset]
