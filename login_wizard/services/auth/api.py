"""Auth API - endpoint definitions for the client-server API."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel

from .models import (
    Credentials,
    PasswordLoginParams,
    RequestTokenParams,
    RequestTokenResponse,
    ResetPasswordMailConfirmedParams,
)

CLIENT_API_PREFIX = "/_matrix/client/r0"


@dataclass(frozen=True)
class ApiRequest:
    """A single typed request/response exchange."""

    method: str
    path: str
    endpoint: str
    body: Optional[BaseModel] = None
    response_model: Optional[Type[BaseModel]] = None

    def json_body(self) -> Optional[Dict[str, Any]]:
        """Serialize the body for the wire, dropping unset optional fields."""
        if self.body is None:
            return None
        return self.body.model_dump(mode="json", by_alias=True, exclude_none=True)


class AuthAPI:
    """Builds the requests of the login and password reset endpoints."""

    def __init__(self, prefix: str = CLIENT_API_PREFIX):
        self.prefix = prefix.rstrip("/")

    def login(self, params: PasswordLoginParams) -> ApiRequest:
        """POST /login."""
        return ApiRequest(
            method="POST",
            path=f"{self.prefix}/login",
            endpoint="login",
            body=params,
            response_model=Credentials,
        )

    def reset_password(self, params: RequestTokenParams) -> ApiRequest:
        """POST /account/password/email/requestToken - sends the validation email."""
        return ApiRequest(
            method="POST",
            path=f"{self.prefix}/account/password/email/requestToken",
            endpoint="reset_password",
            body=params,
            response_model=RequestTokenResponse,
        )

    def reset_password_mail_confirmed(
        self, params: ResetPasswordMailConfirmedParams
    ) -> ApiRequest:
        """POST /account/password - applies the new password."""
        return ApiRequest(
            method="POST",
            path=f"{self.prefix}/account/password",
            endpoint="reset_password_mail_confirmed",
            body=params,
        )
