"""Session creation from issued credentials."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Protocol
from urllib.parse import urlparse

from loguru import logger

from .models import Credentials, HomeServerConnectionConfig


@dataclass
class Session:
    """Authenticated session."""

    credentials: Credentials
    connection_config: HomeServerConnectionConfig
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def session_id(self) -> str:
        """Unique id of this session (user id and device id)."""
        return f"{self.credentials.user_id}|{self.credentials.device_id or ''}"

    @property
    def user_id(self) -> str:
        return self.credentials.user_id


class SessionFactory(Protocol):
    """Turns issued credentials into a session."""

    async def create_session(
        self, credentials: Credentials, connection_config: HomeServerConnectionConfig
    ) -> Session:
        ...


def _is_http_url(value: Optional[str]) -> bool:
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class DefaultSessionCreator:
    """
    Default session factory.

    When the login response carries discovery information pointing to a
    different homeserver base URL, the session is bound to that URL.
    """

    async def create_session(
        self, credentials: Credentials, connection_config: HomeServerConnectionConfig
    ) -> Session:
        """
        Create a session.

        Args:
            credentials: Credentials returned by the login call
            connection_config: Configuration used for the login call

        Returns:
            The new session
        """
        config = connection_config
        well_known = credentials.well_known
        base_url = well_known.homeserver.base_url if well_known and well_known.homeserver else None

        if base_url and _is_http_url(base_url):
            base_url = base_url.rstrip("/")
            if base_url != config.homeserver_uri.rstrip("/"):
                logger.info(
                    f"Homeserver announced base URL {base_url}, "
                    f"overriding {config.homeserver_uri}"
                )
                config = config.model_copy(update={"homeserver_uri": base_url})
        elif base_url:
            logger.warning(f"Ignoring invalid homeserver base URL in login response: {base_url!r}")

        session = Session(credentials=credentials, connection_config=config)
        logger.info(f"Session created for device {credentials.device_id}")
        return session
