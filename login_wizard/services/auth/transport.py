"""HTTP transport - executes typed requests against the homeserver."""

import asyncio
import json
from typing import Optional, Protocol

import aiohttp
from loguru import logger
from pydantic import BaseModel, ValidationError

from ... import __version__
from ...core.exceptions import (
    AuthenticationError,
    NetworkError,
    RateLimitError,
    ResponseFormatError,
    ServerError,
    TransportError,
)
from ...core.retry import get_network_retry
from ...core.settings import WizardSettings
from ...utils.masking import mask_sensitive_dict
from .api import ApiRequest
from .models import MatrixErrorBody


class ApiTransport(Protocol):
    """Performs one request/response exchange."""

    async def execute(self, request: ApiRequest) -> Optional[BaseModel]:
        """
        Execute a request.

        Returns:
            Parsed response model, or None when the request declares no response model

        Raises:
            TransportError: On connectivity failure, timeout or non-success answer
        """
        ...


def error_from_response(status: int, text: str) -> ServerError:
    """
    Map a non-success answer to the matching ServerError.

    Args:
        status: HTTP status code
        text: Raw response body

    Returns:
        ServerError (or subclass) describing the failure
    """
    body = MatrixErrorBody()
    try:
        parsed = json.loads(text) if text else {}
        if isinstance(parsed, dict):
            body = MatrixErrorBody.model_validate(parsed)
    except (ValueError, ValidationError):
        logger.debug(f"Non-JSON error body (status {status}): {text[:200]}")

    if status == 429 or body.errcode == "M_LIMIT_EXCEEDED":
        return RateLimitError(status, body.errcode, body.error, body.retry_after_ms)
    if status in (401, 403):
        return AuthenticationError(status, body.errcode, body.error)
    return ServerError(status, body.errcode, body.error, recoverable=status >= 500)


class AiohttpTransport:
    """
    aiohttp based transport.

    Owns one ClientSession, created lazily on the first request. Timeouts
    are enforced here; network failures may be retried when
    ``max_attempts`` is greater than one.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        max_attempts: int = 1,
        retry_backoff: float = 1.0,
    ):
        """
        Initialize transport.

        Args:
            base_url: Homeserver base URL
            timeout: Total request timeout in seconds
            connect_timeout: Connection timeout in seconds
            max_attempts: Attempts per request on network errors
            retry_backoff: Base delay in seconds between attempts
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff

        self._http_session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_settings(cls, settings: WizardSettings) -> "AiohttpTransport":
        """Create a transport from application settings."""
        return cls(
            base_url=settings.homeserver_url,
            timeout=settings.request_timeout,
            connect_timeout=settings.connect_timeout,
            max_attempts=settings.transport_max_attempts,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        await self._init_http_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _init_http_session(self) -> None:
        """Initialize HTTP session with connection pooling."""
        if self._http_session is None:
            headers = {
                "User-Agent": f"matrix-login-wizard/{__version__}",
                "Accept": "application/json",
            }

            connector = aiohttp.TCPConnector(
                limit=10,
                ttl_dns_cache=120,
                enable_cleanup_closed=True,
            )

            timeout = aiohttp.ClientTimeout(
                total=self.timeout,
                connect=self.connect_timeout,
            )

            self._http_session = aiohttp.ClientSession(
                connector=connector,
                headers=headers,
                timeout=timeout,
            )
            logger.debug(f"HTTP session initialized for {self.base_url}")

    async def close(self) -> None:
        """Close HTTP session."""
        if self._http_session:
            await self._http_session.close()
            self._http_session = None

    @property
    def _session(self) -> aiohttp.ClientSession:
        """Get HTTP session, raising error if not initialized."""
        if self._http_session is None:
            raise RuntimeError("HTTP session not initialized. Call _init_http_session() first.")
        return self._http_session

    async def execute(self, request: ApiRequest) -> Optional[BaseModel]:
        """
        Execute a request, retrying network failures up to ``max_attempts`` times.

        Raises:
            NetworkError: Connection failure or timeout
            ServerError: Non-success answer from the homeserver
            ResponseFormatError: Success answer with an unexpected body
        """
        await self._init_http_session()
        retrying = get_network_retry(self.max_attempts, self.retry_backoff)
        return await retrying(self._execute_once)(request)

    async def _execute_once(self, request: ApiRequest) -> Optional[BaseModel]:
        body = request.json_body()
        url = f"{self.base_url}{request.path}"
        logger.debug(
            f"{request.method} {request.path} "
            f"body={mask_sensitive_dict(body) if body is not None else None}"
        )

        try:
            async with self._session.request(request.method, url, json=body) as response:
                if not 200 <= response.status < 300:
                    text = await response.text()
                    error = error_from_response(response.status, text)
                    logger.warning(f"{request.endpoint} failed: {error.message}")
                    raise error

                if request.response_model is None:
                    return None

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise ResponseFormatError(
                        f"{request.endpoint} returned a non-JSON body",
                        details={"status": response.status},
                    ) from e

        except TransportError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"{request.endpoint} network failure: {e!r}")
            raise NetworkError(f"{request.endpoint} request failed: {e!r}") from e

        try:
            return request.response_model.model_validate(data)
        except ValidationError as e:
            raise ResponseFormatError(
                f"{request.endpoint} returned an unexpected body",
                details={"errors": e.error_count()},
            ) from e
