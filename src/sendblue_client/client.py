from __future__ import annotations

import logging
from types import TracebackType
from typing import Final, Protocol

import httpx
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from .config import DEFAULT_ENDPOINT, DEFAULT_REGION, DEFAULT_TIMEOUT, Settings, get_settings
from .errors import (
    RemoteRejectedError,
    RequestConstructionError,
    ResponseParseError,
    ResponseReadError,
    TransportError,
)
from .phone import normalize
from .sms import Message, MessageResponse

logger = logging.getLogger(__name__)

API_KEY_HEADER: Final[str] = "sb-api-key-id"
SECRET_KEY_HEADER: Final[str] = "sb-api-secret-key"


class Transport(Protocol):
    """
    Anything that performs one HTTP request and returns one response (e.g. httpx.Client).

    Implementations must signal failures with httpx exceptions; only those are
    mapped onto this package's errors.
    """

    def send(self, request: httpx.Request, *, stream: bool = ...) -> httpx.Response: ...


class AsyncTransport(Protocol):
    """Async counterpart of Transport; the same httpx exception rule applies."""

    async def send(self, request: httpx.Request, *, stream: bool = ...) -> httpx.Response: ...


class _BaseClient:
    def __init__(
        self,
        api_key: str,
        secret_key: str,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        default_region: str = DEFAULT_REGION,
    ) -> None:
        self.api_key = api_key
        self.secret_key = secret_key
        self.endpoint = endpoint
        self.default_region = default_region

    def __repr__(self) -> str:
        # Never show the credentials
        return f"{type(self).__name__}(endpoint={self.endpoint!r})"

    def _build_message(self, to: str, body: str) -> Message:
        return Message(number=normalize(to, self.default_region), content=body)

    def _build_request(self, message: Message) -> httpx.Request:
        try:
            payload = message.model_dump_json().encode("utf-8")
        except (PydanticSerializationError, UnicodeEncodeError) as exc:
            raise RequestConstructionError(f"failed to marshal request body: {exc}") from exc

        try:
            return httpx.Request(
                "POST",
                self.endpoint,
                headers={
                    API_KEY_HEADER: self.api_key,
                    SECRET_KEY_HEADER: self.secret_key,
                    "Content-Type": "application/json",
                },
                content=payload,
            )
        except (httpx.InvalidURL, ValueError) as exc:
            raise RequestConstructionError(f"failed to create post request: {exc}") from exc

    def _parse_response(self, status_code: int, body: bytes) -> MessageResponse:
        logger.debug("Sendblue responded with HTTP %s (%d bytes)", status_code, len(body))
        try:
            mresp = MessageResponse.model_validate_json(body)
        except ValidationError as exc:
            raise ResponseParseError(
                f"failed to unmarshal response body: {exc}",
                status_code=status_code,
                body=body,
            ) from exc

        if mresp.is_error:
            logger.warning(
                "Sendblue rejected message (error_code=%s, handle=%s)",
                mresp.error_code or "-",
                mresp.message_handle or "-",
            )
            raise RemoteRejectedError(mresp, status_code=status_code)

        return mresp


class Client(_BaseClient):
    """
    Blocking Sendblue client.

    Holds the key pair and an HTTP transport and is never mutated after
    construction, so one instance can be shared between threads as long as
    the transport is thread safe (httpx.Client is).

    Each call performs exactly one request; retries are up to the caller.
    """

    def __init__(
        self,
        api_key: str,
        secret_key: str,
        http_client: Transport | None = None,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        default_region: str = DEFAULT_REGION,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(api_key, secret_key, endpoint=endpoint, default_region=default_region)
        self._owns_transport = http_client is None
        self.http_client: Transport = (
            httpx.Client(timeout=timeout) if http_client is None else http_client
        )

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, http_client: Transport | None = None
    ) -> Client:
        settings = settings or get_settings()
        api_key, secret_key = settings.require_credentials()
        return cls(
            api_key,
            secret_key,
            http_client,
            endpoint=settings.sendblue_endpoint,
            default_region=settings.default_region,
            timeout=settings.timeout,
        )

    def send_message(self, to: str, body: str) -> str:
        """
        Send `body` to the phone number `to`.

        `to` is normalized to E.164 first (no request is made if that fails).
        Returns the number Sendblue actually sent the message from.
        """
        message = self._build_message(to, body)
        return self.send(message).from_number

    def send(self, message: Message) -> MessageResponse:
        """Post an already-normalized message and return Sendblue's full reply."""
        request = self._build_request(message)
        logger.debug("POST %s", request.url)

        try:
            response = self.http_client.send(request, stream=True)
        except httpx.TransportError as exc:
            raise TransportError(f"failed to perform request: {exc}") from exc

        try:
            body = response.read()
        except (httpx.RequestError, httpx.StreamError) as exc:
            raise ResponseReadError(
                f"failed to read response body: {exc}", status_code=response.status_code
            ) from exc
        finally:
            response.close()

        return self._parse_response(response.status_code, body)

    def close(self) -> None:
        # Only close transports we created ourselves
        if self._owns_transport and isinstance(self.http_client, httpx.Client):
            self.http_client.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class AsyncClient(_BaseClient):
    """
    Same contract as Client, over httpx.AsyncClient.

    Cancelling the awaiting task aborts the in-flight request; timeouts
    surface as TransportError.
    """

    def __init__(
        self,
        api_key: str,
        secret_key: str,
        http_client: AsyncTransport | None = None,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        default_region: str = DEFAULT_REGION,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(api_key, secret_key, endpoint=endpoint, default_region=default_region)
        self._owns_transport = http_client is None
        self.http_client: AsyncTransport = (
            httpx.AsyncClient(timeout=timeout) if http_client is None else http_client
        )

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, http_client: AsyncTransport | None = None
    ) -> AsyncClient:
        settings = settings or get_settings()
        api_key, secret_key = settings.require_credentials()
        return cls(
            api_key,
            secret_key,
            http_client,
            endpoint=settings.sendblue_endpoint,
            default_region=settings.default_region,
            timeout=settings.timeout,
        )

    async def send_message(self, to: str, body: str) -> str:
        message = self._build_message(to, body)
        mresp = await self.send(message)
        return mresp.from_number

    async def send(self, message: Message) -> MessageResponse:
        request = self._build_request(message)
        logger.debug("POST %s", request.url)

        try:
            response = await self.http_client.send(request, stream=True)
        except httpx.TransportError as exc:
            raise TransportError(f"failed to perform request: {exc}") from exc

        try:
            body = await response.aread()
        except (httpx.RequestError, httpx.StreamError) as exc:
            raise ResponseReadError(
                f"failed to read response body: {exc}", status_code=response.status_code
            ) from exc
        finally:
            await response.aclose()

        return self._parse_response(response.status_code, body)

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self.http_client, httpx.AsyncClient):
            await self.http_client.aclose()

    async def __aenter__(self) -> AsyncClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
