"""Default transport backed by httpx."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Dict, Optional

import httpx

from ..constants import DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT_S
from .base import HttpRequest, HttpResponse, Transport, TransportReply

LOGGER = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """Sends XML-RPC requests with ``httpx``.

    Blocking calls share one ``httpx.Client``. Asynchronous calls use the
    injected ``httpx.AsyncClient`` when given, otherwise a client scoped to the
    call so that no connection pool is tied to a particular event loop.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
        headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.Client] = None,
        async_client: Optional[httpx.AsyncClient] = None,
        executor: Optional[Executor] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._timeout = timeout
        self._headers = dict(headers or {})
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, headers=self._headers)
        self._async_client = async_client
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="xmlrpc-proxy"
        )
        self._logger = logger or LOGGER

    @property
    def executor(self) -> Executor:
        return self._executor

    def send(self, request: HttpRequest) -> TransportReply:
        response = self._client.request(
            request.method,
            request.url,
            content=request.body,
            headers=request.headers,
        )
        return self._convert(response)

    async def send_async(self, request: HttpRequest) -> TransportReply:
        if self._async_client is not None:
            response = await self._async_client.request(
                request.method,
                request.url,
                content=request.body,
                headers=request.headers,
            )
            return self._convert(response)

        async with httpx.AsyncClient(timeout=self._timeout, headers=self._headers) as client:
            response = await client.request(
                request.method,
                request.url,
                content=request.body,
                headers=request.headers,
            )
        return self._convert(response)

    def _convert(self, response: httpx.Response) -> TransportReply:
        self._logger.debug(
            "Received HTTP response",
            extra={"url": str(response.url), "statusCode": response.status_code, "bytes": len(response.content)},
        )
        converted = HttpResponse(
            status_code=response.status_code,
            url=str(response.url),
            headers=dict(response.headers),
            reason=response.reason_phrase,
        )
        return (response.content or None), converted

    def close(self) -> None:
        """Release the blocking client and executor unless they were injected."""
        if self._owns_client:
            self._client.close()
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
