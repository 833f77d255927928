"""Client side of an XML-RPC exchange.

``ServerProxy`` turns a method name and parameters into one HTTP POST and
classifies the outcome into a ``Result``. Every failure reaching the caller is
one of the ``ServerProxyError`` subclasses; nothing is retried.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Optional, Sequence

from .coding import Coder, XmlRpcCoder
from .constants import CONTENT_TYPE
from .exceptions import (
    HTTPNotOKError,
    InternalInconsistencyError,
    NetworkError,
    NoDataError,
    ResponseParsingError,
    ResponseParsingFailedError,
)
from .request import Request
from .response import parse_response
from .result import Result, ResultCallback
from .transport import HttpRequest, HttpResponse, HttpxTransport, Transport

LOGGER = logging.getLogger(__name__)


class ServerProxy:
    """Calls methods on the XML-RPC server at ``url``.

    Three call shapes share the same classification:

    * ``execute`` blocks and returns a ``Result``;
    * ``execute_async`` is a coroutine returning a ``Result``;
    * ``execute_with_callback`` returns a ``Future`` at once and hands the
      ``Result`` to ``callback`` on the transport's executor.

    Attribute access builds method stubs, so ``proxy.examples.getStateName(41)``
    is the same as ``proxy.execute("examples.getStateName", [41])``. Remote
    methods whose names collide with attributes of this class must be called
    through ``execute``.

    The proxy holds no per-call state and may be shared between threads as
    long as its coder and transport can.
    """

    def __init__(
        self,
        url: str,
        *,
        transport: Optional[Transport] = None,
        coder: Optional[Coder] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not url:
            raise ValueError("url is required")
        self._url = url
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport()
        self._coder = coder or XmlRpcCoder()
        self._logger = logger or LOGGER

    @property
    def url(self) -> str:
        return self._url

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def coder(self) -> Coder:
        return self._coder

    # --- Execution ------------------------------------------------------------------------

    def execute(
        self,
        method_name: str,
        params: Optional[Sequence[Any]] = None,
        *,
        result_type: Any = Any,
    ) -> Result:
        """Make an XML-RPC call and wait for its outcome.

        Raises ``RequestEncodingError`` before sending anything if a parameter
        cannot be encoded; every other failure is returned in the ``Result``.
        """

        request = self.build_request(method_name, params)
        return self._exchange(request, result_type)

    async def execute_async(
        self,
        method_name: str,
        params: Optional[Sequence[Any]] = None,
        *,
        result_type: Any = Any,
    ) -> Result:
        request = self.build_request(method_name, params)
        try:
            body, response = await self._transport.send_async(request)
        except Exception as exc:  # noqa: BLE001
            return self.handle_response(None, None, exc, result_type)
        return self.handle_response(body, response, None, result_type)

    def execute_with_callback(
        self,
        method_name: str,
        params: Optional[Sequence[Any]] = None,
        callback: Optional[ResultCallback] = None,
        *,
        result_type: Any = Any,
    ) -> "Future[Result]":
        request = self.build_request(method_name, params)

        def run() -> Result:
            result = self._exchange(request, result_type)
            if callback is not None:
                callback(result)
            return result

        return self._transport.executor.submit(run)

    def build_request(self, method_name: str, params: Optional[Sequence[Any]] = None) -> HttpRequest:
        body = Request(method_name, params, self._coder).to_bytes()
        self._logger.debug(
            "Prepared XML-RPC request",
            extra={"methodName": method_name, "url": self._url, "bytes": len(body)},
        )
        return HttpRequest(url=self._url, body=body, headers={"Content-Type": CONTENT_TYPE})

    def _exchange(self, request: HttpRequest, result_type: Any) -> Result:
        try:
            body, response = self._transport.send(request)
        except Exception as exc:  # noqa: BLE001
            return self.handle_response(None, None, exc, result_type)
        return self.handle_response(body, response, None, result_type)

    # --- Classification -------------------------------------------------------------------

    def handle_response(
        self,
        body: Optional[bytes],
        response: Any,
        error: Optional[BaseException],
        result_type: Any = Any,
    ) -> Result:
        """Classify the raw outcome of one HTTP exchange."""

        if error is not None or response is None:
            self._logger.warning(
                "XML-RPC request failed before a response arrived",
                extra={"url": self._url, "error": repr(error)},
            )
            return Result.failure(NetworkError(error))
        if not isinstance(response, HttpResponse):
            self._logger.warning("Transport returned a non-HTTP response", extra={"url": self._url})
            return Result.failure(NetworkError(None))
        if response.status_code != 200:
            self._logger.warning(
                "XML-RPC server returned HTTP error",
                extra={"url": self._url, "statusCode": response.status_code},
            )
            return Result.failure(HTTPNotOKError(response))
        if body is None:
            return Result.failure(NoDataError())

        try:
            value = parse_response(body, result_type, self._coder)
        except ResponseParsingError as exc:
            self._logger.debug("XML-RPC response parsing failed", extra={"url": self._url, "error": str(exc)})
            return Result.failure(ResponseParsingFailedError(exc))
        except Exception as exc:  # noqa: BLE001
            self._logger.exception("Coder raised an unexpected error", extra={"url": self._url})
            return Result.failure(InternalInconsistencyError(exc))
        return Result.success(value)

    # --- Method stubs ---------------------------------------------------------------------

    def __getattr__(self, name: str) -> "_Method":
        if name.startswith("_"):
            raise AttributeError(name)
        return _Method(self, name)

    def __enter__(self) -> "ServerProxy":
        return self

    def __exit__(self, *exc_info) -> None:
        # Injected transports belong to the caller.
        if not self._owns_transport:
            return
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()

    def __repr__(self) -> str:
        return f"<ServerProxy for {self._url}>"


class _Method:
    """A remote method name bound to a proxy; forwards every call to it."""

    def __init__(self, proxy: ServerProxy, name: str, result_type: Any = Any) -> None:
        self._proxy = proxy
        self._name = name
        self._result_type = result_type

    def __getattr__(self, name: str) -> "_Method":
        if name.startswith("_"):
            raise AttributeError(name)
        return _Method(self._proxy, f"{self._name}.{name}", self._result_type)

    def returning(self, result_type: Any) -> "_Method":
        return _Method(self._proxy, self._name, result_type)

    def __call__(self, *params: Any) -> Result:
        return self._proxy.execute(self._name, params or None, result_type=self._result_type)

    async def call_async(self, *params: Any) -> Result:
        return await self._proxy.execute_async(self._name, params or None, result_type=self._result_type)

    def with_callback(self, callback: Optional[ResultCallback], *params: Any) -> "Future[Result]":
        return self._proxy.execute_with_callback(
            self._name, params or None, callback, result_type=self._result_type
        )

    def __repr__(self) -> str:
        return f"<XML-RPC method {self._name!r}>"
