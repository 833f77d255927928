"""Error taxonomy for XML-RPC calls.

Two families are exposed. ``ResponseParsingError`` is raised while reading a
``methodResponse`` document. ``ServerProxyError`` is what a caller of
``ServerProxy`` receives; parsing errors reach callers wrapped in
``ResponseParsingFailedError``.
"""

from __future__ import annotations

from typing import Optional


class XmlRpcClientError(Exception):
    """Base class for all errors raised by this package."""


class RequestEncodingError(XmlRpcClientError):
    """Raised when a call parameter cannot be encoded; nothing is sent."""


# --- Response parsing -----------------------------------------------------------------


class ResponseParsingError(XmlRpcClientError):
    """Base class for errors reading an XML-RPC response document."""


class MalformedResponseError(ResponseParsingError):
    """The body is not XML, or does not follow the methodResponse grammar."""

    def __init__(self, detail: str = "malformed XML-RPC response") -> None:
        super().__init__(detail)
        self.detail = detail


class DecodingError(ResponseParsingError):
    """The response is well formed but its value does not decode to the requested type."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause


class FaultError(ResponseParsingError):
    """The server answered with an XML-RPC fault."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"<Fault {code}: {message!r}>")
        self.code = code
        self.message = message


# --- Client-facing --------------------------------------------------------------------


class ServerProxyError(XmlRpcClientError):
    """Base class for every failure outcome of ``ServerProxy.execute``."""


class ResponseParsingFailedError(ServerProxyError):
    """Wraps a ``ResponseParsingError`` raised while reading a 200 response."""

    def __init__(self, error: ResponseParsingError) -> None:
        super().__init__(str(error))
        self.error = error


class NoDataError(ServerProxyError):
    """HTTP 200 arrived without a body."""

    def __init__(self) -> None:
        super().__init__("HTTP 200 response carried no body")


class HTTPNotOKError(ServerProxyError):
    """The server replied with a status other than 200."""

    def __init__(self, response) -> None:
        super().__init__(f"HTTP status {response.status_code}")
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code


class NetworkError(ServerProxyError):
    """No usable HTTP response reached the client."""

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__(str(cause) if cause is not None else "no HTTP response")
        self.cause = cause


class InternalInconsistencyError(ServerProxyError):
    """Response parsing raised something outside its contracted error set."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"unexpected error while parsing response: {cause!r}")
        self.cause = cause
