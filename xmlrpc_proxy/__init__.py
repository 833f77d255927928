"""XML-RPC client: request building, response parsing and call orchestration."""

from .coding import Coder, XmlRpcCoder
from .exceptions import (
    DecodingError,
    FaultError,
    HTTPNotOKError,
    InternalInconsistencyError,
    MalformedResponseError,
    NetworkError,
    NoDataError,
    RequestEncodingError,
    ResponseParsingError,
    ResponseParsingFailedError,
    ServerProxyError,
    XmlRpcClientError,
)
from .proxy import ServerProxy
from .request import Request
from .response import load_document, parse_response, parse_response_document
from .result import Result
from .transport import HttpRequest, HttpResponse, HttpxTransport, Transport

__version__ = "0.1.0"

__all__ = [
    "Coder",
    "DecodingError",
    "FaultError",
    "HTTPNotOKError",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "InternalInconsistencyError",
    "MalformedResponseError",
    "NetworkError",
    "NoDataError",
    "Request",
    "RequestEncodingError",
    "ResponseParsingError",
    "ResponseParsingFailedError",
    "Result",
    "ServerProxy",
    "ServerProxyError",
    "Transport",
    "XmlRpcClientError",
    "XmlRpcCoder",
    "load_document",
    "parse_response",
    "parse_response_document",
]
