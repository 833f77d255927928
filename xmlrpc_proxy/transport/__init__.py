from .base import HttpRequest, HttpResponse, Transport, TransportReply
from .httpx_transport import HttpxTransport

__all__ = [
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "Transport",
    "TransportReply",
]
