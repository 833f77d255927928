from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..constants import CONTENT_TYPE


@dataclass(frozen=True)
class HttpRequest:
    """A single HTTP exchange requested by the client."""

    url: str
    body: bytes
    headers: Dict[str, str] = field(default_factory=lambda: {"Content-Type": CONTENT_TYPE})
    method: str = "POST"


@dataclass(frozen=True)
class HttpResponse:
    """Status line and headers of a received HTTP response."""

    status_code: int
    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    reason: str = ""


TransportReply = Tuple[Optional[bytes], Any]


class Transport(ABC):
    """Interface for performing the HTTP exchange of an XML-RPC call.

    Implementations raise on transport failure (unreachable host, timeout,
    cancellation). A reply is a ``(body, response)`` pair where ``body`` is
    ``None`` when the response carried no content.
    """

    @abstractmethod
    def send(self, request: HttpRequest) -> TransportReply:
        """Perform the exchange, blocking until the response arrives."""

    @abstractmethod
    async def send_async(self, request: HttpRequest) -> TransportReply:
        """Perform the exchange without blocking the event loop."""

    @property
    @abstractmethod
    def executor(self) -> Executor:
        """Executor on which callback-style calls run and complete."""
