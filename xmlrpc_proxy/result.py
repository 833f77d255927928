from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .exceptions import ServerProxyError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one XML-RPC call: a decoded value or a ``ServerProxyError``.

    ``value`` may legitimately be ``None`` (a decoded ``<nil/>``), so success is
    signalled by the absence of ``error``.
    """

    value: Optional[T] = None
    error: Optional[ServerProxyError] = None

    def __post_init__(self) -> None:
        if self.error is not None and self.value is not None:
            raise ValueError("a Result holds either a value or an error, not both")

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ServerProxyError) -> "Result[T]":
        if error is None:
            raise ValueError("failure requires an error")
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    def get(self) -> T:
        """Return the value, or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def __bool__(self) -> bool:
        return self.is_success


ResultCallback = Callable[[Result], None]
