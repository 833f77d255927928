from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Union

from lxml import etree

PathEntry = Union[str, int]


class ValueEncodingError(TypeError):
    """Raised when a Python value has no XML-RPC representation."""


class ValueDecodingError(ValueError):
    """Raised when an XML-RPC value cannot be decoded to the requested type."""

    def __init__(
        self,
        message: str,
        *,
        expected_type: Any = None,
        path: Optional[Sequence[PathEntry]] = None,
    ) -> None:
        self.expected_type = expected_type
        self.path: List[PathEntry] = list(path or [])
        location = "".join(f"[{entry!r}]" for entry in self.path)
        super().__init__(f"{message} at {location}" if location else message)


class TypeMismatchError(ValueDecodingError):
    """The XML-RPC type of a value does not match the requested type."""


class KeyNotFoundError(ValueDecodingError):
    """A struct lacks a member required by the requested type."""


class DataCorruptedError(ValueDecodingError):
    """A value's text is not valid for its declared XML-RPC type."""


class Coder(ABC):
    """Interface for converting between Python values and XML-RPC value nodes."""

    @abstractmethod
    def encode(self, value: Any) -> etree._Element:
        """Return the type node (the child of ``<value>``) representing ``value``."""

    @abstractmethod
    def decode(self, result_type: Any, element: etree._Element) -> Any:
        """Decode a type node (or a bare ``<value>`` element) into ``result_type``.

        Type and shape failures must be raised as ``ValueDecodingError`` (or a
        subclass); callers report those as decoding errors. Any other exception
        is treated as a defect in the coder.
        """
