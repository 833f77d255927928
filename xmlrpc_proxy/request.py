"""Construction of XML-RPC ``methodCall`` documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from lxml import etree

from . import constants as c
from .coding import Coder, ValueEncodingError, XmlRpcCoder
from .exceptions import RequestEncodingError


@dataclass(frozen=True)
class Request:
    """A single XML-RPC call.

    ``params`` of ``None`` omits the ``<params>`` element entirely; an empty
    sequence produces an empty ``<params/>``. Parameter order is preserved.
    """

    method_name: str
    params: Optional[Sequence[Any]] = None
    coder: Coder = field(default_factory=XmlRpcCoder, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.method_name, str) or not self.method_name:
            raise ValueError("method_name must be a non-empty string")
        if self.params is not None:
            object.__setattr__(self, "params", tuple(self.params))

    def encoded(self) -> etree._ElementTree:
        """Return the request as an lxml document.

        Raises ``RequestEncodingError`` when any parameter cannot be encoded.
        """

        root = etree.Element(c.METHOD_CALL)
        method_name = etree.SubElement(root, c.METHOD_NAME)
        try:
            method_name.text = self.method_name
        except ValueError as exc:
            raise RequestEncodingError(f"invalid method name {self.method_name!r}") from exc

        if self.params is not None:
            params = etree.SubElement(root, c.PARAMS)
            for index, value in enumerate(self.params):
                param = etree.SubElement(params, c.PARAM)
                container = etree.SubElement(param, c.VALUE)
                try:
                    container.append(self.coder.encode(value))
                except ValueEncodingError as exc:
                    raise RequestEncodingError(
                        f"cannot encode parameter {index} of {self.method_name!r}: {exc}"
                    ) from exc

        return etree.ElementTree(root)

    def to_bytes(self) -> bytes:
        """Serialise the request as a UTF-8 document with an XML 1.0 declaration."""

        return etree.tostring(self.encoded(), xml_declaration=True, encoding=c.ENCODING)
