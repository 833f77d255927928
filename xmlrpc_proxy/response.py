"""Reading XML-RPC ``methodResponse`` documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from lxml import etree

from . import constants as c
from .coding import Coder, TypeMismatchError, ValueDecodingError, XmlRpcCoder
from .exceptions import DecodingError, FaultError, MalformedResponseError

Document = Union[etree._ElementTree, etree._Element]


@dataclass
class _Fault:
    faultCode: int
    faultString: str


def _make_parser() -> etree.XMLParser:
    # lxml parsers are not safe to share between threads.
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


def _single_child(element: etree._Element, name: Optional[str] = None) -> etree._Element:
    """Return the only element child of ``element``, optionally requiring its tag."""

    children = [child for child in element if isinstance(child.tag, str)]
    if len(children) != 1:
        raise MalformedResponseError(
            f"<{element.tag}> must contain exactly one element, found {len(children)}"
        )
    child = children[0]
    if name is not None and child.tag != name:
        raise MalformedResponseError(f"expected <{name}> inside <{element.tag}>, found <{child.tag}>")
    if (element.text or "").strip() or (child.tail or "").strip():
        raise MalformedResponseError(f"unexpected text inside <{element.tag}>")
    return child


def _value_node(container: etree._Element) -> etree._Element:
    """Return the type node of a ``<value>``, or the ``<value>`` itself for an implicit string."""

    children = [child for child in container if isinstance(child.tag, str)]
    if not children:
        return container
    return _single_child(container)


def load_document(data: Union[bytes, str]) -> etree._ElementTree:
    """Parse raw response content; anything that is not XML is a malformed response."""

    if isinstance(data, str):
        data = data.encode(c.ENCODING)
    try:
        root = etree.fromstring(data, parser=_make_parser())
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise MalformedResponseError(f"response is not well-formed XML: {exc}") from exc
    if root is None:
        raise MalformedResponseError("response is empty")
    return etree.ElementTree(root)


def parse_response_document(
    document: Document,
    result_type: Any = Any,
    coder: Optional[Coder] = None,
) -> Any:
    """Walk the methodResponse grammar and decode the returned value.

    Raises ``FaultError`` for a fault response, ``MalformedResponseError`` when
    the document does not follow the grammar, and ``DecodingError`` when the
    value cannot be decoded into ``result_type``. Other exceptions raised by
    ``coder`` propagate unchanged.
    """

    coder = coder or XmlRpcCoder()
    root = document.getroot() if isinstance(document, etree._ElementTree) else document
    if root is None or root.tag != c.METHOD_RESPONSE:
        raise MalformedResponseError(
            f"root element must be <{c.METHOD_RESPONSE}>"
            + (f", found <{root.tag}>" if root is not None else "")
        )
    body = _single_child(root)

    if body.tag == c.FAULT:
        fault_node = _value_node(_single_child(body, c.VALUE))
        if fault_node.tag != c.STRUCT:
            raise MalformedResponseError(f"fault value must be a <{c.STRUCT}>, found <{fault_node.tag}>")
        try:
            fault = coder.decode(_Fault, fault_node)
        except ValueDecodingError as exc:
            raise DecodingError(exc) from exc
        if not c.MININT <= fault.faultCode <= c.MAXINT:
            raise DecodingError(
                TypeMismatchError(
                    f"faultCode {fault.faultCode} does not fit in a 32-bit integer",
                    expected_type=int,
                    path=[c.FAULT_CODE],
                )
            )
        raise FaultError(fault.faultCode, fault.faultString)

    if body.tag != c.PARAMS:
        raise MalformedResponseError(f"expected <{c.PARAMS}> or <{c.FAULT}>, found <{body.tag}>")
    param = _single_child(body, c.PARAM)
    value = _value_node(_single_child(param, c.VALUE))

    try:
        return coder.decode(result_type, value)
    except ValueDecodingError as exc:
        raise DecodingError(exc) from exc


def parse_response(
    data: Union[bytes, str, etree._ElementTree, etree._Element],
    result_type: Any = Any,
    coder: Optional[Coder] = None,
) -> Any:
    """Parse a response given as bytes, text, or an already parsed document."""

    if isinstance(data, (bytes, bytearray, str)):
        document: Document = load_document(bytes(data) if isinstance(data, bytearray) else data)
    else:
        document = data
    return parse_response_document(document, result_type, coder)
