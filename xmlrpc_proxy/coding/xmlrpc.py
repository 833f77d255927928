"""Default XML-RPC value codec built on lxml.

Encoding dispatches on the Python type of the value. Decoding is driven by the
requested result type: scalars, ``list``/``tuple``/``dict`` generics,
``Optional`` unions and dataclasses are understood; ``typing.Any`` yields the
natural Python value for whatever the server sent.
"""

from __future__ import annotations

import base64
import binascii
import collections.abc
import dataclasses
import datetime
import math
import types
from functools import singledispatchmethod
from typing import Any, Dict, List, Set, Tuple, Union, get_args, get_origin, get_type_hints

from lxml import etree

from .. import constants as c
from .base import (
    Coder,
    DataCorruptedError,
    KeyNotFoundError,
    PathEntry,
    TypeMismatchError,
    ValueDecodingError,
    ValueEncodingError,
)

_UNION_TYPES = tuple(t for t in (Union, getattr(types, "UnionType", None)) if t is not None)
_NoneType = type(None)


def _type_name(result_type: Any) -> str:
    return getattr(result_type, "__name__", None) or repr(result_type)


def _element_children(element: etree._Element) -> List[etree._Element]:
    # Comments and processing instructions have non-string tags.
    return [child for child in element if isinstance(child.tag, str)]


def _leaf(tag: str, text: str) -> etree._Element:
    element = etree.Element(tag)
    try:
        element.text = text
    except ValueError as exc:
        raise ValueEncodingError(f"string is not representable in XML: {text!r}") from exc
    return element


class XmlRpcCoder(Coder):
    """Standard XML-RPC codec.

    ``allow_none`` enables the common ``<nil/>`` extension in both directions;
    without it ``None`` cannot be encoded. ``<nil/>`` is always accepted when
    decoding into an ``Optional`` type or ``Any``.
    """

    def __init__(self, *, allow_none: bool = False) -> None:
        self._allow_none = allow_none

    @property
    def allow_none(self) -> bool:
        return self._allow_none

    # --- Encoding -------------------------------------------------------------------------

    def encode(self, value: Any) -> etree._Element:
        return self._encode(value, set())

    def _wrap(self, value: Any, memo: Set[int]) -> etree._Element:
        wrapper = etree.Element(c.VALUE)
        wrapper.append(self._encode(value, memo))
        return wrapper

    @singledispatchmethod
    def _encode(self, value: Any, memo: Set[int]) -> etree._Element:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            # Unset optional fields are left out unless <nil/> is enabled.
            members = {
                field.name: getattr(value, field.name)
                for field in dataclasses.fields(value)
                if self._allow_none or getattr(value, field.name) is not None
            }
            return self._encode_struct(value, members, memo)
        raise ValueEncodingError(f"cannot marshal {type(value).__name__} objects")

    @_encode.register(type(None))
    def _(self, value: None, memo: Set[int]) -> etree._Element:
        if not self._allow_none:
            raise ValueEncodingError("cannot marshal None unless allow_none is enabled")
        return etree.Element(c.NIL)

    @_encode.register(bool)
    def _(self, value: bool, memo: Set[int]) -> etree._Element:
        return _leaf(c.BOOLEAN, "1" if value else "0")

    @_encode.register(int)
    def _(self, value: int, memo: Set[int]) -> etree._Element:
        if not c.MININT <= value <= c.MAXINT:
            raise ValueEncodingError(f"int {value} exceeds XML-RPC limits")
        return _leaf("i4", str(int(value)))

    @_encode.register(float)
    def _(self, value: float, memo: Set[int]) -> etree._Element:
        if not math.isfinite(value):
            raise ValueEncodingError(f"double {value!r} has no XML-RPC representation")
        return _leaf(c.DOUBLE, repr(value))

    @_encode.register(str)
    def _(self, value: str, memo: Set[int]) -> etree._Element:
        return _leaf(c.STRING, value)

    @_encode.register(bytes)
    @_encode.register(bytearray)
    def _(self, value: bytes, memo: Set[int]) -> etree._Element:
        return _leaf(c.BASE64, base64.b64encode(bytes(value)).decode("ascii"))

    @_encode.register(datetime.date)
    def _(self, value: datetime.date, memo: Set[int]) -> etree._Element:
        if not isinstance(value, datetime.datetime):
            value = datetime.datetime(value.year, value.month, value.day)
        return _leaf(c.DATETIME, value.strftime(c.DATETIME_FORMAT))

    @_encode.register(list)
    @_encode.register(tuple)
    def _(self, value: collections.abc.Sequence, memo: Set[int]) -> etree._Element:
        self._enter(value, memo)
        array = etree.Element(c.ARRAY)
        data = etree.SubElement(array, c.DATA)
        for item in value:
            data.append(self._wrap(item, memo))
        memo.discard(id(value))
        return array

    @_encode.register(dict)
    def _(self, value: Dict[str, Any], memo: Set[int]) -> etree._Element:
        return self._encode_struct(value, value, memo)

    def _encode_struct(self, owner: Any, members: Dict[Any, Any], memo: Set[int]) -> etree._Element:
        self._enter(owner, memo)
        struct = etree.Element(c.STRUCT)
        for key, item in members.items():
            if not isinstance(key, str):
                raise ValueEncodingError(f"struct keys must be strings, got {type(key).__name__}")
            member = etree.SubElement(struct, c.MEMBER)
            member.append(_leaf(c.NAME, key))
            member.append(self._wrap(item, memo))
        memo.discard(id(owner))
        return struct

    @staticmethod
    def _enter(value: Any, memo: Set[int]) -> None:
        if id(value) in memo:
            raise ValueEncodingError("cannot marshal recursive structures")
        memo.add(id(value))

    # --- Decoding -------------------------------------------------------------------------

    def decode(self, result_type: Any, element: etree._Element) -> Any:
        return self._decode(result_type, element, [])

    def _decode(self, result_type: Any, element: etree._Element, path: List[PathEntry]) -> Any:
        node = self._type_node(element, path)
        tag = node.tag

        if result_type is Any or result_type is object:
            return self._decode_natural(node, path)

        origin = get_origin(result_type)
        if origin in _UNION_TYPES:
            return self._decode_union(result_type, node, path)

        if tag == c.NIL:
            raise TypeMismatchError(
                f"expected {_type_name(result_type)} but found nil",
                expected_type=result_type,
                path=path,
            )

        if origin is not None:
            return self._decode_generic(result_type, origin, node, path)
        if result_type is list or result_type is tuple:
            return result_type(self._decode_array(Any, node, path, result_type))
        if result_type is dict:
            return self._decode_mapping(Any, node, path, result_type)
        if dataclasses.is_dataclass(result_type) and isinstance(result_type, type):
            return self._decode_dataclass(result_type, node, path)
        return self._decode_scalar(result_type, node, path)

    def _type_node(self, element: etree._Element, path: List[PathEntry]) -> etree._Element:
        if element.tag != c.VALUE:
            return element
        children = _element_children(element)
        if not children:
            # A <value> without a type element holds an implicit string.
            implicit = etree.Element(c.STRING)
            implicit.text = element.text
            return implicit
        if len(children) > 1:
            raise DataCorruptedError("value holds more than one type element", path=path)
        return children[0]

    def _decode_union(self, result_type: Any, node: etree._Element, path: List[PathEntry]) -> Any:
        args = get_args(result_type)
        if node.tag == c.NIL and _NoneType in args:
            return None
        candidates = [arg for arg in args if arg is not _NoneType]
        for candidate in candidates[:-1]:
            try:
                return self._decode(candidate, node, path)
            except ValueDecodingError:
                continue
        if not candidates:
            raise TypeMismatchError(f"expected nil but found {node.tag}", expected_type=result_type, path=path)
        return self._decode(candidates[-1], node, path)

    def _decode_generic(self, result_type: Any, origin: Any, node: etree._Element, path: List[PathEntry]) -> Any:
        args = get_args(result_type)
        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return tuple(self._decode_array(args[0], node, path, result_type))
            items = self._array_values(node, path, result_type)
            if len(items) != len(args):
                raise TypeMismatchError(
                    f"expected an array of {len(args)} items but found {len(items)}",
                    expected_type=result_type,
                    path=path,
                )
            return tuple(
                self._decode(arg, item, path + [index])
                for index, (arg, item) in enumerate(zip(args, items))
            )
        if origin in (list, collections.abc.Sequence, collections.abc.Iterable):
            return self._decode_array(args[0] if args else Any, node, path, result_type)
        if origin in (dict, collections.abc.Mapping):
            key_type = args[0] if args else str
            if key_type not in (str, Any):
                raise TypeMismatchError("struct keys are always strings", expected_type=result_type, path=path)
            return self._decode_mapping(args[1] if len(args) > 1 else Any, node, path, result_type)
        raise TypeMismatchError(
            f"cannot decode into {_type_name(result_type)}", expected_type=result_type, path=path
        )

    def _array_values(self, node: etree._Element, path: List[PathEntry], result_type: Any) -> List[etree._Element]:
        if node.tag != c.ARRAY:
            raise TypeMismatchError(
                f"expected array but found {node.tag}", expected_type=result_type, path=path
            )
        data = _element_children(node)
        if len(data) != 1 or data[0].tag != c.DATA:
            raise DataCorruptedError("array must hold exactly one data element", path=path)
        values = _element_children(data[0])
        for item in values:
            if item.tag != c.VALUE:
                raise DataCorruptedError(f"unexpected <{item.tag}> in array data", path=path)
        return values

    def _decode_array(self, item_type: Any, node: etree._Element, path: List[PathEntry], result_type: Any) -> List[Any]:
        return [
            self._decode(item_type, item, path + [index])
            for index, item in enumerate(self._array_values(node, path, result_type))
        ]

    def _struct_members(self, node: etree._Element, path: List[PathEntry], result_type: Any) -> Dict[str, etree._Element]:
        if node.tag != c.STRUCT:
            raise TypeMismatchError(
                f"expected struct but found {node.tag}", expected_type=result_type, path=path
            )
        members: Dict[str, etree._Element] = {}
        for member in _element_children(node):
            parts = {child.tag: child for child in _element_children(member)}
            if member.tag != c.MEMBER or set(parts) != {c.NAME, c.VALUE}:
                raise DataCorruptedError("struct member must hold one name and one value", path=path)
            members[parts[c.NAME].text or ""] = parts[c.VALUE]
        return members

    def _decode_mapping(self, item_type: Any, node: etree._Element, path: List[PathEntry], result_type: Any) -> Dict[str, Any]:
        return {
            name: self._decode(item_type, value, path + [name])
            for name, value in self._struct_members(node, path, result_type).items()
        }

    def _decode_dataclass(self, result_type: type, node: etree._Element, path: List[PathEntry]) -> Any:
        members = self._struct_members(node, path, result_type)
        hints = get_type_hints(result_type)
        kwargs: Dict[str, Any] = {}
        for field in dataclasses.fields(result_type):
            if not field.init:
                continue
            field_type = hints.get(field.name, Any)
            if field.name in members:
                kwargs[field.name] = self._decode(field_type, members[field.name], path + [field.name])
            elif field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING:
                continue
            elif get_origin(field_type) in _UNION_TYPES and _NoneType in get_args(field_type):
                kwargs[field.name] = None
            else:
                raise KeyNotFoundError(
                    f"struct has no member {field.name!r}", expected_type=result_type, path=path
                )
        return result_type(**kwargs)

    def _decode_scalar(self, result_type: Any, node: etree._Element, path: List[PathEntry]) -> Any:
        if result_type is bool:
            accepted: Tuple[str, ...] = (c.BOOLEAN,)
        elif result_type is int:
            accepted = c.INT_TAGS
        elif result_type is float:
            accepted = (c.DOUBLE,) + c.INT_TAGS
        elif result_type is str:
            accepted = (c.STRING,)
        elif result_type in (bytes, bytearray):
            accepted = (c.BASE64,)
        elif result_type in (datetime.datetime, datetime.date):
            accepted = (c.DATETIME,)
        else:
            raise TypeMismatchError(
                f"cannot decode into {_type_name(result_type)}", expected_type=result_type, path=path
            )

        if node.tag not in accepted:
            raise TypeMismatchError(
                f"expected {_type_name(result_type)} but found {node.tag}",
                expected_type=result_type,
                path=path,
            )
        value = self._decode_natural(node, path)
        if result_type is float:
            return float(value)
        if result_type is bytearray:
            return bytearray(value)
        if result_type is datetime.date:
            return value.date()
        return value

    def _decode_natural(self, node: etree._Element, path: List[PathEntry]) -> Any:
        tag = node.tag
        text = node.text or ""
        if tag in c.INT_TAGS:
            return self._parse(int, text.strip(), tag, path)
        if tag == c.BOOLEAN:
            stripped = text.strip()
            if stripped not in ("0", "1"):
                raise DataCorruptedError(f"invalid boolean {text!r}", expected_type=bool, path=path)
            return stripped == "1"
        if tag == c.DOUBLE:
            return self._parse(float, text.strip(), tag, path)
        if tag == c.STRING:
            return text
        if tag == c.BASE64:
            try:
                return base64.b64decode(text.encode("ascii"))
            except (binascii.Error, UnicodeEncodeError) as exc:
                raise DataCorruptedError(f"invalid base64 data: {exc}", expected_type=bytes, path=path) from exc
        if tag == c.DATETIME:
            return self._parse_datetime(text.strip(), path)
        if tag == c.NIL:
            return None
        if tag == c.ARRAY:
            return self._decode_array(Any, node, path, list)
        if tag == c.STRUCT:
            return self._decode_mapping(Any, node, path, dict)
        raise DataCorruptedError(f"unknown XML-RPC type <{tag}>", path=path)

    @staticmethod
    def _parse(convert: type, text: str, tag: str, path: List[PathEntry]) -> Any:
        try:
            return convert(text)
        except ValueError as exc:
            raise DataCorruptedError(f"invalid {tag} value {text!r}", expected_type=convert, path=path) from exc

    @staticmethod
    def _parse_datetime(text: str, path: List[PathEntry]) -> datetime.datetime:
        for fmt in c.DATETIME_INPUT_FORMATS:
            try:
                return datetime.datetime.strptime(text, fmt)
            except ValueError:
                continue
        raise DataCorruptedError(f"invalid dateTime.iso8601 value {text!r}", expected_type=datetime.datetime, path=path)
