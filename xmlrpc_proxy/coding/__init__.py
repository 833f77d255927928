from .base import (
    Coder,
    DataCorruptedError,
    KeyNotFoundError,
    TypeMismatchError,
    ValueDecodingError,
    ValueEncodingError,
)
from .xmlrpc import XmlRpcCoder

__all__ = [
    "Coder",
    "DataCorruptedError",
    "KeyNotFoundError",
    "TypeMismatchError",
    "ValueDecodingError",
    "ValueEncodingError",
    "XmlRpcCoder",
]
