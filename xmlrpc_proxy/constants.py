"""Shared constants for building and reading XML-RPC documents."""

METHOD_CALL = "methodCall"
METHOD_NAME = "methodName"
METHOD_RESPONSE = "methodResponse"
PARAMS = "params"
PARAM = "param"
VALUE = "value"
FAULT = "fault"

STRUCT = "struct"
MEMBER = "member"
NAME = "name"
ARRAY = "array"
DATA = "data"

INT_TAGS = ("i4", "int", "i8")
BOOLEAN = "boolean"
STRING = "string"
DOUBLE = "double"
DATETIME = "dateTime.iso8601"
BASE64 = "base64"
NIL = "nil"

FAULT_CODE = "faultCode"
FAULT_STRING = "faultString"

CONTENT_TYPE = "text/xml"
XML_VERSION = "1.0"
ENCODING = "UTF-8"

DATETIME_FORMAT = "%Y%m%dT%H:%M:%S"
DATETIME_INPUT_FORMATS = (
    "%Y%m%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y%m%dT%H%M%S",
)

MAXINT = 2**31 - 1
MININT = -(2**31)

DEFAULT_TIMEOUT_S = 30.0
DEFAULT_MAX_WORKERS = 4
