import datetime
import math
import unittest
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from lxml import etree

from xmlrpc_proxy.coding import TypeMismatchError, XmlRpcCoder
from xmlrpc_proxy.exceptions import DecodingError, FaultError, MalformedResponseError
from xmlrpc_proxy.response import load_document, parse_response, parse_response_document

FAULT_EXAMPLE = """<?xml version="1.0"?>
<methodResponse>
   <fault>
      <value>
         <struct>
            <member>
               <name>faultCode</name>
               <value><int>4</int></value>
               </member>
            <member>
               <name>faultString</name>
               <value><string>Too many parameters.</string></value>
               </member>
            </struct>
         </value>
      </fault>
   </methodResponse>
"""

SUCCESS_EXAMPLE = """<?xml version="1.0"?>
<methodResponse>
<params>
<param>
<value><string>South Dakota</string></value>
</param>
</params>
</methodResponse>
"""

CONSOLE_COMMAND_EXAMPLE = """<?xml version="1.0"?>
<methodResponse><params><param><value><struct>
<member><name>results</name>
<value><array><data>
<value><struct>
<member><name>success</name><value><int>1</int></value></member>
<member><name>output</name>
<value><array><data>
<value><array><data><value><string></string></value><value><string>print ...</string></value></data></array></value>
<value><array><data><value><string></string></value><value><string>  This is a debugging function.</string></value></data></array></value>
</data></array></value>
</member>
</struct></value>
</data></array></value>
</member>
</struct></value></param></params></methodResponse>
"""


def _wrap_value(inner: str) -> str:
    return f"<methodResponse><params><param><value>{inner}</value></param></params></methodResponse>"


@dataclass
class ConsoleCommandResult:
    success: int
    output: List[List[str]]


@dataclass
class ConsoleCommandResponse:
    results: List[ConsoleCommandResult]


@dataclass
class AllTypes:
    pre_epoch_date: datetime.datetime
    some_data: bytes
    a_string: str
    ints: List[int]
    doubles: List[float]
    bools: List[bool]
    note: Optional[str] = None


class ResponseParsingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.coder = XmlRpcCoder()

    def test_fault_example(self):
        with self.assertRaises(FaultError) as ctx:
            parse_response(FAULT_EXAMPLE, str, self.coder)

        self.assertEqual(ctx.exception.code, 4)
        self.assertEqual(ctx.exception.message, "Too many parameters.")

    def test_success_example(self):
        self.assertEqual(parse_response(SUCCESS_EXAMPLE, str, self.coder), "South Dakota")

    def test_success_example_with_default_coder(self):
        self.assertEqual(parse_response(SUCCESS_EXAMPLE.encode("utf-8"), str), "South Dakota")

    def test_parsed_document_entry_point(self):
        document = load_document(SUCCESS_EXAMPLE)
        self.assertEqual(parse_response_document(document, str), "South Dakota")
        self.assertEqual(parse_response(document.getroot(), str), "South Dakota")

    def test_default_result_type_returns_natural_value(self):
        self.assertEqual(parse_response(SUCCESS_EXAMPLE), "South Dakota")

    def test_implicit_string_value(self):
        self.assertEqual(parse_response(_wrap_value("South Dakota"), str), "South Dakota")

    def test_nested_struct_and_arrays(self):
        response = parse_response(CONSOLE_COMMAND_EXAMPLE, ConsoleCommandResponse, self.coder)

        self.assertEqual(len(response.results), 1)
        result = response.results[0]
        self.assertEqual(result.success, 1)
        self.assertEqual(len(result.output), 2)
        self.assertEqual([line[0] for line in result.output], ["", ""])
        self.assertEqual(result.output[0][1], "print ...")
        self.assertEqual(result.output[1][1], "  This is a debugging function.")

    def test_values_encoded_by_coder_decode_back(self):
        original = AllTypes(
            pre_epoch_date=datetime.datetime(1969, 12, 31, 23, 43, 20),
            some_data="unicode ïåeáî®©†µπœ∑".encode("utf-8"),
            a_string="a string",
            ints=[-1000, 37, 0, 9_999_999],
            doubles=[-1000.0, 37.0, 0.0, math.pi, 2.718281828, -0.3],
            bools=[True, False, False, True],
        )
        inner = etree.tostring(self.coder.encode(original), encoding="unicode")

        decoded = parse_response(_wrap_value(inner), AllTypes, self.coder)

        self.assertEqual(decoded.pre_epoch_date, original.pre_epoch_date)
        self.assertEqual(decoded.some_data, original.some_data)
        self.assertEqual(decoded.a_string, original.a_string)
        self.assertEqual(decoded.ints, original.ints)
        for expected, actual in zip(original.doubles, decoded.doubles):
            self.assertAlmostEqual(expected, actual, places=10)
        self.assertEqual(decoded.bools, original.bools)
        self.assertIsNone(decoded.note)

    def test_type_mismatch_is_decoding_error(self):
        with self.assertRaises(DecodingError) as ctx:
            parse_response(SUCCESS_EXAMPLE, int, self.coder)

        cause = ctx.exception.cause
        self.assertIsInstance(cause, TypeMismatchError)
        self.assertIs(cause.expected_type, int)
        self.assertEqual(cause.path, [])

    def test_nested_decoding_error_reports_path(self):
        body = _wrap_value(
            "<struct><member><name>items</name><value><array><data>"
            "<value><int>1</int></value><value><string>two</string></value>"
            "</data></array></value></member></struct>"
        )
        with self.assertRaises(DecodingError) as ctx:
            parse_response(body, Dict[str, List[int]], self.coder)

        self.assertEqual(ctx.exception.cause.path, ["items", 1])

    def test_empty_body_is_malformed(self):
        for body in ("", b""):
            with self.subTest(body=body), self.assertRaises(MalformedResponseError):
                parse_response(body, str, self.coder)

    def test_invalid_xml_is_malformed(self):
        with self.assertRaises(MalformedResponseError):
            parse_response("<methodResponse><params>", str, self.coder)

    def test_grammar_violations_are_malformed(self):
        bodies = {
            "wrong root": "<methodCall><params/></methodCall>",
            "no child": "<methodResponse/>",
            "two children": "<methodResponse><params/><params/></methodResponse>",
            "unknown child": "<methodResponse><result/></methodResponse>",
            "no param": "<methodResponse><params/></methodResponse>",
            "two params": (
                "<methodResponse><params>"
                "<param><value><int>1</int></value></param>"
                "<param><value><int>2</int></value></param>"
                "</params></methodResponse>"
            ),
            "param without value": "<methodResponse><params><param><int>1</int></param></params></methodResponse>",
            "value with two types": _wrap_value("<int>1</int><int>2</int>"),
            "fault without value": "<methodResponse><fault/></methodResponse>",
            "fault value not struct": "<methodResponse><fault><value><int>1</int></value></fault></methodResponse>",
        }
        for label, body in bodies.items():
            with self.subTest(label), self.assertRaises(MalformedResponseError):
                parse_response(body, Any, self.coder)

    def test_fault_code_outside_int32_is_decoding_error(self):
        body = (
            "<methodResponse><fault><value><struct>"
            "<member><name>faultCode</name><value><i8>99999999999</i8></value></member>"
            "<member><name>faultString</name><value><string>x</string></value></member>"
            "</struct></value></fault></methodResponse>"
        )
        with self.assertRaises(DecodingError) as ctx:
            parse_response(body, str, self.coder)

        self.assertIsInstance(ctx.exception.cause, TypeMismatchError)
        self.assertEqual(ctx.exception.cause.path, ["faultCode"])

    def test_fault_with_wrong_member_types_is_decoding_error(self):
        body = (
            "<methodResponse><fault><value><struct>"
            "<member><name>faultCode</name><value><string>four</string></value></member>"
            "<member><name>faultString</name><value><string>oops</string></value></member>"
            "</struct></value></fault></methodResponse>"
        )
        with self.assertRaises(DecodingError):
            parse_response(body, str, self.coder)

    def test_whitespace_and_comments_between_elements_are_ignored(self):
        body = (
            "<methodResponse>\n  <!-- note -->\n  <params>\n    <param>\n"
            "      <value><i4>7</i4></value>\n    </param>\n  </params>\n</methodResponse>"
        )
        self.assertEqual(parse_response(body, int, self.coder), 7)


if __name__ == "__main__":
    unittest.main()
