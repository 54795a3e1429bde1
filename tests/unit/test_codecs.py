"""
Unit tests for the built-in codecs.
"""

import xml.etree.ElementTree as ET
from types import SimpleNamespace

import pytest

from httpclient.codecs import Codec, CsvCodec, FormCodec, JsonCodec, XmlCodec
from httpclient.errors import DecodeError, EncodeError


SAMPLE_JSON = '{"key":"value","object":{"key":"value"},"array":[1,2,3,4]}'
SAMPLE_CSV = 'Key1,Key2\nValue1,Value2\n"40.0","Forty"'


class TestPassThroughCodec:
    """Tests for the base Codec."""

    def test_parse_returns_text(self):
        """Test parse() hands back the body as text."""
        assert Codec().parse(b"hello") == "hello"

    def test_parse_empty(self):
        """Test empty bodies parse to None."""
        assert Codec().parse(b"") is None

    def test_serialize_text_and_bytes(self):
        """Test str and bytes pass straight through."""
        assert Codec().serialize("abc") == b"abc"
        assert Codec().serialize(b"\x00\x01") == b"\x00\x01"

    def test_serialize_other(self):
        """Test other values cannot be serialized without a codec."""
        with pytest.raises(EncodeError):
            Codec().serialize({"a": 1})

    def test_parse_invalid_encoding(self):
        """Test bytes that are not valid UTF-8 raise DecodeError."""
        with pytest.raises(DecodeError):
            Codec().parse(b"caf\xe9")

    def test_with_encoding(self):
        """Test with_encoding() copies the codec and leaves the original alone."""
        codec = Codec()
        latin = codec.with_encoding("iso-8859-1")
        assert latin is not codec
        assert latin.parse(b"caf\xe9") == "café"
        assert codec.encoding == "utf-8"
        assert codec.with_encoding("UTF-8") is codec


class TestJsonCodec:
    """Tests for JsonCodec."""

    def test_parse_to_dicts(self):
        """Test parsing into plain containers."""
        body = JsonCodec().parse(SAMPLE_JSON.encode())
        assert body["key"] == "value"
        assert body["object"]["key"] == "value"
        assert body["array"] == [1, 2, 3, 4]

    def test_parse_to_objects(self):
        """Test parsing objects as attribute namespaces."""
        body = JsonCodec(decode_objects=False).parse(SAMPLE_JSON)
        assert isinstance(body, SimpleNamespace)
        assert body.object.key == "value"
        assert body.array == [1, 2, 3, 4]

    def test_parse_empty_and_whitespace(self):
        """Test empty or blank bodies parse to None."""
        assert JsonCodec().parse(b"") is None
        assert JsonCodec().parse(b"  \n ") is None

    def test_parse_invalid(self):
        """Test malformed JSON raises DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            JsonCodec().parse(b"invalid{json")
        assert exc_info.value.mime_type == "application/json"
        assert str(exc_info.value) == "Unable to parse response as JSON"

    def test_parse_invalid_utf8(self):
        """Test string bytes that are not UTF-8 raise DecodeError instead of being replaced."""
        with pytest.raises(DecodeError) as exc_info:
            JsonCodec().parse(b'{"a": "\xff\xfe"}')
        assert exc_info.value.mime_type == "application/json"

    def test_serialize(self):
        """Test serializing a mapping."""
        assert JsonCodec().serialize({"a": [1, 2]}) == b'{"a": [1, 2]}'

    @pytest.mark.parametrize("value", ["text", [], ["a", 2], None])
    def test_serialize_then_parse(self, value):
        """Test values survive a serialize/parse cycle."""
        codec = JsonCodec()
        assert codec.parse(codec.serialize(value)) == value

    def test_serialize_unicode(self):
        """Test non-ASCII text is written as UTF-8, not escaped."""
        assert JsonCodec().serialize({"city": "Zürich"}) == '{"city": "Zürich"}'.encode("utf-8")

    def test_serialize_unsupported(self):
        """Test unserializable values raise EncodeError."""
        with pytest.raises(EncodeError):
            JsonCodec().serialize({"when": object()})

    def test_equality(self):
        """Test codecs compare by configuration."""
        assert JsonCodec() == JsonCodec()
        assert JsonCodec() != JsonCodec(decode_objects=False)


class TestXmlCodec:
    """Tests for XmlCodec."""

    def test_parse(self):
        """Test parsing into an Element tree."""
        root = XmlCodec().parse(b"<xml><name>Nathan</name></xml>")
        assert root.tag == "xml"
        assert root.find("name").text == "Nathan"

    def test_parse_empty(self):
        """Test empty bodies parse to None."""
        assert XmlCodec().parse(b"   ") is None

    def test_parse_invalid(self):
        """Test malformed XML raises DecodeError."""
        with pytest.raises(DecodeError):
            XmlCodec().parse(b"<xml><unclosed></xml>")

    def test_serialize_mapping(self):
        """Test mappings become nested elements under the root."""
        data = XmlCodec().serialize({"name": "Nathan", "tags": ["a", "b"], "active": True})
        root = ET.fromstring(data)
        assert root.tag == "response"
        assert root.find("name").text == "Nathan"
        assert [item.text for item in root.find("tags")] == ["a", "b"]
        assert root.find("active").text == "true"

    def test_serialize_declaration(self):
        """Test output carries an XML declaration."""
        assert XmlCodec().serialize({"a": 1}).startswith(b"<?xml")

    def test_serialize_namespace_and_root(self):
        """Test custom root tag and default namespace."""
        data = XmlCodec(namespace="urn:example", root="message").serialize({"id": 7})
        root = ET.fromstring(data)
        assert root.tag == "{urn:example}message"

    def test_serialize_element(self):
        """Test Element payloads are written as-is."""
        element = ET.Element("ping")
        assert b"<ping />" in XmlCodec().serialize(element)

    def test_serialize_invalid_name(self):
        """Test keys that are not XML names are rejected."""
        with pytest.raises(EncodeError):
            XmlCodec().serialize({"not valid": 1})

    def test_serialize_unsupported_value(self):
        """Test unsupported leaf values are rejected."""
        with pytest.raises(EncodeError):
            XmlCodec().serialize({"when": object()})


class TestCsvCodec:
    """Tests for CsvCodec."""

    def test_parse(self):
        """Test parsing the sample document into rows."""
        rows = CsvCodec().parse(SAMPLE_CSV.encode())
        assert rows == [["Key1", "Key2"], ["Value1", "Value2"], ["40.0", "Forty"]]

    def test_parse_empty(self):
        """Test empty bodies parse to None."""
        assert CsvCodec().parse(b"") is None

    def test_parse_invalid(self):
        """Test malformed quoting raises DecodeError."""
        with pytest.raises(DecodeError):
            CsvCodec().parse(b'a,"b\nc')

    def test_parse_invalid_encoding(self):
        """Test Latin-1 bytes are rejected under the default UTF-8."""
        with pytest.raises(DecodeError):
            CsvCodec().parse("Zürich,1".encode("iso-8859-1"))

    def test_parse_other_encoding(self):
        """Test rows decode in the codec's encoding."""
        codec = CsvCodec(delimiter=";").with_encoding("iso-8859-1")
        assert codec.parse("Zürich;1".encode("iso-8859-1")) == [["Zürich", "1"]]
        assert codec.delimiter == ";"

    def test_serialize_rows(self):
        """Test sequences of rows."""
        assert CsvCodec().serialize([["a", "b"], [1, 2]]) == b"a,b\n1,2\n"

    def test_serialize_mappings(self):
        """Test mappings write a header row first."""
        data = CsvCodec().serialize([{"k1": "v1", "k2": "v2"}, {"k1": "x", "k2": "y"}])
        assert data == b"k1,k2\nv1,v2\nx,y\n"

    def test_serialize_custom_delimiter(self):
        """Test a custom delimiter."""
        assert CsvCodec(delimiter=";").serialize([["a", "b"]]) == b"a;b\n"

    def test_serialize_rejects_flat_values(self):
        """Test non-tabular payloads are rejected."""
        with pytest.raises(EncodeError):
            CsvCodec().serialize("a,b")
        with pytest.raises(EncodeError):
            CsvCodec().serialize(["a", "b"])


class TestFormCodec:
    """Tests for FormCodec."""

    def test_parse(self):
        """Test parsing url-encoded pairs."""
        assert FormCodec().parse(b"name=Nathan&city=Z%C3%BCrich&empty=") == {
            "name": "Nathan",
            "city": "Zürich",
            "empty": "",
        }

    def test_parse_invalid(self):
        """Test malformed form data raises DecodeError."""
        with pytest.raises(DecodeError):
            FormCodec().parse(b"&&&")

    def test_parse_escapes_in_other_encoding(self):
        """Test percent-escapes decode in the codec's encoding."""
        assert FormCodec().with_encoding("iso-8859-1").parse(b"city=Z%FCrich") == {"city": "Zürich"}

    def test_parse_invalid_escape_bytes(self):
        """Test escapes that are not valid UTF-8 raise DecodeError."""
        with pytest.raises(DecodeError):
            FormCodec().parse(b"city=Z%FCrich")

    def test_serialize(self):
        """Test encoding a mapping."""
        assert FormCodec().serialize({"a": "1 2", "b": None}) == b"a=1+2&b="

    def test_serialize_nested(self):
        """Test nested values are rejected."""
        with pytest.raises(EncodeError):
            FormCodec().serialize({"a": {"b": 1}})
        with pytest.raises(EncodeError):
            FormCodec().serialize(["a"])
