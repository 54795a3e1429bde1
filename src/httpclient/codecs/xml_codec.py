"""
=============================================================================
XML CODEC (application/xml)
=============================================================================

parse() builds an xml.etree.ElementTree.Element, a navigable tree:

    root = codec.parse(b"<xml><name>Nathan</name></xml>")
    root.find("name").text          # 'Nathan'
    root.findall("./items/item")    # XPath subset

serialize() accepts an Element as-is, or builds a document from plain
Python values under a <response> root:

    {"name": "Nathan", "tags": ["a", "b"]}

        <response>
          <name>Nathan</name>
          <tags><item>a</item><item>b</item></tags>
        </response>

Mapping keys must be valid XML names; anything else raises EncodeError.

=============================================================================
"""

import re
import xml.etree.ElementTree as ET
from typing import Any, Mapping, Optional

from ..errors import DecodeError, EncodeError
from ..http import mime_types
from .base import Body, Codec


# Conservative subset of the XML Name production
_NAME_PATTERN = re.compile(r"^[A-Za-z_][\w.\-]*$")


class XmlCodec(Codec):
    """
    Serialize and parse XML documents.

    Args:
        namespace: Default namespace written as ``xmlns`` on the root
                   element when serializing.
        root: Tag of the root element built around non-Element payloads.
        encoding: Document encoding for serialized output.
    """

    mime_type = mime_types.XML
    binary = True

    def __init__(
        self,
        namespace: Optional[str] = None,
        root: str = "response",
        encoding: str = "utf-8",
    ):
        self.namespace = namespace
        self.root = root
        self.encoding = encoding

    def parse(self, body: Body) -> Optional[ET.Element]:
        if isinstance(body, str):
            body = body.encode(self.encoding)
        if not body.strip():
            return None

        try:
            return ET.fromstring(body)
        except ET.ParseError as e:
            raise DecodeError(
                "Unable to parse response as XML", mime_type=self.mime_type
            ) from e

    def serialize(self, payload: Any) -> bytes:
        if isinstance(payload, ET.Element):
            element = payload
        else:
            element = ET.Element(self.root)
            if self.namespace:
                element.set("xmlns", self.namespace)
            self._append(element, payload)

        return ET.tostring(element, encoding=self.encoding, xml_declaration=True)

    def _append(self, parent: ET.Element, value: Any) -> None:
        """Render `value` as the content of `parent`, recursing into containers."""
        if value is None:
            return
        if isinstance(value, Mapping):
            for key, child_value in value.items():
                if not isinstance(key, str) or not _NAME_PATTERN.match(key):
                    raise EncodeError(
                        f"Invalid XML element name: {key!r}", mime_type=self.mime_type
                    )
                child = ET.SubElement(parent, key)
                self._append(child, child_value)
        elif isinstance(value, (list, tuple)):
            for item in value:
                child = ET.SubElement(parent, "item")
                self._append(child, item)
        elif isinstance(value, bool):
            parent.text = "true" if value else "false"
        elif isinstance(value, (str, int, float)):
            parent.text = str(value)
        else:
            raise EncodeError(
                f"Cannot serialize {type(value).__name__} as XML",
                mime_type=self.mime_type,
            )

    def __repr__(self) -> str:
        return f"XmlCodec(namespace={self.namespace!r}, root={self.root!r})"
