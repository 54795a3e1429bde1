"""
=============================================================================
HTTP RESPONSE
=============================================================================

Turns what the transport read off the wire into an immutable Response.

=============================================================================
DECODING PIPELINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     RESPONSE DECODING STAGES                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. STATUS LINE                                                      │
    │     HTTP/1.1 406 Not Acceptable  ──►  code=406, reason, version     │
    │     (anything else is a ParseError)                                  │
    │                                                                      │
    │  2. HEADERS                                                          │
    │     Name: Value lines folded into Headers, junk lines skipped       │
    │                                                                      │
    │  3. CONTENT TYPE                                                     │
    │     application/vnd.example.message+xml; charset=utf-8              │
    │     ├── content_type = application/vnd.example.message+xml          │
    │     ├── charset      = utf-8        (iso-8859-1 when absent)        │
    │     └── parent_type  = application/xml   (vendor types only)        │
    │                                                                      │
    │  4. BODY                                                             │
    │     auto-parse off      → raw string                                │
    │     empty body          → None                                      │
    │     parse_with()        → callback(raw bytes)                       │
    │     exact codec         → codec.parse(body)                         │
    │     parent type codec   → codec.parse(body)                         │
    │     otherwise           → raw string                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A codec registered for the exact vendor type wins over the one for its
parent, so an application can take over "application/vnd.acme+json" while
every other "+json" type still goes through the JSON codec.

The "raw string" is the body decoded with the charset the server declared,
or UTF-8 when it declared none.

Text codecs (CSV, form, custom ones) decode the body in the declared
charset. Binary codecs (JSON, XML) always get the raw
bytes and apply their format's own encoding rules. Only an empty body
becomes None; whitespace is left for the codec or kept as the raw string.

=============================================================================
"""

import codecs
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from ..codecs.registry import CodecRegistry, default_registry
from ..errors import ParseError
from . import mime_types
from .headers import Headers
from .status_codes import HTTPStatus, standard_phrase

if TYPE_CHECKING:
    from .request import Request


logger = logging.getLogger(__name__)


DEFAULT_CHARSET = "iso-8859-1"


@dataclass(frozen=True, eq=False)
class Response:
    """
    A decoded HTTP response.

    Fields cannot be reassigned. Responses compare and hash by identity.

    Attributes:
        raw_body:      Body bytes exactly as received
        raw_headers:   Header block text, status line first
        headers:       Folded, case-insensitive Headers
        body:          Decoded body (codec output, raw string or None)
        code:          Status code
        reason:        Reason phrase from the status line
        version:       "1.1", "1.0", ...
        content_type:  Media type without parameters ("" if absent)
        parent_type:   Base type of a vendor type, else None
        charset:       Declared charset, iso-8859-1 by default
        request:       The Request that produced this response
    """

    raw_body: bytes
    raw_headers: str
    headers: Headers
    body: Any
    code: int
    reason: str = ""
    version: str = "1.1"
    content_type: str = ""
    parent_type: Optional[str] = None
    charset: str = DEFAULT_CHARSET
    is_mime_vendor_specific: bool = False
    is_mime_personal: bool = False
    request: Optional["Request"] = None

    @classmethod
    def from_raw(
        cls,
        body: bytes,
        raw_headers: str,
        request: Optional["Request"] = None,
        registry: Optional[CodecRegistry] = None,
    ) -> "Response":
        """Shorthand for ResponseDecoder(registry).decode(...)."""
        return ResponseDecoder(registry).decode(body, raw_headers, request)

    def has_errors(self) -> bool:
        """True for 4xx and 5xx responses."""
        return self.code >= 400

    @property
    def status(self) -> Optional[HTTPStatus]:
        """The code as an HTTPStatus member, None for codes it does not list."""
        try:
            return HTTPStatus(self.code)
        except ValueError:
            return None

    def text(self) -> str:
        return _decode_text(self.raw_body, self.charset, self._declared_charset())

    def _declared_charset(self) -> bool:
        return "charset=" in self.headers.get("Content-Type", "").lower()

    def __str__(self) -> str:
        return self.text()

    def __bytes__(self) -> bytes:
        return self.raw_body

    def __repr__(self) -> str:
        return f"<Response [{self.code}] {self.content_type or '-'}>"


class ResponseDecoder:
    """
    Builds Response objects from raw transport output.

    Args:
        registry: Codec registry to negotiate with (the default one if None)
    """

    STATUS_LINE_PATTERN = re.compile(r"^HTTP/(\d+(?:\.\d+)?)\s+(\d{3})(?:\s+(.*))?$")

    def __init__(self, registry: Optional[CodecRegistry] = None):
        self.registry = registry or default_registry

    def decode(
        self,
        body: bytes,
        raw_headers: str,
        request: Optional["Request"] = None,
    ) -> Response:
        """
        Decode one response.

        Args:
            body: Body bytes, transfer encoding already removed
            raw_headers: Header block starting with the status line
            request: Request whose options (auto_parse, parse_with) apply

        Raises:
            ParseError: If the first line is not an HTTP status line
            DecodeError: If the body is invalid for its content type
        """
        if isinstance(body, str):
            body = body.encode("utf-8")

        status_line = raw_headers.lstrip("\r\n").splitlines()[0] if raw_headers.strip() else ""
        version, code, reason = self._parse_status(status_line)
        headers = Headers.from_string(raw_headers)

        content_type, charset, declared = self._parse_content_type(headers.get("Content-Type", ""))
        parent_type = mime_types.split_vendor_type(content_type) if content_type else None
        subtype = content_type.split("/", 1)[1] if "/" in content_type else ""

        parsed = self._decode_body(body, content_type, parent_type, charset, declared, request)

        return Response(
            raw_body=body,
            raw_headers=raw_headers,
            headers=headers,
            body=parsed,
            code=code,
            reason=reason,
            version=version,
            content_type=content_type,
            parent_type=parent_type,
            charset=charset,
            is_mime_vendor_specific=parent_type is not None,
            is_mime_personal=subtype.startswith("prs."),
            request=request,
        )

    # =========================================================================
    # STAGES
    # =========================================================================

    def _parse_status(self, line: str):
        match = self.STATUS_LINE_PATTERN.match(line.strip())
        if not match:
            raise ParseError("Unable to parse response code from HTTP response", line=line)
        version, code, reason = match.groups()
        return version, int(code), (reason or "").strip() or standard_phrase(int(code))

    @staticmethod
    def _parse_content_type(value: str):
        """Split "type/sub; charset=x" into (type/sub, charset, declared?)."""
        if not value:
            return "", DEFAULT_CHARSET, False

        segments = [segment.strip() for segment in value.split(";")]
        content_type = segments[0].lower()
        for param in segments[1:]:
            name, _, param_value = param.partition("=")
            if name.strip().lower() == "charset" and param_value.strip():
                return content_type, param_value.strip().strip('"'), True
        return content_type, DEFAULT_CHARSET, False

    def _decode_body(
        self,
        body: bytes,
        content_type: str,
        parent_type: Optional[str],
        charset: str,
        declared: bool,
        request: Optional["Request"],
    ) -> Any:
        auto_parse = request.auto_parse if request is not None else True
        if not auto_parse:
            return _decode_text(body, charset, declared)

        if not body:
            return None

        callback = request.parse_callback if request is not None else None
        if callback is not None:
            return callback(body)

        codec = self.registry.lookup(content_type) if content_type else None
        if codec is None and parent_type is not None:
            codec = self.registry.lookup(parent_type)

        if codec is None:
            return _decode_text(body, charset, declared)

        logger.debug(f"Decoding {content_type} body with {codec!r}")
        if declared and not codec.binary and _known_charset(charset):
            codec = codec.with_encoding(charset)
        return codec.parse(body)


def _decode_text(body: bytes, charset: str, declared: bool) -> str:
    """Body as text in the declared charset, UTF-8 when none was declared."""
    encoding = charset if declared else "utf-8"
    try:
        return body.decode(encoding, errors="replace")
    except LookupError:
        logger.warning(f"Unknown charset {charset!r}, decoding as UTF-8")
        return body.decode("utf-8", errors="replace")


def _known_charset(charset: str) -> bool:
    try:
        codecs.lookup(charset)
    except LookupError:
        logger.warning(f"Unknown charset {charset!r}, decoding with the codec's default")
        return False
    return True
