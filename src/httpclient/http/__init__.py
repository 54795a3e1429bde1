"""
=============================================================================
HTTP MESSAGE LAYER
=============================================================================

Everything between the caller and the transport: describing a request,
rendering it to wire form, and decoding what comes back.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST (request.py)                                                │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Chainable descriptor, payload serialization, header rendering       │
    │                                                                      │
    │ Input:   Request.post(url).sends("json").body({"a": 1})             │
    │ Output:  PreparedRequest(method, uri, headers, body, options)       │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE (response.py)                                              │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Status line, folded headers, content type and body decoding         │
    │                                                                      │
    │ Input:   "HTTP/1.1 200 OK\r\nContent-Type: ..." + body bytes        │
    │ Output:  Response(code=200, body={...}, ...)                         │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ HEADERS, MIME TYPES, STATUS CODES, MULTIPART                        │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Case-insensitive folding multi-map, alias table and vendor types,   │
    │ reason phrases, multipart/form-data bodies for uploads              │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .headers import Headers
from .mime_types import resolve, supports_alias, split_vendor_type, get_mime_type
from .status_codes import HTTPStatus
from .request import (
    Request,
    PreparedRequest,
    Method,
    SerializePolicy,
    AuthMechanism,
    RawBytes,
    Text,
    Structured,
    determine_length,
)
from .response import Response, ResponseDecoder

__all__ = [
    # Headers
    "Headers",

    # MIME types
    "resolve",
    "supports_alias",
    "split_vendor_type",
    "get_mime_type",

    # Status codes
    "HTTPStatus",

    # Requests
    "Request",
    "PreparedRequest",
    "Method",
    "SerializePolicy",
    "AuthMechanism",
    "RawBytes",
    "Text",
    "Structured",
    "determine_length",

    # Responses
    "Response",
    "ResponseDecoder",
]
