"""
=============================================================================
HTTPCLIENT - Chainable HTTP Client with Content Negotiation
=============================================================================

A small HTTP client built around a declarative request descriptor. You say
what you send and what you expect; the client picks the serializer, renders
the headers, talks to the server and decodes the answer by its
Content-Type.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    PYHTTP CLIENT ARCHITECTURE                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Request ──prepare()──► PreparedRequest ──► Transport              │
    │      │                                          │                    │
    │      │ sends/expects                            │ raw headers       │
    │      ▼                                          ▼ + body bytes      │
    │   MIME registry ◄──── CodecRegistry ◄──── ResponseDecoder           │
    │   (aliases,            (json, xml,           │                       │
    │    vendor types)        csv, form)           ▼                       │
    │                                           Response                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpclient/
    ├── __init__.py          # This file - package exports
    ├── config.py            # ClientConfig dataclass
    ├── errors.py            # Error hierarchy
    ├── logging.py           # Exchange log records
    ├── auth.py              # Basic and Digest Authorization values
    ├── codecs/              # Serializers / parsers per MIME type
    │   ├── base.py          # Codec interface + pass-through
    │   ├── json_codec.py
    │   ├── xml_codec.py
    │   ├── csv_codec.py
    │   ├── form_codec.py
    │   └── registry.py      # Thread-safe CodecRegistry
    ├── core/
    │   └── transport.py     # requests transport
    └── http/
        ├── request.py       # Request descriptor
        ├── response.py      # Response + decoder
        ├── headers.py       # Folding header multi-map
        ├── mime_types.py    # Aliases and vendor types
        ├── multipart.py     # File upload bodies
        └── status_codes.py  # HTTPStatus enum

=============================================================================
QUICK START
=============================================================================

    from httpclient import Request

    response = Request.get("https://api.example.com/users/1").expects("json").send()
    response.code           # 200
    response.body["name"]   # decoded by the JSON codec

    Request.post("https://api.example.com/users", {"name": "Nathan"}, "json").send()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ClientConfig
from .errors import HTTPClientError, ParseError, DecodeError, EncodeError, TransportError
# http must load before codecs, which import http.mime_types
from .http import Headers, Request, Response, Method, SerializePolicy, HTTPStatus
from .codecs import Codec, CodecRegistry, register, has_registered, get_codec
from .logging import configure_logging

__all__ = [
    "__version__",
    "ClientConfig",
    "configure_logging",
    "HTTPClientError",
    "ParseError",
    "DecodeError",
    "EncodeError",
    "TransportError",
    "Codec",
    "CodecRegistry",
    "register",
    "has_registered",
    "get_codec",
    "Headers",
    "Request",
    "Response",
    "Method",
    "SerializePolicy",
    "HTTPStatus",
]
