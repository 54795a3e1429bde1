"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the client surfaces derives from HTTPClientError, so callers
can catch the whole family with one except clause:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        EXCEPTION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTPClientError                                                   │
    │   ├── ParseError      malformed status line, no Response is built  │
    │   ├── DecodeError     body is invalid for the selected codec       │
    │   ├── EncodeError     payload shape unsupported by the send codec  │
    │   └── TransportError  connection refused, timeout, TLS, bad URI    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

ParseError and DecodeError describe bad data coming FROM the server.
EncodeError describes a payload the caller handed us that we cannot
serialize. TransportError is raised by the transport and only forwarded.

Nothing here is swallowed. The two silent cases (an empty query parameter
key or value, and a content type without a codec) never raise at all.

=============================================================================
"""

from typing import Optional


class HTTPClientError(Exception):
    """Base class for every error raised by the client."""


class ParseError(HTTPClientError):
    """
    Raised when the response status line cannot be parsed.

    Carries the offending line so it can be logged. Without a status code
    there is no Response to build, so this is always fatal.
    """

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


class DecodeError(HTTPClientError):
    """
    Raised when a codec cannot parse a response body.

    The message is codec-specific, e.g. "Unable to parse response as JSON".
    """

    def __init__(self, message: str, mime_type: Optional[str] = None):
        super().__init__(message)
        self.mime_type = mime_type


class EncodeError(HTTPClientError):
    """Raised when a payload cannot be serialized for the send type."""

    def __init__(self, message: str, mime_type: Optional[str] = None):
        super().__init__(message)
        self.mime_type = mime_type


class TransportError(HTTPClientError):
    """
    Raised by a transport when the exchange itself fails.

    Attributes:
        uri: The URI that was being requested
        was_timeout: True when the failure was a timeout, so callers can
                     tell "slow server" apart from "no server"
    """

    def __init__(self, message: str, uri: str = "", was_timeout: bool = False):
        super().__init__(message)
        self.uri = uri
        self.was_timeout = was_timeout
