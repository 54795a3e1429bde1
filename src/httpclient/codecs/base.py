"""
=============================================================================
CODEC INTERFACE
=============================================================================

A codec is a paired serializer/parser for one MIME type:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Request payload ──serialize()──►  bytes on the wire               │
    │                                                                      │
    │   bytes from wire ──parse()──────►  Python value                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The base class doubles as the pass-through adapter: parse() hands back the
text unchanged and serialize() sends strings and bytes as they are. Custom
codecs subclass it and override only what they need:

    class ShoutingCodec(Codec):
        def parse(self, body):
            return self.to_text(body).upper()

    register("application/vnd.acme.shout+plain", ShoutingCodec())

=============================================================================
CONTRACT
=============================================================================

1. parse() never raises for empty input; it returns None.
2. parse() raises DecodeError for any other malformed input, including
   bytes that are not valid in the codec's encoding.
3. serialize() raises EncodeError for value shapes it cannot represent.

Codecs hold configuration only, never per-call state, so one instance can
be shared by every request in the process.

=============================================================================
"""

import copy
from typing import Any, Union

from ..errors import DecodeError, EncodeError


Body = Union[bytes, str]


class Codec:
    """Pass-through codec and base class for every other codec."""

    mime_type: str = ""
    encoding: str = "utf-8"

    # True when parse() applies its format's own encoding rules to raw
    # bytes. Text codecs get the body already decoded in a declared charset.
    binary: bool = False

    def parse(self, body: Body) -> Any:
        """
        Turn a response body into a value.

        The default returns the body as text, or None when it is empty.
        """
        text = self.to_text(body)
        return text if text else None

    def serialize(self, payload: Any) -> bytes:
        """
        Turn a payload into wire bytes.

        The default accepts text and bytes only.

        Raises:
            EncodeError: If the payload is neither str nor bytes.
        """
        if isinstance(payload, bytes):
            return payload
        if isinstance(payload, str):
            return payload.encode(self.encoding)
        raise EncodeError(
            f"Cannot serialize {type(payload).__name__} without a codec",
            mime_type=self.mime_type or None,
        )

    def to_text(self, body: Body) -> str:
        """
        Decode `body` with this codec's encoding if it is bytes.

        Raises:
            DecodeError: If the bytes are not valid in that encoding.
        """
        if not isinstance(body, bytes):
            return body
        try:
            return body.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"Response body is not valid {self.encoding}: {e.reason}",
                mime_type=self.mime_type or None,
            ) from e

    def with_encoding(self, encoding: str) -> "Codec":
        """This codec, or a copy of it that decodes text as `encoding`."""
        if encoding.lower() == self.encoding.lower():
            return self
        clone = copy.copy(self)
        clone.encoding = encoding
        return clone

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return vars(self) == vars(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
