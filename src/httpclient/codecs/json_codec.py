"""
JSON codec (application/json).

Bodies are decoded with the standard library json module. An empty or
whitespace-only body short-circuits to None before the decoder runs, so
a 204 or an empty 200 never looks like a syntax error.

JSON text is UTF-8 (RFC 8259), so a charset parameter on the response is
ignored and invalid UTF-8 raises DecodeError.
"""

import json
from types import SimpleNamespace
from typing import Any

from ..errors import DecodeError, EncodeError
from ..http import mime_types
from .base import Body, Codec


class JsonCodec(Codec):
    """
    Serialize and parse JSON.

    Args:
        decode_objects: When True (the default) JSON objects become dicts.
                        When False they become SimpleNamespace instances so
                        fields read as attributes: ``body.object.key``.
    """

    mime_type = mime_types.JSON
    binary = True

    def __init__(self, decode_objects: bool = True):
        self.decode_objects = decode_objects

    def parse(self, body: Body) -> Any:
        text = self.to_text(body).strip()
        if not text:
            return None

        hook = None if self.decode_objects else (lambda d: SimpleNamespace(**d))
        try:
            return json.loads(text, object_hook=hook)
        except json.JSONDecodeError as e:
            raise DecodeError(
                "Unable to parse response as JSON", mime_type=self.mime_type
            ) from e

    def serialize(self, payload: Any) -> bytes:
        try:
            return json.dumps(payload, ensure_ascii=False).encode(self.encoding)
        except (TypeError, ValueError) as e:
            raise EncodeError(
                f"Unable to serialize payload as JSON: {e}", mime_type=self.mime_type
            ) from e

    def __repr__(self) -> str:
        return f"JsonCodec(decode_objects={self.decode_objects})"
