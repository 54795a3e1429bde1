"""
Form codec (application/x-www-form-urlencoded).

Converts between a flat mapping and percent-encoded ``key=value&...`` text.
Repeated keys keep their last value when parsing. Percent-escapes decode
in the codec's encoding, which is the response charset when one is declared.
"""

from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode

from ..errors import DecodeError, EncodeError
from ..http import mime_types
from .base import Body, Codec


class FormCodec(Codec):
    """Serialize and parse URL-encoded form data."""

    mime_type = mime_types.FORM

    def parse(self, body: Body) -> Optional[Dict[str, str]]:
        text = self.to_text(body).strip()
        if not text:
            return None

        try:
            fields = parse_qsl(
                text,
                keep_blank_values=True,
                strict_parsing=True,
                encoding=self.encoding,
                errors="strict",
            )
            return dict(fields)
        except ValueError as e:
            raise DecodeError(
                f"Unable to parse response as form data: {e}", mime_type=self.mime_type
            ) from e

    def serialize(self, payload: Any) -> bytes:
        if not isinstance(payload, Mapping):
            raise EncodeError(
                f"Form payload must be a mapping, got {type(payload).__name__}",
                mime_type=self.mime_type,
            )

        for key, value in payload.items():
            if isinstance(value, (Mapping, list, tuple, set)):
                raise EncodeError(
                    f"Form field {key!r} must be a scalar", mime_type=self.mime_type
                )

        fields = {key: "" if value is None else value for key, value in payload.items()}
        return urlencode(fields).encode("ascii")
