"""
CSV codec (text/csv).

Rows come back as lists of strings. Nothing is inferred: the first row is
data like any other, and quoted numbers stay strings ("40.0" is '40.0').
Quoting follows RFC 4180: a field wrapped in double quotes may contain the
delimiter or line breaks, and "" inside it is a literal quote.
"""

import csv
import io
from typing import Any, List, Mapping, Optional, Sequence

from ..errors import DecodeError, EncodeError
from ..http import mime_types
from .base import Body, Codec


class CsvCodec(Codec):
    """
    Serialize and parse comma-separated values.

    Args:
        delimiter: Single-character field separator.
    """

    mime_type = mime_types.CSV

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    def parse(self, body: Body) -> Optional[List[List[str]]]:
        text = self.to_text(body)
        if not text.strip():
            return None

        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self.delimiter, strict=True)
        try:
            return [row for row in reader]
        except csv.Error as e:
            raise DecodeError(
                f"Unable to parse response as CSV: {e}", mime_type=self.mime_type
            ) from e

    def serialize(self, payload: Any) -> bytes:
        """
        Write rows as CSV.

        Accepts a sequence of rows where every row is either a sequence of
        fields or a mapping. For mappings, a header row is written first
        using the keys of the first row.
        """
        if isinstance(payload, (str, bytes, Mapping)) or not isinstance(payload, Sequence):
            raise EncodeError(
                "CSV payload must be a sequence of rows", mime_type=self.mime_type
            )

        out = io.StringIO()
        writer = csv.writer(out, delimiter=self.delimiter, lineterminator="\n")

        if payload and isinstance(payload[0], Mapping):
            header = list(payload[0].keys())
            writer.writerow(header)
            for row in payload:
                if not isinstance(row, Mapping):
                    raise EncodeError("Mixed row shapes in CSV payload", mime_type=self.mime_type)
                writer.writerow([row.get(key, "") for key in header])
        else:
            for row in payload:
                if isinstance(row, (str, bytes, Mapping)) or not isinstance(row, Sequence):
                    raise EncodeError(
                        "Each CSV row must be a sequence of fields", mime_type=self.mime_type
                    )
                writer.writerow(row)

        return out.getvalue().encode(self.encoding)

    def __repr__(self) -> str:
        return f"CsvCodec(delimiter={self.delimiter!r})"
