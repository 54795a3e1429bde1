"""
=============================================================================
HEADER COLLECTION
=============================================================================

An ordered, case-insensitive multi-map of HTTP header fields.

=============================================================================
FOLDING
=============================================================================

Per RFC 7230 a field that appears several times is equivalent to one field
whose value is the comma-joined list of all occurrences:

    X-My-Header: Value1          ┐
    X-My-Header: Value2          ┘ ──►  headers["x-my-header"] == "Value1,Value2"

Values are joined in the order they appeared, with a bare comma. Nothing is
sorted, so folding "a" then "b" is "a,b" and never "b,a".

=============================================================================
CASE INSENSITIVITY
=============================================================================

Lookups lowercase the name; iteration hands back the name as it was first
written, in first-seen order:

    headers = Headers.from_string("Content-Type: text/html\r\n")
    headers["content-type"]     # 'text/html'
    list(headers)               # ['Content-Type']

=============================================================================
"""

import re
from collections.abc import MutableMapping
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union


HeaderInput = Union["Headers", Dict[str, str], Iterable[Tuple[str, str]], None]


class Headers(MutableMapping):
    """
    Case-insensitive, order-preserving multi-map of header fields.

    Reading a name returns the folded value; get_list() returns the
    individual occurrences. Assigning replaces every occurrence, add()
    appends one more.
    """

    HEADER_PATTERN = re.compile(r"^([^:\s][^:]*):[ \t]*(.*?)[ \t]*$")

    def __init__(self, headers: HeaderInput = None):
        # lowercased name -> (name as first written, [values...])
        self._fields: Dict[str, Tuple[str, List[str]]] = {}

        if headers is None:
            return
        if isinstance(headers, Headers):
            for name, values in headers._fields.values():
                for value in values:
                    self.add(name, value)
        elif isinstance(headers, dict):
            for name, value in headers.items():
                self.add(name, value)
        else:
            for name, value in headers:
                self.add(name, value)

    @classmethod
    def from_string(cls, raw: str) -> "Headers":
        """
        Parse a raw header block.

        Lines may end in CRLF or LF. The first line is skipped when it is a
        status line ("HTTP/1.1 200 OK"); every other line that looks like
        "Name: Value" becomes a field and anything else is ignored.

        Args:
            raw: The header block text

        Returns:
            A new Headers instance.
        """
        headers = cls()
        lines = raw.splitlines()
        if lines and lines[0].startswith("HTTP/"):
            lines = lines[1:]

        for line in lines:
            match = cls.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient: not a header line
            name, value = match.groups()
            headers.add(name.strip(), value)

        return headers

    # =========================================================================
    # MULTI-MAP API
    # =========================================================================

    def add(self, name: str, value: str) -> None:
        """Append one occurrence of `name`, keeping earlier ones."""
        key = name.lower()
        if key in self._fields:
            self._fields[key][1].append(value)
        else:
            self._fields[key] = (name, [value])

    def get_list(self, name: str) -> List[str]:
        """Get every occurrence of `name` in appearance order."""
        field = self._fields.get(name.lower())
        return list(field[1]) if field else []

    def raw_items(self) -> List[Tuple[str, str]]:
        """One (name, value) pair per occurrence, grouped by first-seen name."""
        return [
            (name, value)
            for name, values in self._fields.values()
            for value in values
        ]

    def to_lines(self) -> List[str]:
        """Render as "Name: Value" lines, one per occurrence."""
        return [f"{name}: {value}" for name, value in self.raw_items()]

    def to_dict(self) -> Dict[str, str]:
        """Folded values keyed by the names as first written."""
        return {name: ",".join(values) for name, values in self._fields.values()}

    def copy(self) -> "Headers":
        return Headers(self)

    # =========================================================================
    # MAPPING PROTOCOL
    # =========================================================================

    def __getitem__(self, name: str) -> str:
        _, values = self._fields[name.lower()]
        return ",".join(values)

    def __setitem__(self, name: str, value: str) -> None:
        key = name.lower()
        original = self._fields[key][0] if key in self._fields else name
        self._fields[key] = (original, [value])

    def __delitem__(self, name: str) -> None:
        del self._fields[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._fields

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, dict):
            other = Headers(other)
        if not isinstance(other, Headers):
            return NotImplemented
        return self._folded() == other._folded()

    def _folded(self) -> Dict[str, List[str]]:
        return {key: values for key, (_, values) in self._fields.items()}

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        try:
            return self[name]
        except KeyError:
            return default

    def __repr__(self) -> str:
        return f"Headers({self.raw_items()!r})"
