"""
Low-level I/O components.

The transport is the only code in the package that touches the network.
Everything above it (negotiation, header folding, decoding) works on
strings and bytes.
"""

from .transport import (
    Transport,
    SessionTransport,
    TransportOptions,
    RawResponse,
)

__all__ = [
    "Transport",
    "SessionTransport",
    "TransportOptions",
    "RawResponse",
]
