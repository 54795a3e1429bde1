"""
=============================================================================
CODEC REGISTRY
=============================================================================

Maps canonical MIME types to the codec that serializes and parses them.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        CODEC REGISTRY                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   application/json                   → JsonCodec()                  │
    │   application/xml                    → XmlCodec()                   │
    │   text/csv                           → CsvCodec()                   │
    │   application/x-www-form-urlencoded  → FormCodec()                  │
    │   application/vnd.acme.thing+xml     → (whatever you register)      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

One codec per key, last registration wins. Keys may be given as aliases
("json") and are resolved through the MIME registry first.

=============================================================================
THREAD SAFETY
=============================================================================

The default registry is process-wide and mutable, so every read and write
takes the same lock. A register() racing with a lookup() for the same key
returns either the old codec or the new one, never a half-written entry.

Tests and embedders that want isolation build their own CodecRegistry and
hand it to Request.registry(); the module-level register(),
has_registered() and get_codec() always talk to the default instance.

=============================================================================
"""

import logging
import threading
from typing import Dict, Optional

from ..http import mime_types
from .base import Codec
from .csv_codec import CsvCodec
from .form_codec import FormCodec
from .json_codec import JsonCodec
from .xml_codec import XmlCodec


logger = logging.getLogger(__name__)


class CodecRegistry:
    """
    Thread-safe mapping of MIME type → codec.

    Args:
        with_defaults: Seed the registry with the built-in codecs.
    """

    def __init__(self, with_defaults: bool = True):
        self._codecs: Dict[str, Codec] = {}
        self._lock = threading.Lock()
        self._fallback = Codec()

        if with_defaults:
            self._codecs.update({
                mime_types.JSON: JsonCodec(),
                mime_types.XML: XmlCodec(),
                mime_types.CSV: CsvCodec(),
                mime_types.FORM: FormCodec(),
            })

    def register(self, mime_type: str, codec: Codec) -> None:
        """
        Register `codec` for `mime_type`, replacing any previous codec.

        Args:
            mime_type: Canonical MIME type or alias ("json")
            codec: Codec instance to use for that type
        """
        key = mime_types.resolve(mime_type)
        with self._lock:
            previous = self._codecs.get(key)
            self._codecs[key] = codec

        if previous is not None:
            logger.debug(f"Replaced codec for {key}: {previous!r} → {codec!r}")
        else:
            logger.debug(f"Registered codec for {key}: {codec!r}")

    def unregister(self, mime_type: str) -> Optional[Codec]:
        """Remove the codec for `mime_type` and return it (None if absent)."""
        key = mime_types.resolve(mime_type)
        with self._lock:
            return self._codecs.pop(key, None)

    def lookup(self, mime_type: str) -> Optional[Codec]:
        """Get the codec registered for exactly `mime_type`, or None."""
        key = mime_types.resolve(mime_type)
        with self._lock:
            return self._codecs.get(key)

    def has_registered(self, mime_type: str) -> bool:
        key = mime_types.resolve(mime_type)
        with self._lock:
            return key in self._codecs

    def get(self, mime_type: str) -> Codec:
        """
        Get the codec for `mime_type`, falling back to the pass-through codec.

        Use lookup() when "nothing registered" must be told apart.
        """
        return self.lookup(mime_type) or self._fallback

    def __contains__(self, mime_type: str) -> bool:
        return self.has_registered(mime_type)

    def __len__(self) -> int:
        with self._lock:
            return len(self._codecs)


# =============================================================================
# PROCESS-WIDE DEFAULT
# =============================================================================

default_registry = CodecRegistry()


def register(mime_type: str, codec: Codec) -> None:
    """Register `codec` for `mime_type` on the default registry."""
    default_registry.register(mime_type, codec)


def has_registered(mime_type: str) -> bool:
    """Check the default registry for a codec bound to `mime_type`."""
    return default_registry.has_registered(mime_type)


def get_codec(mime_type: str) -> Codec:
    """Get the default registry's codec for `mime_type` (pass-through if none)."""
    return default_registry.get(mime_type)
