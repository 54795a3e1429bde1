"""
=============================================================================
EXCHANGE LOGGING
=============================================================================

One structured log entry per request/response exchange, plus the helper
that wires the httpclient loggers to a handler.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ [3f2a9c1e] GET http://api.local/users → 200 application/json 512B 8.31ms
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"request_id": "3f2a9c1e", "method": "GET", "uri": "...",          │
    │  "status_code": 200, "content_type": "application/json", ...}      │
    └─────────────────────────────────────────────────────────────────────┘

Failed exchanges (TransportError) are logged at ERROR by the request's
default error handler with the same request id.

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass

from .config import ClientConfig


# Namespaced so it can be tuned separately from the module loggers:
#   logging.getLogger("httpclient.exchange").setLevel(logging.INFO)
logger = logging.getLogger("httpclient.exchange")


@dataclass
class ExchangeLog:
    """
    Structured log entry for one exchange.

    request_id:     Short random id, shared with the error log line
    method:         HTTP method sent
    uri:            Final URI including query parameters
    status_code:    Response status code
    content_type:   Response content type (without parameters)
    content_length: Raw response body size in bytes
    duration_ms:    Wall time from transmit to decoded Response
    timestamp:      When the exchange finished
    """

    request_id: str
    method: str
    uri: str
    status_code: int
    content_type: str
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f"[{self.request_id}] {self.method} {self.uri} → {self.status_code} "
            f"{self.content_type or '-'} {self.content_length}B {self.duration_ms:.2f}ms"
        )


def log_exchange(entry: ExchangeLog, log_format: str = "text", level: int = logging.INFO) -> None:
    """Emit `entry` on the exchange logger in the requested format."""
    if not logger.isEnabledFor(level):
        return
    if log_format == "json":
        logger.log(level, json.dumps(entry.to_dict()))
    else:
        logger.log(level, entry.to_text())


def now_timestamp() -> str:
    return time.strftime("%d/%b/%Y:%H:%M:%S %z")


def configure_logging(config: ClientConfig) -> None:
    """Configure the root handler and the httpclient logger level from `config`."""
    level = getattr(logging, config.log_level.upper(), logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("httpclient").setLevel(level)
