"""
=============================================================================
CLIENT CONFIGURATION
=============================================================================

Default settings every new Request starts from.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Per-request builder calls                                      │
    │      └── Request.get(url).timeout_in(5).with_strict_ssl()          │
    │                                                                      │
    │   2. A request template installed with Request.ini()                │
    │                                                                      │
    │   3. Environment variables (ClientConfig.from_env)                  │
    │      └── HTTP_CLIENT_TIMEOUT=5 python app.py                       │
    │                                                                      │
    │   4. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The proxy is special: a request without an explicit proxy still honours
the conventional http_proxy / HTTP_PROXY variables, read at the moment
they are needed so a test (or a long-running process) can change them.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ClientConfig:
    """
    Configuration for outgoing requests.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    TRANSPORT
    - timeout, strict_ssl, proxy

    NEGOTIATION
    - auto_parse, user_agent

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # TRANSPORT SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    timeout: Optional[float] = None
    """
    Seconds to wait for the server. None waits forever. Stored on the
    request and forwarded to the transport untouched.
    """

    strict_ssl: bool = False
    """
    Verify the server's TLS certificate and hostname. Off by default,
    turn it on with Request.with_strict_ssl() or HTTP_CLIENT_STRICT_SSL=1.
    """

    proxy: Optional[str] = None
    """Proxy URL applied to every request, e.g. "http://proxy.local:3128"."""

    # ─────────────────────────────────────────────────────────────────────
    # NEGOTIATION SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    auto_parse: bool = True
    """Decode response bodies with the codec for their Content-Type."""

    user_agent: Optional[str] = None
    """User-Agent header. None means the library default."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "WARNING"
    """Level for the httpclient loggers (DEBUG, INFO, WARNING, ...)."""

    log_format: str = "text"
    """Exchange log format: 'json' or 'text'."""

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_CLIENT_TIMEOUT      Timeout in seconds (default: none)
        HTTP_CLIENT_STRICT_SSL   1/true/yes to verify certificates
        HTTP_CLIENT_USER_AGENT   User-Agent override
        HTTP_CLIENT_LOG_LEVEL    Logging level (default: WARNING)
        HTTP_CLIENT_LOG_FORMAT   text or json (default: text)
        http_proxy / HTTP_PROXY  Proxy URL

        =====================================================================
        """
        timeout = os.getenv("HTTP_CLIENT_TIMEOUT")
        return cls(
            timeout=float(timeout) if timeout else None,
            strict_ssl=_env_flag("HTTP_CLIENT_STRICT_SSL"),
            proxy=environment_proxy(),
            user_agent=os.getenv("HTTP_CLIENT_USER_AGENT"),
            log_level=os.getenv("HTTP_CLIENT_LOG_LEVEL", "WARNING"),
            log_format=os.getenv("HTTP_CLIENT_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid setting.
        """
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log_level: {self.log_level!r}")


def environment_proxy() -> Optional[str]:
    """Get the proxy from http_proxy / HTTP_PROXY, ignoring empty values."""
    return os.getenv("http_proxy") or os.getenv("HTTP_PROXY") or None


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")
