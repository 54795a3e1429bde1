"""
=============================================================================
TRANSPORT
=============================================================================

The transport moves a prepared request over the network and hands back the
raw response. It is deliberately the only part of the client that does I/O:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   PreparedRequest ──► Transport.transmit() ──► RawResponse          │
    │   (method, uri,        connect, TLS, proxy,     status_line,        │
    │    headers, body,      framing, chunked         raw_headers,        │
    │    options)            decoding                 body bytes)         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Anything that goes wrong on the wire becomes a TransportError. The client
never retries; the error goes straight back to the caller.

=============================================================================
THE DEFAULT TRANSPORT
=============================================================================

SessionTransport runs each exchange on a fresh requests.Session:

    TransportOptions          requests
    ──────────────────        ─────────────────────────────────────
    timeout               ──► timeout=
    strict_ssl            ──► verify=
    proxy / http_proxy    ──► proxies={"http": .., "https": ..}
    digest credentials    ──► auth=HTTPDigestAuth(..)

Redirects are returned as-is, and the session ignores the environment
(netrc, CA bundle variables) apart from the proxy fallback above.

No pooling, retries or caching. Swap in your own Transport subclass for
any of those.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import urlsplit

import requests
from requests.auth import HTTPDigestAuth

from ..config import environment_proxy
from ..errors import TransportError
from ..http.headers import Headers


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportOptions:
    """
    Per-request settings the core stores and forwards without interpreting.

    Attributes:
        timeout: Socket timeout in seconds (None = wait forever)
        strict_ssl: Verify certificate chain and hostname
        proxy: Proxy URL; falls back to http_proxy / HTTP_PROXY when None
        digest_username / digest_password: Credentials for a Digest
            challenge, set only when the request asked for digest auth
    """

    timeout: Optional[float] = None
    strict_ssl: bool = False
    proxy: Optional[str] = None
    digest_username: Optional[str] = None
    digest_password: Optional[str] = None

    @property
    def uses_digest(self) -> bool:
        return self.digest_username is not None


@dataclass(frozen=True)
class RawResponse:
    """
    A response as it came off the wire, already framed.

    raw_headers starts with the status line, e.g.

        HTTP/1.1 200 OK\r\n
        Content-Type: application/json\r\n
    """

    status_line: str
    raw_headers: str
    body: bytes


class Transport(ABC):
    """
    Abstract transport.

    Implementations must return the header block (status line first) and
    the body with any transfer encoding already removed.
    """

    @abstractmethod
    def transmit(
        self,
        method: str,
        uri: str,
        headers: Headers,
        body: Optional[bytes],
        options: TransportOptions,
    ) -> RawResponse:
        """
        Perform one exchange.

        Raises:
            TransportError: Connection refused, timeout, TLS failure,
                            malformed URI.
        """


class SessionTransport(Transport):
    """Default transport built on requests."""

    SCHEMES = ("http", "https")

    def transmit(
        self,
        method: str,
        uri: str,
        headers: Headers,
        body: Optional[bytes],
        options: TransportOptions,
    ) -> RawResponse:
        parts = urlsplit(uri)
        if parts.scheme not in self.SCHEMES or not parts.hostname:
            raise TransportError(f"Malformed URI: {uri}", uri=uri)

        proxies = self._proxies(options.proxy or environment_proxy())
        if proxies:
            logger.debug(f"Routing {uri} through proxy {proxies['http']}")

        auth = None
        if options.uses_digest:
            auth = HTTPDigestAuth(options.digest_username, options.digest_password or "")

        with requests.Session() as session:
            session.trust_env = False
            session.headers.clear()
            try:
                response = session.request(
                    method,
                    uri,
                    headers=headers.to_dict(),
                    data=body,
                    auth=auth,
                    proxies=proxies,
                    timeout=options.timeout,
                    verify=options.strict_ssl,
                    allow_redirects=False,
                )
                payload = response.content
            except requests.exceptions.Timeout as e:
                raise TransportError(f"Timed out talking to {uri}", uri=uri, was_timeout=True) from e
            except requests.exceptions.SSLError as e:
                raise TransportError(f"TLS failure for {uri}: {e}", uri=uri) from e
            except (requests.exceptions.InvalidURL, requests.exceptions.InvalidSchema) as e:
                raise TransportError(f"Malformed URI: {uri} ({e})", uri=uri) from e
            except requests.exceptions.RequestException as e:
                raise TransportError(f"Unable to connect to {uri}: {e}", uri=uri) from e

        return self._to_raw(response, payload)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @staticmethod
    def _proxies(proxy: Optional[str]) -> Dict[str, str]:
        """The same proxy for both schemes; https targets go through CONNECT."""
        if not proxy:
            return {}
        if "://" not in proxy:
            proxy = f"http://{proxy}"
        return {"http": proxy, "https": proxy}

    @staticmethod
    def _to_raw(response: requests.Response, body: bytes) -> RawResponse:
        """Rebuild the header block, one line per field as received."""
        version = "HTTP/1.0" if response.raw.version == 10 else "HTTP/1.1"
        status_line = f"{version} {response.status_code} {response.reason or ''}".rstrip()
        lines: List[str] = [status_line]
        lines.extend(f"{name}: {value}" for name, value in response.raw.headers.iteritems())
        return RawResponse(
            status_line=status_line,
            raw_headers="\r\n".join(lines) + "\r\n",
            body=body,
        )
