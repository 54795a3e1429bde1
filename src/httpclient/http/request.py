"""
=============================================================================
REQUEST DESCRIPTOR
=============================================================================

Describes an outgoing request declaratively and turns it into wire form.

    response = (Request.post("https://api.example.com/users")
        .sends("json")
        .expects("json")
        .body({"name": "Nathan"})
        .authenticate_with("nathan", "opensesame")
        .send())

Every builder method mutates the request and returns it, so calls chain.
A Request belongs to the thread that built it; nothing here is locked.

=============================================================================
SEND TYPE VS EXPECT TYPE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   sends("json")    content_type  = application/json                 │
    │                    ├─► Content-Type header                          │
    │                    └─► picks the codec that SERIALIZES the payload  │
    │                                                                      │
    │   expects("xml")   expected_type = application/xml                  │
    │                    └─► Accept header only                           │
    │                                                                      │
    │   The response is decoded by ITS OWN Content-Type, never by the     │
    │   expect type. "expects" is a hint to the server, not an override.  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Both types are resolved through the MIME registry the moment they are set,
so after any builder call they hold canonical strings, never aliases.

=============================================================================
PAYLOAD SERIALIZATION
=============================================================================

Payloads are wrapped in one of three variants when set:

    bytes            → RawBytes     already wire data
    str              → Text         already serialized text
    anything else    → Structured   needs a codec

and the serialization policy decides what happens at prepare time:

    ┌──────────┬──────────────────────────────────────────────────────────┐
    │ NEVER    │ Passed through as-is (str() form for Structured).       │
    │          │ Used for file uploads.                                   │
    ├──────────┼──────────────────────────────────────────────────────────┤
    │ SMART    │ RawBytes and Text pass through, Structured is           │
    │ (default)│ serialized.                                              │
    ├──────────┼──────────────────────────────────────────────────────────┤
    │ ALWAYS   │ Every payload goes through the serializer.              │
    └──────────┴──────────────────────────────────────────────────────────┘

The serializer is a custom one from register_payload_serializer() if one
matches the content type (or "*"), else the registry's codec for the
content type, else the payload's literal string form.

=============================================================================
"""

import copy
import logging
import platform
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import quote, urlencode

from .. import __version__, auth
from ..codecs.registry import CodecRegistry, default_registry
from ..config import ClientConfig, environment_proxy
from ..core.transport import SessionTransport, Transport, TransportOptions
from ..errors import EncodeError, TransportError
from ..logging import ExchangeLog, log_exchange, now_timestamp
from . import mime_types
from .headers import Headers
from .multipart import encode_multipart
from .response import Response, ResponseDecoder


logger = logging.getLogger(__name__)


class Method(str, Enum):
    """HTTP methods a Request can use."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"

    def __str__(self) -> str:
        return self.value


class SerializePolicy(Enum):
    """When to run the payload through a serializer."""

    ALWAYS = "always"
    NEVER = "never"
    SMART = "smart"


class AuthMechanism(Enum):
    NONE = "none"
    BASIC = "basic"
    DIGEST = "digest"


# =============================================================================
# PAYLOAD VARIANTS
# =============================================================================

@dataclass(frozen=True)
class RawBytes:
    data: bytes


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Structured:
    value: Any


Payload = Union[RawBytes, Text, Structured]


def wrap_payload(value: Any) -> Optional[Payload]:
    """Tag a caller-supplied payload with its variant."""
    if value is None:
        return None
    if isinstance(value, (RawBytes, Text, Structured)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return RawBytes(bytes(value))
    if isinstance(value, str):
        return Text(value)
    return Structured(value)


def _literal(payload: Payload) -> bytes:
    """The payload as wire bytes without any codec."""
    if isinstance(payload, RawBytes):
        return payload.data
    if isinstance(payload, Text):
        return payload.text.encode("utf-8")
    return str(payload.value).encode("utf-8")


def _unwrap(payload: Payload) -> Any:
    if isinstance(payload, RawBytes):
        return payload.data
    if isinstance(payload, Text):
        return payload.text
    return payload.value


# =============================================================================
# BYTE LENGTH
# =============================================================================

def char_byte_length(char: str) -> int:
    """
    Get the UTF-8 length of one character from its leading byte.

        0xxxxxxx → 1     110xxxxx → 2     1110xxxx → 3     11110xxx → 4

    Examples:
        >>> char_byte_length("A")
        1
        >>> char_byte_length("À")
        2
        >>> char_byte_length("世")
        3
    """
    lead = char.encode("utf-8")[0]
    if lead < 0x80:
        return 1
    if lead >> 5 == 0b110:
        return 2
    if lead >> 4 == 0b1110:
        return 3
    return 4


def determine_length(text: str) -> int:
    """UTF-8 byte length of `text`, e.g. "Àb" → 3, "世界" → 6."""
    return sum(char_byte_length(char) for char in text)


# =============================================================================
# PREPARED REQUEST
# =============================================================================

@dataclass(frozen=True)
class PreparedRequest:
    """
    Immutable snapshot of a Request in wire form.

    Built by Request.prepare(); this is what the transport receives.
    """

    method: str
    uri: str
    headers: Headers
    body: Optional[bytes]
    options: TransportOptions


class Request:
    """
    Builder for an outgoing HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:            Method enum value (GET by default)
        uri:               Target URI, query parameters included
        headers:           User-supplied headers (Headers)
        content_type:      Canonical send type, or None
        expected_type:     Canonical expect type, or None
        payload:           RawBytes | Text | Structured | None
        serialize_policy:  SerializePolicy (SMART by default)
        auto_parse:        Decode response bodies (True by default)
        strict_ssl:        Verify TLS certificates
        timeout:           Seconds, or None
        proxy:             Proxy URL, or None to use the environment
        username/password: Credentials for auth_mechanism

    =========================================================================
    TEMPLATES
    =========================================================================

    Request.ini(template) makes every later Request.init() start as a
    copy of `template`:

        Request.ini(Request.init().with_strict_ssl().expects("json"))
        Request.get(url).expected_type      # 'application/json'
        Request.reset_ini()

    =========================================================================
    """

    _template: Optional["Request"] = None

    ACCEPT_FALLBACK = "*/*; q=0.5, text/plain; q=0.8, text/html;level=3"

    def __init__(
        self,
        method: Union[Method, str] = Method.GET,
        uri: str = "",
        config: Optional[ClientConfig] = None,
    ):
        config = config or ClientConfig.from_env()

        self.method = Method(str(method).upper())
        self.uri = uri
        self.headers = Headers()
        self.content_type: Optional[str] = None
        self.expected_type: Optional[str] = None

        self.username: Optional[str] = None
        self.password: Optional[str] = None
        self.auth_mechanism = AuthMechanism.NONE

        self.payload: Optional[Payload] = None
        self.serialized_payload: Optional[bytes] = None
        self.serialize_policy = SerializePolicy.SMART
        self.attachments: Dict[str, Path] = {}

        self.auto_parse = config.auto_parse
        self.strict_ssl = config.strict_ssl
        self.timeout = config.timeout
        self.proxy = config.proxy
        self.user_agent = config.user_agent
        self.log_format = config.log_format

        self.parse_callback: Optional[Callable[[bytes], Any]] = None
        self.payload_serializers: Dict[str, Callable[[Any], Union[str, bytes]]] = {}
        self._before_send: List[Callable[["Request"], None]] = []
        self._error_handler: Optional[Callable[[TransportError], None]] = None

        self.registry: CodecRegistry = default_registry
        self.transport: Optional[Transport] = None

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @classmethod
    def init(cls, method: Union[Method, str, None] = None, mime: Optional[str] = None) -> "Request":
        """
        Create a request, starting from the template if one is installed.

        Args:
            method: HTTP method (keeps the template's, or GET)
            mime: Send and expect type, alias or canonical
        """
        request = cls._template._clone() if cls._template is not None else cls()
        if method is not None:
            request.with_method(method)
        if mime is not None:
            request.mime(mime)
        return request

    @classmethod
    def get(cls, uri: str, mime: Optional[str] = None) -> "Request":
        return cls.init(Method.GET).with_uri(uri)._maybe_mime(mime)

    @classmethod
    def post(cls, uri: str, payload: Any = None, mime: Optional[str] = None) -> "Request":
        return cls.init(Method.POST).with_uri(uri).body(payload, mime)

    @classmethod
    def put(cls, uri: str, payload: Any = None, mime: Optional[str] = None) -> "Request":
        return cls.init(Method.PUT).with_uri(uri).body(payload, mime)

    @classmethod
    def patch(cls, uri: str, payload: Any = None, mime: Optional[str] = None) -> "Request":
        return cls.init(Method.PATCH).with_uri(uri).body(payload, mime)

    @classmethod
    def delete(cls, uri: str, mime: Optional[str] = None) -> "Request":
        return cls.init(Method.DELETE).with_uri(uri)._maybe_mime(mime)

    @classmethod
    def head(cls, uri: str) -> "Request":
        return cls.init(Method.HEAD).with_uri(uri)

    @classmethod
    def options(cls, uri: str) -> "Request":
        return cls.init(Method.OPTIONS).with_uri(uri)

    # =========================================================================
    # TEMPLATES
    # =========================================================================

    @classmethod
    def ini(cls, template: "Request") -> None:
        """Install `template` as the starting point for init()."""
        cls._template = template._clone()

    @classmethod
    def reset_ini(cls) -> None:
        cls._template = None

    @classmethod
    def default(cls, attr: str) -> Any:
        """Read `attr` from the template (or from a fresh Request)."""
        source = cls._template if cls._template is not None else cls()
        return getattr(source, attr)

    def _clone(self) -> "Request":
        clone = copy.copy(self)
        clone.headers = self.headers.copy()
        clone.attachments = dict(self.attachments)
        clone.payload_serializers = dict(self.payload_serializers)
        clone._before_send = list(self._before_send)
        clone.serialized_payload = None
        return clone

    # =========================================================================
    # TARGET
    # =========================================================================

    def with_method(self, method: Union[Method, str]) -> "Request":
        self.method = Method(str(method).upper())
        return self

    def with_uri(self, uri: str) -> "Request":
        self.uri = uri
        return self

    def param(self, key: str, value: Any) -> "Request":
        """
        Append ``key=value`` to the query string.

        Silently does nothing when key or value is empty.

        Example:
            Request.get("http://example.com?a=b").param("c", "d").uri
            # 'http://example.com?a=b&c=d'
        """
        if key == "" or value is None or value == "":
            return self

        pair = urlencode({key: value}, quote_via=quote)
        fragment = ""
        uri = self.uri
        if "#" in uri:
            uri, fragment = uri.split("#", 1)
            fragment = "#" + fragment

        joiner = "&" if "?" in uri else "?"
        if uri.endswith(("?", "&")):
            joiner = ""
        self.uri = f"{uri}{joiner}{pair}{fragment}"
        return self

    def params(self, params: Dict[str, Any]) -> "Request":
        for key, value in params.items():
            self.param(key, value)
        return self

    # =========================================================================
    # NEGOTIATION
    # =========================================================================

    def sends(self, mime: str) -> "Request":
        """Set the send type (alias or canonical)."""
        self.content_type = mime_types.resolve(mime)
        return self

    sends_type = sends

    def expects(self, mime: str) -> "Request":
        """Set the expect type; only affects the Accept header."""
        self.expected_type = mime_types.resolve(mime)
        return self

    expects_type = expects

    def sends_and_expects(self, mime: str) -> "Request":
        return self.sends(mime).expects(mime)

    sends_and_expects_type = sends_and_expects
    mime = sends_and_expects

    def sends_json(self) -> "Request":
        return self.sends(mime_types.JSON)

    def expects_json(self) -> "Request":
        return self.expects(mime_types.JSON)

    def sends_xml(self) -> "Request":
        return self.sends(mime_types.XML)

    def expects_xml(self) -> "Request":
        return self.expects(mime_types.XML)

    def sends_form(self) -> "Request":
        return self.sends(mime_types.FORM)

    def expects_csv(self) -> "Request":
        return self.expects(mime_types.CSV)

    def _maybe_mime(self, mime: Optional[str]) -> "Request":
        return self.mime(mime) if mime else self

    # =========================================================================
    # PAYLOAD
    # =========================================================================

    def body(self, payload: Any, mime: Optional[str] = None) -> "Request":
        """
        Set the payload, and optionally the send type.

        bytes and str are taken as already serialized; anything else is
        serialized at prepare time (see module docs).
        """
        self.payload = wrap_payload(payload)
        if mime:
            self.sends(mime)
        return self

    def serialize_payload(self, policy: Union[SerializePolicy, str]) -> "Request":
        self.serialize_policy = SerializePolicy(policy)
        return self

    def always_serialize_payload(self) -> "Request":
        return self.serialize_payload(SerializePolicy.ALWAYS)

    def never_serialize_payload(self) -> "Request":
        return self.serialize_payload(SerializePolicy.NEVER)

    def smart_serialize_payload(self) -> "Request":
        return self.serialize_payload(SerializePolicy.SMART)

    def register_payload_serializer(
        self, mime: str, serializer: Callable[[Any], Union[str, bytes]]
    ) -> "Request":
        """
        Use `serializer` for payloads sent as `mime`.

        "*" matches every content type without a more specific serializer.
        """
        key = "*" if mime == "*" else mime_types.resolve(mime)
        self.payload_serializers[key] = serializer
        return self

    def attach(self, files: Dict[str, Union[str, Path]]) -> "Request":
        """
        Attach local files as a multipart/form-data upload.

        A mapping payload set with body() is sent alongside as plain form
        fields.

        Args:
            files: Form field name → file path
        """
        for name, path in files.items():
            self.attachments[name] = Path(path)
        self.sends(mime_types.UPLOAD)
        self.serialize_policy = SerializePolicy.NEVER
        return self

    def is_upload(self) -> bool:
        return self.content_type == mime_types.UPLOAD

    # =========================================================================
    # HEADERS
    # =========================================================================

    def add_header(self, name: str, value: str) -> "Request":
        """Set header `name`, replacing any previous value."""
        self.headers[name] = value
        return self

    def add_headers(self, headers: Dict[str, str]) -> "Request":
        for name, value in headers.items():
            self.add_header(name, value)
        return self

    def with_user_agent(self, user_agent: str) -> "Request":
        """Override the User-Agent; "" sends an empty header."""
        self.user_agent = user_agent
        return self

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================

    def authenticate_with(self, username: str, password: str) -> "Request":
        """Use HTTP Basic authentication."""
        self.username = username
        self.password = password
        self.auth_mechanism = AuthMechanism.BASIC
        return self

    basic_auth = authenticate_with

    def authenticate_with_digest(self, username: str, password: str) -> "Request":
        """Use HTTP Digest authentication (answered by the transport)."""
        self.username = username
        self.password = password
        self.auth_mechanism = AuthMechanism.DIGEST
        return self

    digest_auth = authenticate_with_digest

    def has_basic_auth(self) -> bool:
        return self.auth_mechanism is AuthMechanism.BASIC and self.username is not None

    def has_digest_auth(self) -> bool:
        return self.auth_mechanism is AuthMechanism.DIGEST and self.username is not None

    # =========================================================================
    # TRANSPORT OPTIONS
    # =========================================================================

    def with_strict_ssl(self) -> "Request":
        self.strict_ssl = True
        return self

    def without_strict_ssl(self) -> "Request":
        self.strict_ssl = False
        return self

    def timeout_in(self, seconds: float) -> "Request":
        if seconds <= 0:
            raise ValueError(f"timeout must be > 0, got {seconds}")
        self.timeout = seconds
        return self

    def use_proxy(
        self,
        host: str,
        port: int = 80,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> "Request":
        """Route this request through an HTTP proxy."""
        credentials = ""
        if username is not None:
            credentials = f"{quote(username, safe='')}:{quote(password or '', safe='')}@"
        self.proxy = f"http://{credentials}{host}:{port}"
        return self

    def has_proxy(self) -> bool:
        """True when a proxy is set here or in http_proxy / HTTP_PROXY."""
        return self.proxy is not None or environment_proxy() is not None

    def using(self, transport: Transport) -> "Request":
        self.transport = transport
        return self

    def with_registry(self, registry: CodecRegistry) -> "Request":
        """Negotiate with `registry` instead of the process-wide default."""
        self.registry = registry
        return self

    # =========================================================================
    # RESPONSE HANDLING
    # =========================================================================

    def with_auto_parsing(self) -> "Request":
        self.auto_parse = True
        return self

    def without_auto_parsing(self) -> "Request":
        self.auto_parse = False
        return self

    def parse_with(self, callback: Callable[[bytes], Any]) -> "Request":
        """Parse response bodies with `callback` instead of a codec."""
        self.parse_callback = callback
        return self

    def before_send(self, callback: Callable[["Request"], None]) -> "Request":
        """
        Run `callback(request)` after the payload is serialized and before
        the wire headers are built. It may still change uri or headers.
        """
        self._before_send.append(callback)
        return self

    def when_error(self, callback: Callable[[TransportError], None]) -> "Request":
        """Call `callback(error)` before a TransportError is re-raised."""
        self._error_handler = callback
        return self

    # =========================================================================
    # PREPARATION
    # =========================================================================

    def prepare(self) -> PreparedRequest:
        """
        Serialize the payload and render the wire headers.

        Raises:
            EncodeError: If the payload cannot be serialized.
        """
        body, boundary = self._build_body()
        self.serialized_payload = body

        for callback in self._before_send:
            callback(self)

        headers = self._render_headers(body, boundary)

        options = TransportOptions(
            timeout=self.timeout,
            strict_ssl=self.strict_ssl,
            proxy=self.proxy,
            digest_username=self.username if self.has_digest_auth() else None,
            digest_password=self.password if self.has_digest_auth() else None,
        )
        return PreparedRequest(
            method=self.method.value,
            uri=self.uri,
            headers=headers,
            body=body,
            options=options,
        )

    def _build_body(self) -> Tuple[Optional[bytes], Optional[str]]:
        if self.attachments:
            fields = None
            if isinstance(self.payload, Structured) and isinstance(self.payload.value, dict):
                fields = self.payload.value
            try:
                return encode_multipart(fields, self.attachments)
            except OSError as e:
                raise EncodeError(f"Unable to read attachment: {e}", mime_type=mime_types.UPLOAD) from e

        return self._serialize_payload(), None

    def _serialize_payload(self) -> Optional[bytes]:
        payload = self.payload
        if payload is None:
            return None

        if self.serialize_policy is SerializePolicy.NEVER:
            return _literal(payload)

        if self.serialize_policy is SerializePolicy.SMART and isinstance(payload, (RawBytes, Text)):
            return _literal(payload)

        value = _unwrap(payload)

        serializer = self.payload_serializers.get(self.content_type or "") or \
            self.payload_serializers.get("*")
        if serializer is not None:
            result = serializer(value)
            return result.encode("utf-8") if isinstance(result, str) else result

        codec = self.registry.lookup(self.content_type) if self.content_type else None
        if codec is None:
            return _literal(payload)
        return codec.serialize(value)

    def _render_headers(self, body: Optional[bytes], boundary: Optional[str]) -> Headers:
        rendered = Headers()

        if self.content_type and "Content-Type" not in self.headers:
            content_type = self.content_type
            if boundary:
                content_type += f"; boundary={boundary}"
            rendered["Content-Type"] = content_type

        if "Accept" not in self.headers:
            accept = self.ACCEPT_FALLBACK
            if self.expected_type:
                accept = f"{self.expected_type}, text/html;level=3;q=0.9, text/plain;q=0.8, */*;q=0.5"
            rendered["Accept"] = accept

        if "User-Agent" not in self.headers:
            rendered["User-Agent"] = self._user_agent()

        if self.has_basic_auth() and "Authorization" not in self.headers:
            rendered["Authorization"] = auth.basic_authorization(self.username, self.password or "")

        for name, value in self.headers.raw_items():
            if name.lower() != "content-length":
                rendered.add(name, value)

        if body is not None:
            rendered["Content-Length"] = str(self._content_length(body))

        return rendered

    def _content_length(self, body: bytes) -> int:
        if isinstance(self.payload, Text) and body == _literal(self.payload):
            return determine_length(self.payload.text)
        return len(body)

    def _user_agent(self) -> str:
        if self.user_agent is not None:
            return self.user_agent
        return f"pyhttp-client/{__version__} (Python {platform.python_version()})"

    # =========================================================================
    # SENDING
    # =========================================================================

    def send(self, transport: Optional[Transport] = None) -> Response:
        """
        Prepare, transmit and decode.

        Args:
            transport: Overrides the transport set with using()

        Returns:
            The decoded Response.

        Raises:
            EncodeError: Payload could not be serialized (nothing was sent)
            TransportError: The exchange failed
            ParseError: Malformed status line
            DecodeError: Body invalid for its content type
        """
        prepared = self.prepare()
        transport = transport or self.transport or SessionTransport()

        request_id = uuid.uuid4().hex[:8]
        start_time = time.time()
        logger.debug(f"[{request_id}] {prepared.method} {prepared.uri}")

        try:
            raw = transport.transmit(
                prepared.method,
                prepared.uri,
                prepared.headers,
                prepared.body,
                prepared.options,
            )
        except TransportError as e:
            duration_ms = (time.time() - start_time) * 1000
            handler = self._error_handler or _log_transport_error
            handler(e)
            logger.debug(f"[{request_id}] failed after {duration_ms:.2f}ms")
            raise

        response = ResponseDecoder(self.registry).decode(raw.body, raw.raw_headers, self)

        log_exchange(
            ExchangeLog(
                request_id=request_id,
                method=prepared.method,
                uri=prepared.uri,
                status_code=response.code,
                content_type=response.content_type,
                content_length=len(raw.body),
                duration_ms=(time.time() - start_time) * 1000,
                timestamp=now_timestamp(),
            ),
            log_format=self.log_format,
        )
        return response

    def __repr__(self) -> str:
        return f"<Request {self.method.value} {self.uri!r}>"


def _log_transport_error(error: TransportError) -> None:
    logger.error(f"Request to {error.uri or '?'} failed: {error}")
