"""
=============================================================================
MIME TYPE REGISTRY
=============================================================================

Maps the short aliases callers like to type ("json", "xml", "form") to the
canonical MIME strings that go on the wire and key the codec registry.

=============================================================================
ALIASES VS CANONICAL TYPES
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │                        ALIAS TABLE                                 │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  json     → application/json                                       │
    │  xml      → application/xml                                        │
    │  html     → text/html                                              │
    │  csv      → text/csv                                               │
    │  form     → application/x-www-form-urlencoded                      │
    │  upload   → multipart/form-data                                    │
    │  plain    → text/plain                                             │
    │  js       → text/javascript                                        │
    │  yaml     → application/x-yaml                                     │
    │                                                                     │
    │  application/json → application/json   (canonical maps to itself) │
    │  application/vnd.acme+json → unchanged (unknown passes through)    │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

Resolution is TOTAL: anything not in the table is assumed to already be a
canonical MIME string and comes back unchanged. That is what lets vendor
types like "application/vnd.github.v3+json" flow through untouched, and
what makes resolve() idempotent:

    resolve(resolve("json")) == resolve("json")

=============================================================================
VENDOR TYPES
=============================================================================

APIs often version their payloads with vendor subtypes:

    application/vnd.example.message+xml
                ───────────────── ───
                       │           │
                  vendor tree    suffix: the format the body is really in

split_vendor_type() recognises the single "+suffix" form and maps the
suffix back through the alias table, so the XML codec can decode a
vendor XML document. It is a naming convention, not a grammar.

=============================================================================
"""

from pathlib import Path
from typing import Optional


# =============================================================================
# CANONICAL TYPES
# =============================================================================

JSON = "application/json"
XML = "application/xml"
XHTML = "application/html+xml"
FORM = "application/x-www-form-urlencoded"
UPLOAD = "multipart/form-data"
PLAIN = "text/plain"
JS = "text/javascript"
HTML = "text/html"
YAML = "application/x-yaml"
CSV = "text/csv"

# Default MIME type for attachments with an unknown extension
DEFAULT_MIME_TYPE = "application/octet-stream"


# =============================================================================
# ALIAS TABLE
# =============================================================================

SHORT_MAPPING = {
    "json": JSON,
    "xml": XML,
    "html": HTML,
    "xhtml": XHTML,
    "csv": CSV,
    "form": FORM,
    "upload": UPLOAD,
    "plain": PLAIN,
    "text": PLAIN,
    "js": JS,
    "javascript": JS,
    "yaml": YAML,
}


# =============================================================================
# ATTACHMENT EXTENSIONS
# =============================================================================
#
# Used to tag each part of a multipart upload with a Content-Type.
#
# =============================================================================

EXTENSION_TYPES = {
    ".html": HTML,
    ".htm": HTML,
    ".css": "text/css",
    ".js": JS,
    ".json": JSON,
    ".xml": XML,
    ".txt": PLAIN,
    ".csv": CSV,
    ".yaml": YAML,
    ".yml": YAML,
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tar": "application/x-tar",
}


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def resolve(identifier: str) -> str:
    """
    Resolve a short alias to its canonical MIME type.

    Args:
        identifier: An alias ("json") or a full MIME type

    Returns:
        The canonical MIME type. Unknown identifiers are returned verbatim.

    Examples:
        >>> resolve("json")
        'application/json'

        >>> resolve("application/xml")
        'application/xml'

        >>> resolve("application/vnd.acme+json")
        'application/vnd.acme+json'
    """
    return SHORT_MAPPING.get(identifier, identifier)


def supports_alias(alias: str) -> bool:
    """Check whether `alias` is one of the registered short names."""
    return alias in SHORT_MAPPING


def split_vendor_type(mime_type: str) -> Optional[str]:
    """
    Get the base type a vendor-specific MIME type is encoded in.

    Matches "<type>/vnd.<anything>+<suffix>" where <suffix> is a known
    alias, and returns the suffix resolved to its canonical type.

    Examples:
        >>> split_vendor_type("application/vnd.example.message+xml")
        'application/xml'

        >>> split_vendor_type("application/vnd.ms-excel") is None
        True

        >>> split_vendor_type("application/vnd.acme+unknown") is None
        True
    """
    if "/" not in mime_type:
        return None

    _, subtype = mime_type.split("/", 1)
    if not subtype.startswith("vnd.") or "+" not in subtype:
        return None

    suffix = subtype.rsplit("+", 1)[1]
    if not supports_alias(suffix):
        return None

    return resolve(suffix)


def get_mime_type(path: str | Path, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or name with extension
        default: MIME type for unknown extensions
                 (application/octet-stream if not given)

    Examples:
        >>> get_mime_type("avatar.jpg")
        'image/jpeg'

        >>> get_mime_type("blob.xyz")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()
    return EXTENSION_TYPES.get(extension, default or DEFAULT_MIME_TYPE)
