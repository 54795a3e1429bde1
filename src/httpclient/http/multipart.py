"""
multipart/form-data encoding for file attachments.

    --boundary\r\n
    Content-Disposition: form-data; name="title"\r\n
    \r\n
    Holiday\r\n
    --boundary\r\n
    Content-Disposition: form-data; name="photo"; filename="beach.jpg"\r\n
    Content-Type: image/jpeg\r\n
    \r\n
    <file bytes>\r\n
    --boundary--\r\n
"""

import os
import uuid
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from .mime_types import get_mime_type


def new_boundary() -> str:
    return f"----pyhttpclient{uuid.uuid4().hex}"


def encode_multipart(
    fields: Optional[Mapping[str, Any]],
    files: Mapping[str, Union[str, Path]],
    boundary: Optional[str] = None,
) -> Tuple[bytes, str]:
    """
    Encode form fields and files as a multipart body.

    Args:
        fields: Plain form fields (values are sent as their str() form)
        files: Field name → path of the file to upload
        boundary: Part separator; random if not given

    Returns:
        (body bytes, boundary)

    Raises:
        OSError: If a file cannot be read.
    """
    boundary = boundary or new_boundary()
    separator = f"--{boundary}\r\n".encode("ascii")
    parts = []

    for name, value in (fields or {}).items():
        parts.append(separator)
        parts.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode("utf-8"))
        parts.append(str(value).encode("utf-8") + b"\r\n")

    for name, path in files.items():
        path = Path(path)
        parts.append(separator)
        parts.append(
            f'Content-Disposition: form-data; name="{name}"; '
            f'filename="{os.path.basename(path)}"\r\n'.encode("utf-8")
        )
        parts.append(f"Content-Type: {get_mime_type(path)}\r\n\r\n".encode("ascii"))
        parts.append(path.read_bytes() + b"\r\n")

    parts.append(f"--{boundary}--\r\n".encode("ascii"))
    return b"".join(parts), boundary
