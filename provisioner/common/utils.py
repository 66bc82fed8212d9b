"""Helper signatures: b64e, b64url, sha256_b64url, write_atomic."""

import base64
import hashlib
import os
import tempfile
from pathlib import Path
from typing import Union

PUBLIC_MODE = 0o644
SECRET_MODE = 0o600


def b64e(b: bytes) -> str:
    """Base64-encode bytes → UTF-8 string."""
    return base64.b64encode(b).decode()


def b64url(b: bytes) -> str:
    """URL-safe base64 without '=' padding (JOSE encoding)."""
    return base64.urlsafe_b64encode(b).rstrip(b"=").decode("ascii")


def sha256_b64url(data: bytes) -> str:
    """Return base64url(SHA-256(data)) without padding."""
    return b64url(hashlib.sha256(data).digest())


def write_atomic(path: Union[str, Path], data: Union[str, bytes], mode: int = PUBLIC_MODE) -> Path:
    """
    Write data to path through a temp file in the same directory + os.replace,
    so a crash never leaves a half-written artifact under the final name.
    """
    path = Path(path)
    if isinstance(data, str):
        data = data.encode("utf-8")
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    return path
