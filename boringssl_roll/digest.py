# boringssl_roll/digest.py
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Union

_CHUNK = 64 * 1024


def sha256sum(path: Union[str, Path]) -> str:
    """Return the hex-encoded SHA-256 digest of a file's bytes."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def same_content(a: Union[str, Path], b: Union[str, Path]) -> bool:
    return sha256sum(a) == sha256sum(b)


__all__ = ["sha256sum", "same_content"]
