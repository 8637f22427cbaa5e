# boringssl_roll/stamp.py
"""
Revision markers.

Both the vendored BoringSSL directory and Zircon's uboringssl subset carry a
README whose last bytes are a source URL naming the upstream revision:

    ...
    https://fuchsia.googlesource.com/third_party/boringssl/+/<revision>/

The file ends right after the trailing slash (no newline). Updating the marker
patches only the revision token in place; every byte before it is preserved.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from .errors import FormatError

logger = logging.getLogger(__name__)

README_URL_PREFIX = "https://fuchsia.googlesource.com/third_party/boringssl/+/"

# Only the tail of a README is inspected when the revision length changed.
_TAIL_BYTES = 4096

_TOKEN = re.compile(rb"[^/\s]+")


def _valid_token(token: bytes) -> bool:
    return _TOKEN.fullmatch(token) is not None


def _locate_revision(
    f: BinaryIO,
    path: str,
    prefix: bytes,
    revision_len: Optional[int] = None,
) -> Tuple[int, bytes]:
    """
    Return (offset of the revision token, current token).

    When revision_len is given the prefix is first expected at
    size - (len(prefix) + revision_len + 1). Otherwise, or when that offset
    does not hold the prefix, the tail of the file is searched for
    `prefix + token + "/"` anchored at EOF.
    A file too short to hold the new marker is rejected outright, even if
    an older, shorter marker would fit.
    """
    size = f.seek(0, 2)

    if revision_len is not None:
        off = size - (len(prefix) + revision_len + 1)
        if off < 0:
            raise FormatError(path, "is too short to end with a valid revision URL")
        f.seek(off)
        if f.read(len(prefix)) == prefix:
            token = f.read()
            if token.endswith(b"/") and _valid_token(token[:-1]):
                return off + len(prefix), token[:-1]

    tail_start = max(0, size - _TAIL_BYTES)
    f.seek(tail_start)
    tail = f.read()
    m = re.search(re.escape(prefix) + rb"([^/\s]+)/\Z", tail)
    if m:
        return tail_start + m.start(1), m.group(1)

    if size < len(prefix) + 2:
        raise FormatError(path, "is too short to end with a valid revision URL")
    raise FormatError(path, "does not end with a valid revision URL")


def update_readme(
    readme_path: Union[str, Path],
    revision: str,
    prefix: str = README_URL_PREFIX,
) -> str:
    """
    Rewrite the trailing revision of `readme_path` to `revision`.

    Returns the previous revision. On FormatError the file is left untouched.
    """
    new = revision.encode("ascii")
    if not _valid_token(new):
        raise ValueError(f"Invalid revision {revision!r}")

    path = str(readme_path)
    logger.info("  Updating README file %s", path)
    with open(path, "r+b") as f:
        off, old = _locate_revision(f, path, prefix.encode("ascii"), len(new))
        f.seek(off)
        f.write(new + b"/")
        f.truncate()

    return old.decode("ascii")


def read_readme_revision(
    readme_path: Union[str, Path],
    prefix: str = README_URL_PREFIX,
) -> str:
    """Return the revision currently recorded at the end of `readme_path`."""
    path = str(readme_path)
    with open(path, "rb") as f:
        _, token = _locate_revision(f, path, prefix.encode("ascii"))
    return token.decode("ascii")


__all__ = ["README_URL_PREFIX", "update_readme", "read_readme_revision"]
