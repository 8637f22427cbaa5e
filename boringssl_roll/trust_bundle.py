# boringssl_roll/trust_bundle.py
"""
CA trust bundle refresh.

Downloads Mozilla's certdata.txt, converts it to a PEM bundle with an
external converter, and records where the data came from in a JSON stamp
next to the bundle:

    {"url": "...", "sha256": "<digest of certdata.txt>", "fetched_at": "..."}
"""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import requests

from . import runner
from .config import RollSettings
from .digest import sha256sum
from .errors import FetchError, GenerationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def fetch_certdata(url: str, dest: PathLike, *, timeout: int = 60) -> Path:
    logger.info("Downloading %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to download {url}: {e}") from e

    out = Path(dest)
    out.write_bytes(response.content)
    return out


def convert_certdata(converter: str, certdata: PathLike, dest: PathLike) -> Path:
    """Run `converter <certdata>` and store its stdout as the PEM bundle."""
    pem = runner.run(
        Path(certdata).parent,
        converter,
        str(certdata),
        error=GenerationError,
        merge_stderr=False,
    )
    if b"BEGIN CERTIFICATE" not in pem:
        raise GenerationError(
            [converter, str(certdata)],
            output=pem.decode("utf-8", errors="replace")[:2000],
            returncode=0,
            message=f"{converter} produced no certificates",
        )
    out = Path(dest)
    out.write_bytes(pem)
    return out


def stamp_path(bundle_path: PathLike) -> Path:
    p = Path(bundle_path)
    return p.with_name(p.name + ".stamp")


def write_stamp(bundle_path: PathLike, url: str, digest: str) -> Dict[str, Any]:
    data = {
        "url": url,
        "sha256": digest,
        "fetched_at": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds"),
    }
    stamp_path(bundle_path).write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return data


def update_trust_bundle(settings: RollSettings) -> Dict[str, Any]:
    bundle = settings.trust_bundle_path
    bundle.parent.mkdir(parents=True, exist_ok=True)
    certdata = bundle.with_name("certdata.txt")

    fetch_certdata(settings.CERTDATA_URL, certdata, timeout=settings.HTTP_TIMEOUT)
    digest = sha256sum(certdata)
    convert_certdata(settings.CERTDATA_CONVERTER, certdata, bundle)
    stamp = write_stamp(bundle, settings.CERTDATA_URL, digest)
    logger.info("Trust bundle updated: %s (certdata %s)", bundle, digest[:12])
    return stamp


__all__ = [
    "fetch_certdata",
    "convert_certdata",
    "stamp_path",
    "write_stamp",
    "update_trust_bundle",
]
