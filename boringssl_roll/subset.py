# boringssl_roll/subset.py
"""
uboringssl reconciliation.

Zircon carries a small copy of selected BoringSSL sources
(zircon/third_party/ulib/uboringssl). Each roll walks that copy and brings
every file back in line with its counterpart in the vendored tree:

  - files on the skip list are maintained in Fuchsia and left alone,
  - files whose digest differs from upstream are overwritten with upstream,
  - files with no upstream counterpart are reported,
  - files listed in the hand-edit baseline are kept as long as upstream has
    not moved since the edit was made; otherwise they are reported.

The upstream counterpart of `crypto/foo.c` is looked up at
`<boringssl>/crypto/foo.c` first, then `<boringssl>/src/crypto/foo.c`.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .config import BASELINE_FILENAME, DEFAULT_SUBSET_SKIP_FILES
from .digest import same_content, sha256sum
from .models import FileClassification, SubsetReport

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Ordered: first existing candidate wins.
UPSTREAM_SUBDIRS: Tuple[str, ...] = ("", "src")


def normalize_rel(rel: str) -> str:
    return rel.replace(os.sep, "/").lstrip("/")


def upstream_candidates(vendored_root: PathLike, rel: str) -> List[Path]:
    root = Path(vendored_root)
    return [(root / sub / rel) if sub else (root / rel) for sub in UPSTREAM_SUBDIRS]


def find_upstream(vendored_root: PathLike, rel: str) -> Optional[Path]:
    for p in upstream_candidates(vendored_root, rel):
        if p.is_file():
            return p
    return None


# -----------------------------------------------------------------------------
# Hand-edit baseline
# -----------------------------------------------------------------------------
def load_baseline(path: PathLike) -> Dict[str, str]:
    """
    Read `{rel_path: upstream_sha256}` recorded for hand-edited subset files.
    A missing file means no hand edits.
    """
    p = Path(path)
    if not p.exists():
        return {}
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{p} must contain a JSON object")
    return {normalize_rel(str(k)): str(v) for k, v in data.items()}


def save_baseline(path: PathLike, baseline: Mapping[str, str]) -> None:
    p = Path(path)
    p.write_text(json.dumps(dict(sorted(baseline.items())), indent=2) + "\n", encoding="utf-8")


def record_manual_edit(
    subset_root: PathLike,
    vendored_root: PathLike,
    rel: str,
    baseline_path: Optional[PathLike] = None,
) -> str:
    """
    Accept the current local version of `rel` as a deliberate hand edit made
    against the current upstream file. Returns the recorded upstream digest.
    """
    rel = normalize_rel(rel)
    if not (Path(subset_root) / rel).is_file():
        raise FileNotFoundError(f"{rel} is not a file under {subset_root}")
    upstream = find_upstream(vendored_root, rel)
    if upstream is None:
        raise FileNotFoundError(f"{rel} has no upstream counterpart under {vendored_root}")

    path = Path(baseline_path) if baseline_path else Path(subset_root) / BASELINE_FILENAME
    baseline = load_baseline(path)
    baseline[rel] = sha256sum(upstream)
    save_baseline(path, baseline)
    logger.info("Recorded hand edit of %s (upstream %s)", rel, baseline[rel][:12])
    return baseline[rel]


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------
def classify_file(
    subset_file: PathLike,
    rel: str,
    vendored_root: PathLike,
    *,
    skip: Iterable[str] = DEFAULT_SUBSET_SKIP_FILES,
    baseline: Optional[Mapping[str, str]] = None,
) -> Tuple[FileClassification, Optional[Path]]:
    """Return the classification of one subset file and its upstream path, if any."""
    rel = normalize_rel(rel)
    skipped = {normalize_rel(s) for s in skip}
    skipped.add(BASELINE_FILENAME)
    if rel in skipped:
        return FileClassification.SKIP, None

    upstream = find_upstream(vendored_root, rel)
    if upstream is None:
        return FileClassification.MISSING_UPSTREAM, None

    if baseline and rel in baseline:
        if sha256sum(upstream) == baseline[rel]:
            return FileClassification.UNCHANGED, upstream
        return FileClassification.MANUALLY_EDITED_CONFLICT, upstream

    if same_content(upstream, subset_file):
        return FileClassification.UNCHANGED, upstream
    return FileClassification.UPDATED, upstream


def _walk_files(root: Path) -> Iterator[Tuple[Path, str]]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            p = Path(dirpath) / name
            if not p.is_file():
                continue
            yield p, normalize_rel(os.path.relpath(p, root))


def reconcile(
    subset_root: PathLike,
    vendored_root: PathLike,
    *,
    skip: Iterable[str] = DEFAULT_SUBSET_SKIP_FILES,
    baseline: Optional[Mapping[str, str]] = None,
) -> SubsetReport:
    """
    Walk every file under subset_root and copy in changed upstream files.

    The walk always completes; files needing a human decision are collected
    in `report.manual` for the caller to act on.
    """
    root = Path(subset_root)
    skip = tuple(skip)
    report = SubsetReport()

    logger.info("  Updating sources from BoringSSL...")
    for subset_file, rel in _walk_files(root):
        cls, upstream = classify_file(subset_file, rel, vendored_root, skip=skip, baseline=baseline)
        report.add(rel, cls)

        if cls is FileClassification.UPDATED and upstream is not None:
            logger.info("  [UPDATED] %s", rel)
            shutil.copyfile(upstream, subset_file)
        elif cls is FileClassification.MISSING_UPSTREAM:
            logger.warning("  [MISSING] %s has no upstream counterpart", rel)
        elif cls is FileClassification.MANUALLY_EDITED_CONFLICT:
            logger.warning("  [CONFLICT] %s was edited by hand and upstream has changed", rel)
        else:
            logger.debug("  [%s] %s", cls.value.upper(), rel)

    logger.info(
        "  %d updated, %d need manual resolution",
        len(report.updated),
        len(report.manual),
    )
    return report


__all__ = [
    "UPSTREAM_SUBDIRS",
    "upstream_candidates",
    "find_upstream",
    "load_baseline",
    "save_baseline",
    "record_manual_edit",
    "classify_file",
    "reconcile",
]
