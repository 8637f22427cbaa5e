# boringssl_roll/manifest.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from . import runner
from .config import ManifestEntryKind, RollSettings
from .errors import ManifestError

logger = logging.getLogger(__name__)


def edit_args(
    manifest_path: Union[str, Path],
    project: str,
    revision: str,
    kind: ManifestEntryKind = ManifestEntryKind.PROJECT,
) -> List[str]:
    return ["edit", f"-{kind.value}={project}={revision}", str(manifest_path)]


def update_manifest(
    settings: RollSettings,
    manifest_path: Union[str, Path],
    project: str,
    revision: str,
) -> None:
    """Pin `project` to `revision` in the jiri manifest at manifest_path."""
    path = Path(manifest_path)
    if not path.is_file():
        raise ManifestError(
            [settings.JIRI_BIN, *edit_args(path, project, revision, settings.MANIFEST_ENTRY_KIND)],
            message=f"Manifest not found: {path}",
        )

    logger.info("Updating %s in %s to %s", project, path, revision)
    runner.run(
        path.parent,
        settings.JIRI_BIN,
        *edit_args(path, project, revision, settings.MANIFEST_ENTRY_KIND),
        error=ManifestError,
    )


__all__ = ["edit_args", "update_manifest"]
