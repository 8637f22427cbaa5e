# boringssl_roll/build_files.py
from __future__ import annotations

import logging

from . import runner
from .config import RollSettings
from .errors import GenerationError

logger = logging.getLogger(__name__)

GENERATOR = ("util", "generate_build_files.py")


def generate_build_files(settings: RollSettings, output_format: str = "gn") -> None:
    """Regenerate BoringSSL's build manifests in the vendored repository."""
    script = settings.boringssl_src.joinpath(*GENERATOR)
    if not script.is_file():
        raise GenerationError(
            [settings.PYTHON_BIN, str(script), output_format],
            message=f"Build file generator not found: {script}",
        )

    logger.info("Generating build files...")
    runner.run(
        settings.boringssl_dir,
        settings.PYTHON_BIN,
        str(script),
        output_format,
        error=GenerationError,
    )


__all__ = ["generate_build_files"]
