# boringssl_roll/errors.py
"""
Exception taxonomy for the roll tool.

Every stage raises; nothing is retried or recovered locally. Only the CLI
(`boringssl_roll.__main__`) catches `RollError` and turns it into a
diagnostic plus a non-zero exit status.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence


class RollError(Exception):
    """Base class for every failure that aborts a roll."""


class ConfigurationError(RollError):
    """Settings are missing or inconsistent (e.g. FUCHSIA_DIR unset)."""


class ProcessFailure(RollError):
    """An external command exited non-zero or could not be started."""

    def __init__(
        self,
        cmdline: Sequence[str],
        output: str = "",
        returncode: Optional[int] = None,
        message: Optional[str] = None,
    ) -> None:
        self.cmdline: List[str] = list(cmdline)
        self.output = output
        self.returncode = returncode
        super().__init__(message or self._default_message())

    @property
    def command(self) -> str:
        return " ".join(self.cmdline)

    def _default_message(self) -> str:
        if self.returncode is None:
            return f"Could not run '{self.command}'"
        return f"'{self.command}' exited with status {self.returncode}"


class VCSError(ProcessFailure):
    """A git operation failed."""


class GenerationError(ProcessFailure):
    """A code or build-file generator failed."""


class ManifestError(ProcessFailure):
    """The dependency-manifest editor failed."""


class FormatError(RollError):
    """A marker file does not have the expected fixed-suffix layout."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path} {reason}")


class FetchError(RollError):
    """A remote artifact could not be downloaded."""


class ManualInterventionRequired(RollError):
    """One or more subset files need a human decision before the roll can finish."""

    def __init__(self, paths: Iterable[str]) -> None:
        self.paths: List[str] = sorted(set(paths))
        super().__init__(
            f"{len(self.paths)} file(s) require manual resolution: " + ", ".join(self.paths)
        )


__all__ = [
    "RollError",
    "ConfigurationError",
    "ProcessFailure",
    "VCSError",
    "GenerationError",
    "ManifestError",
    "FormatError",
    "FetchError",
    "ManualInterventionRequired",
]
