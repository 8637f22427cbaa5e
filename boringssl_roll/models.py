# boringssl_roll/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set


class FileClassification(str, Enum):
    """Outcome of comparing one uboringssl file with its BoringSSL counterpart."""

    SKIP = "skip"
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    MANUALLY_EDITED_CONFLICT = "manually-edited-conflict"
    MISSING_UPSTREAM = "missing-upstream"

    @property
    def needs_manual_action(self) -> bool:
        return self in (
            FileClassification.MANUALLY_EDITED_CONFLICT,
            FileClassification.MISSING_UPSTREAM,
        )


@dataclass
class SubsetReport:
    """
    Result of one reconciliation walk over the restricted subset.

    `files` maps each subset-relative path to its classification;
    `manual` holds the paths that need a human decision.
    """
    files: Dict[str, FileClassification] = field(default_factory=dict)
    manual: Set[str] = field(default_factory=set)

    def add(self, rel: str, cls: FileClassification) -> None:
        self.files[rel] = cls
        if cls.needs_manual_action:
            self.manual.add(rel)

    def paths(self, cls: FileClassification) -> List[str]:
        return sorted(p for p, c in self.files.items() if c is cls)

    @property
    def updated(self) -> List[str]:
        return self.paths(FileClassification.UPDATED)

    @property
    def needs_manual_action(self) -> bool:
        return bool(self.manual)


@dataclass
class PendingActions:
    """Follow-up work accumulated while stages complete."""
    packages: Set[str] = field(default_factory=set)
    tests: Set[str] = field(default_factory=set)
    commits: Set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not (self.packages or self.tests or self.commits)

    def report_lines(self) -> List[str]:
        lines: List[str] = []
        if self.packages:
            lines.append("To test, rebuild with:")
            lines.extend(f"  $ fx set ... --with {p}" for p in sorted(self.packages))
            lines.append("  $ fx build")
        if self.tests:
            lines.append("Then run:")
            lines.extend(f"  $ {t}" for t in sorted(self.tests))
        if self.commits:
            lines.append("If tests pass, commit the changes in:")
            lines.extend(f"  {c}" for c in sorted(self.commits))
        return lines


@dataclass
class RollResult:
    requested: str
    revision: Optional[str] = None
    subset: Optional[SubsetReport] = None
    pending: PendingActions = field(default_factory=PendingActions)
    stages: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RevisionCheck:
    """Revision recorded at each marker compared with the vendored checkout."""
    head: str
    markers: Dict[str, str]

    @property
    def mismatches(self) -> Dict[str, str]:
        return {k: v for k, v in sorted(self.markers.items()) if v != self.head}

    @property
    def is_consistent(self) -> bool:
        return not self.mismatches


__all__ = [
    "FileClassification",
    "SubsetReport",
    "PendingActions",
    "RollResult",
    "RevisionCheck",
]
