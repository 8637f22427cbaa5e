"""
boringssl_roll package.

Public API surface:
  - roll: programmatic entrypoint that rolls the vendored BoringSSL
  - RollSettings: immutable configuration handed to every stage
"""

from .config import RollSettings
from .orchestrator import check_revisions, reset_all, roll, submit_all

__all__ = ["RollSettings", "roll", "reset_all", "submit_all", "check_revisions"]
