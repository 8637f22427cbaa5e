# boringssl_roll/__main__.py
#
# Updates //third_party/boringssl/src to the current upstream revision and
# propagates it to the generated build files, the Rust bindings, Zircon's
# uboringssl subset and the integration manifest.
#
#   python -m boringssl_roll --fuchsia ~/fuchsia
#   python -m boringssl_roll --reset
#   python -m boringssl_roll --submit

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from . import orchestrator
from . import subset
from .config import RollSettings
from .errors import ManualInterventionRequired, RollError
from .logging_setup import init_logging
from .models import RollResult

logger = logging.getLogger("boringssl_roll")

# argparse dest -> RollSettings field
_OVERRIDES = {
    "fuchsia": "FUCHSIA_DIR",
    "boring": "BORINGSSL_PATH",
    "commit": "BORINGSSL_COMMIT",
    "zircon": "UBORINGSSL_PATH",
    "manifest": "MANIFEST_PATH",
    "project": "MANIFEST_PROJECT",
    "secondary_manifest": "SECONDARY_MANIFEST_PATH",
    "skip_boring": "SKIP_BORINGSSL",
    "skip_rust": "SKIP_RUST",
    "skip_zircon": "SKIP_ZIRCON",
    "skip_manifest": "SKIP_MANIFEST",
    "update_certs": "UPDATE_TRUST_BUNDLE",
    "commit_changes": "COMMIT_CHANGES",
}


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="boringssl-roll",
        description="Roll the vendored BoringSSL to a new upstream revision.",
    )
    p.add_argument("--fuchsia", help="Fuchsia root directory (default: $FUCHSIA_DIR)")
    p.add_argument("--boring", help="Path to the BoringSSL repository, relative to the Fuchsia root")
    p.add_argument("--commit", help="Upstream commit-ish to check out")
    p.add_argument("--zircon", help="Path to Zircon's uboringssl library")
    p.add_argument("--manifest", help="Integration manifest recording the BoringSSL revision")
    p.add_argument("--project", help="Project name of BoringSSL in the manifest")
    p.add_argument("--secondary-manifest", help="Additional manifest to pin to the same revision")

    p.add_argument("--skip-boring", action="store_true", default=None,
                   help="Don't update upstream sources or build files")
    p.add_argument("--skip-rust", action="store_true", default=None, help="Don't update Rust bindings")
    p.add_argument("--skip-zircon", action="store_true", default=None,
                   help="Don't update Zircon's uboringssl library")
    p.add_argument("--skip-manifest", action="store_true", default=None,
                   help="Don't update the integration manifest(s)")
    p.add_argument("--update-certs", action="store_true", default=None,
                   help="Also refresh the CA trust bundle from Mozilla's certdata.txt")
    p.add_argument("--commit-changes", action="store_true", default=None,
                   help="Commit the rolled changes in every touched repository")
    p.add_argument("--verbose", action="store_true", help="Verbose logging.")

    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--reset", action="store_true",
                      help="Discard local changes and return to the recorded revision")
    mode.add_argument("--submit", action="store_true", help="Push committed changes for review")
    mode.add_argument("--check", action="store_true",
                      help="Verify that every README marker matches the checked out revision")
    mode.add_argument("--accept-edit", nargs="+", metavar="PATH",
                      help="Record uboringssl files as deliberate hand edits of the current upstream")
    return p.parse_args(argv)


def build_settings(args: argparse.Namespace) -> RollSettings:
    overrides: Dict[str, Any] = {}
    for dest, field in _OVERRIDES.items():
        value = getattr(args, dest, None)
        if value is not None:
            overrides[field] = value
    return RollSettings(**overrides)


def _report_pending(result: RollResult) -> None:
    if result.pending.is_empty():
        logger.info("Nothing to rebuild, test or commit.")
        return
    for line in result.pending.report_lines():
        logger.info(line)
    logger.info("You can use `%s --check` to verify the revisions.", "boringssl-roll")


def _run(args: argparse.Namespace) -> int:
    settings = build_settings(args)
    settings.validate_layout()

    if args.reset:
        orchestrator.reset_all(settings)
        return 0

    if args.submit:
        orchestrator.submit_all(settings)
        return 0

    if args.check:
        check = orchestrator.check_revisions(settings)
        if check.is_consistent:
            logger.info("All revision markers match %s", check.head)
            return 0
        logger.error("Revision markers disagree with checked out revision %s:", check.head)
        for path, rev in check.mismatches.items():
            logger.error("  %s: %s", path, rev)
        return 1

    if args.accept_edit:
        for rel in args.accept_edit:
            subset.record_manual_edit(
                settings.uboringssl_dir, settings.boringssl_dir, rel, settings.baseline_path
            )
        return 0

    result = orchestrator.roll(settings)
    _report_pending(result)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = _parse_args(argv)
    init_logging(level=logging.DEBUG if args.verbose else None)

    try:
        return _run(args)
    except ManualInterventionRequired as e:
        logger.error("ERROR: These files need manual resolution:")
        for path in e.paths:
            logger.error("  %s", path)
        logger.error("Please resolve these files and try again.")
    except (RollError, OSError, ValueError) as e:
        logger.error("%s", e)
    return 1


if __name__ == "__main__":
    sys.exit(main())
