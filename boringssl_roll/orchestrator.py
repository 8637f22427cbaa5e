# boringssl_roll/orchestrator.py
"""
Roll orchestration.

    source sync -> README stamp -> build files -> [uboringssl] -> [bindings]
        -> [trust bundle] -> [manifests] -> [commit]

Stages run strictly in order and every failure propagates to the caller, so a
half-rolled revision is never committed or recorded in a manifest.
`reset_all` and `submit_all` are alternate entry points that bypass the
pipeline.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from . import bindgen, build_files, git_utils, manifest, stamp, subset, trust_bundle
from .config import RollSettings
from .errors import ManualInterventionRequired
from .models import PendingActions, RevisionCheck, RollResult, SubsetReport

logger = logging.getLogger(__name__)

BORINGSSL_TEST_PACKAGE = "garnet/packages/tests/boringssl"
BORINGSSL_TESTS = ("fx run-test boringssl_tests",)
ZIRCON_TESTS = ("k ut prng", "/boot/test/sys/crypto_test")


def commit_message(revision: str) -> str:
    return f"[boringssl] Roll BoringSSL to {revision[:12]}\n\nUpstream revision: {revision}\n"


# -----------------------------------------------------------------------------
# Stages
# -----------------------------------------------------------------------------
def update_boringssl(settings: RollSettings) -> str:
    """Check out the requested upstream commit, stamp the README, regenerate build files."""
    logger.info("Updating BoringSSL from upstream...")
    revision = git_utils.sync_sources(
        settings.boringssl_src, settings.BORINGSSL_COMMIT, git=settings.GIT_BIN
    )
    stamp.update_readme(settings.boringssl_readme, revision, settings.README_URL_PREFIX)
    build_files.generate_build_files(settings)
    return revision


def update_zircon(settings: RollSettings, revision: str) -> SubsetReport:
    """Stamp uboringssl's README and reconcile its sources with the vendored tree."""
    logger.info("Updating Zircon's uboringssl library...")
    stamp.update_readme(settings.uboringssl_readme, revision, settings.README_URL_PREFIX)
    return subset.reconcile(
        settings.uboringssl_dir,
        settings.boringssl_dir,
        skip=settings.SUBSET_SKIP_FILES,
        baseline=subset.load_baseline(settings.baseline_path),
    )


def update_rust(settings: RollSettings) -> Path:
    logger.info("Updating Rust bindings...")
    return bindgen.generate_bindings(
        settings.boringssl_src / "include" / "openssl",
        settings.rust_crate_dir / "src" / "lib.rs",
        bindgen=settings.BINDGEN_BIN,
        target=settings.BINDGEN_TARGET,
        workdir=settings.rust_crate_dir,
    )


def update_manifests(settings: RollSettings, revision: str) -> List[Path]:
    paths = [settings.manifest_path]
    if settings.secondary_manifest_path is not None:
        paths.append(settings.secondary_manifest_path)
    for path in paths:
        manifest.update_manifest(settings, path, settings.MANIFEST_PROJECT, revision)
    return paths


def commit_all(settings: RollSettings, revision: str, pending: PendingActions) -> List[str]:
    committed: List[str] = []
    for repo in sorted(pending.commits):
        if git_utils.commit_repo(repo, commit_message(revision), git=settings.GIT_BIN):
            committed.append(repo)
    pending.commits.difference_update(committed)
    return committed


# -----------------------------------------------------------------------------
# Programmatic API
# -----------------------------------------------------------------------------
def roll(settings: RollSettings) -> RollResult:
    """Roll BoringSSL to settings.BORINGSSL_COMMIT and propagate the revision."""
    result = RollResult(requested=settings.BORINGSSL_COMMIT)
    pending = result.pending

    if settings.SKIP_BORINGSSL:
        revision = git_utils.current_revision(settings.boringssl_src, git=settings.GIT_BIN)
        logger.info("Skipping upstream sync; using checked out revision %s", revision)
    else:
        revision = update_boringssl(settings)
        result.stages.append("boringssl")
        pending.packages.add(BORINGSSL_TEST_PACKAGE)
        pending.tests.update(BORINGSSL_TESTS)
        pending.commits.add(str(settings.boringssl_dir))
    result.revision = revision

    if not settings.SKIP_ZIRCON:
        report = update_zircon(settings, revision)
        result.subset = report
        result.stages.append("zircon")
        if report.needs_manual_action:
            raise ManualInterventionRequired(report.manual)
        pending.tests.update(ZIRCON_TESTS)
        pending.commits.add(str(settings.uboringssl_dir))

    if not settings.SKIP_RUST:
        update_rust(settings)
        result.stages.append("rust")
        pending.commits.add(str(settings.boringssl_dir))

    if settings.UPDATE_TRUST_BUNDLE:
        trust_bundle.update_trust_bundle(settings)
        result.stages.append("trust-bundle")
        pending.commits.add(str(settings.trust_bundle_path.parent))

    if not settings.SKIP_MANIFEST:
        for path in update_manifests(settings, revision):
            pending.commits.add(str(path.parent))
        result.stages.append("manifest")

    if settings.COMMIT_CHANGES:
        commit_all(settings, revision, pending)
        result.stages.append("commit")

    logger.info("Done! BoringSSL is at %s", revision)
    return result


def tracked_repos(settings: RollSettings) -> List[Path]:
    repos = [settings.boringssl_dir, settings.uboringssl_dir]
    if not settings.SKIP_MANIFEST:
        repos.append(settings.manifest_path.parent)
        if settings.secondary_manifest_path is not None:
            repos.append(settings.secondary_manifest_path.parent)
    seen: Dict[str, Path] = {}
    for r in repos:
        seen.setdefault(str(r), r)
    return [p for p in seen.values() if p.is_dir()]


def reset_all(settings: RollSettings) -> str:
    """
    Discard local changes in every tracked repository and put the vendored
    sources back at the revision recorded in README.fuchsia.
    """
    for repo in tracked_repos(settings):
        git_utils.reset_repo(repo, git=settings.GIT_BIN)
    recorded = stamp.read_readme_revision(settings.boringssl_readme, settings.README_URL_PREFIX)
    git_utils.reset_repo(settings.boringssl_src, git=settings.GIT_BIN)
    git_utils.checkout(settings.boringssl_src, recorded, git=settings.GIT_BIN)
    logger.info("Reset complete; BoringSSL sources at %s", recorded)
    return recorded


def submit_all(settings: RollSettings) -> List[Path]:
    repos = tracked_repos(settings)
    for repo in repos:
        git_utils.push_repo(
            repo, remote=settings.GIT_REMOTE, branch=settings.REVIEW_BRANCH, git=settings.GIT_BIN
        )
    return repos


def check_revisions(settings: RollSettings) -> RevisionCheck:
    """Compare the checked out revision with every README marker."""
    head = git_utils.current_revision(settings.boringssl_src, git=settings.GIT_BIN)
    markers: Dict[str, str] = {}
    for readme in (settings.boringssl_readme, settings.uboringssl_readme):
        if readme.exists():
            markers[str(readme)] = stamp.read_readme_revision(readme, settings.README_URL_PREFIX)
    return RevisionCheck(head=head, markers=markers)


__all__ = [
    "roll",
    "reset_all",
    "submit_all",
    "check_revisions",
    "tracked_repos",
    "update_boringssl",
    "update_zircon",
    "update_rust",
    "update_manifests",
    "commit_all",
    "commit_message",
]
