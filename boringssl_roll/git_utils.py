# boringssl_roll/git_utils.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from . import runner
from .errors import VCSError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _git(repo_dir: PathLike, *args: str, git: str = "git") -> str:
    out = runner.run(repo_dir, git, *args, error=VCSError)
    return out.decode("utf-8", errors="replace").strip()


def current_revision(src_dir: PathLike, *, git: str = "git") -> str:
    """Return the full SHA of HEAD in src_dir."""
    rev = _git(src_dir, "rev-list", "HEAD", "--max-count=1", git=git)
    if not rev:
        raise VCSError([git, "rev-list", "HEAD", "--max-count=1"], output="", returncode=0,
                       message=f"Cannot resolve HEAD in {src_dir}")
    return rev


def sync_sources(src_dir: PathLike, commitish: str, *, git: str = "git") -> str:
    """
    Fetch upstream history, check out `commitish` and return the canonical
    commit now checked out.
    """
    logger.info("Updating sources in %s to %s...", src_dir, commitish)
    _git(src_dir, "fetch", git=git)
    _git(src_dir, "checkout", commitish, git=git)
    rev = current_revision(src_dir, git=git)
    logger.info("  Checked out %s", rev)
    return rev


def path_prefix(repo_dir: PathLike, *, git: str = "git") -> str:
    """Return repo_dir relative to its repository root ("" at the root)."""
    return _git(repo_dir, "rev-parse", "--show-prefix", git=git)


def reset_repo(repo_dir: PathLike, *, ref: str = "HEAD", git: str = "git") -> None:
    """
    Discard local modifications and untracked files under repo_dir.

    At a repository root this is `reset --hard` + `clean -fd`. Inside a larger
    repository (uboringssl lives in the Zircon tree) only repo_dir is touched.
    """
    logger.info("Resetting %s to %s", repo_dir, ref)
    if not path_prefix(repo_dir, git=git):
        _git(repo_dir, "reset", "--hard", ref, git=git)
        _git(repo_dir, "clean", "-fd", git=git)
        return
    _git(repo_dir, "reset", "--quiet", ref, "--", ".", git=git)
    _git(repo_dir, "checkout", ref, "--", ".", git=git)
    _git(repo_dir, "clean", "-fd", "--", ".", git=git)


def checkout(repo_dir: PathLike, ref: str, *, git: str = "git") -> None:
    _git(repo_dir, "checkout", ref, git=git)


def has_changes(repo_dir: PathLike, *, git: str = "git") -> bool:
    """True when anything under repo_dir differs from HEAD."""
    return bool(_git(repo_dir, "status", "--porcelain", "--", ".", git=git))


def commit_repo(repo_dir: PathLike, message: str, *, git: str = "git") -> bool:
    """
    Stage every change under repo_dir and commit only those paths.
    Returns False when repo_dir is clean.
    """
    if not has_changes(repo_dir, git=git):
        logger.info("Nothing to commit in %s", repo_dir)
        return False
    _git(repo_dir, "add", "--all", "--", ".", git=git)
    _git(repo_dir, "commit", "-m", message, "--", ".", git=git)
    logger.info("Committed changes in %s", repo_dir)
    return True


def push_repo(repo_dir: PathLike, *, remote: str = "origin", branch: str = "master", git: str = "git") -> None:
    """Push HEAD for review."""
    logger.info("Submitting %s for review on %s/%s", repo_dir, remote, branch)
    _git(repo_dir, "push", remote, f"HEAD:refs/for/{branch}", git=git)


__all__ = [
    "current_revision",
    "sync_sources",
    "path_prefix",
    "reset_repo",
    "checkout",
    "has_changes",
    "commit_repo",
    "push_repo",
]
