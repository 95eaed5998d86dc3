"""
CredSentry History Scanner

Replays a scan over the commits of a git repository, newest first. Each
commit is checked out into a temporary detached worktree, so the user's
working copy is never touched. File paths in the results are relative to
the repository root.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Iterator, List, Optional

from credsentry.core.classifier import Classifier
from credsentry.core.config import CredentialConfig
from credsentry.core.engine import ScanEngine
from credsentry.core.finding import ScanResult

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 300


class HistoryError(Exception):
    """Raised when git cannot list or check out commits."""


@dataclass
class CommitScan:
    commit: str
    result: ScanResult


def _git(repo: str, *args: str) -> str:
    try:
        result = subprocess.run(
            ["git", "-C", repo, *args],
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        raise HistoryError(f"git {args[0]} failed: {exc}") from exc

    if result.returncode != 0:
        raise HistoryError(f"git {args[0]} failed: {result.stderr.strip()}")
    return result.stdout


def repository_root(path: str) -> str:
    if os.path.isfile(path):
        path = os.path.dirname(path) or "."
    return _git(path, "rev-parse", "--show-toplevel").strip()


def list_commits(repo: str, max_commits: Optional[int] = None) -> List[str]:
    """Commit hashes reachable from HEAD, newest first."""
    args = ["rev-list"]
    if max_commits:
        args.append(f"--max-count={max_commits}")
    args.append("HEAD")
    return [line for line in _git(repo, *args).split("\n") if line]


def scan_history(
    path: str,
    config: CredentialConfig,
    workers: Optional[int] = None,
    max_commits: Optional[int] = None,
) -> Iterator[CommitScan]:
    """Yield the scan result of every commit in the repository at ``path``."""
    repo = repository_root(path)
    # compile once, share across commits
    classifier = Classifier.from_config(config)

    for commit in list_commits(repo, max_commits):
        logger.debug("checking out commit %s", commit)
        with tempfile.TemporaryDirectory(prefix="credsentry-") as tmp:
            worktree = os.path.join(tmp, "tree")
            _git(repo, "worktree", "add", "--detach", worktree, commit)
            try:
                result = ScanEngine(config, workers, classifier).scan(worktree)
            finally:
                try:
                    _git(repo, "worktree", "remove", "--force", worktree)
                except HistoryError as exc:
                    logger.warning("could not remove worktree %s: %s", worktree, exc)

        yield CommitScan(commit, _relative_to(result, worktree))


def _relative_to(result: ScanResult, root: str) -> ScanResult:
    findings = [
        dataclasses.replace(f, file=os.path.relpath(f.file, root))
        for f in result.findings
    ]
    return dataclasses.replace(result, findings=findings)
