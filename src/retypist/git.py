"""The git version-control collaborator."""

from __future__ import annotations

import os
from pathlib import Path

from retypist.process import ProcessResult, ProcessRunner

DEFAULT_COMMIT_MESSAGE = "retypist: narrow visibility"


def git_binary() -> str:
    """The git executable, overridable with the GIT environment variable."""
    return os.environ.get("GIT", "git")


class Git:
    """Commits or discards the campaign's edits in one working tree."""

    def __init__(self, runner: ProcessRunner, binary: str | None = None) -> None:
        self.runner = runner
        self.binary = binary or git_binary()

    def _run(self, root: Path, *args: str) -> ProcessResult:
        return self.runner.run([self.binary, *args], cwd=root)

    def reset(self, root: Path) -> ProcessResult:
        """Reset index and working tree to HEAD."""
        return self._run(root, "reset", "--hard", "--quiet", "HEAD")

    def discard(self, root: Path) -> ProcessResult:
        """Throw away uncommitted edits to tracked files."""
        return self._run(root, "checkout", "--quiet", "--", ".")

    def commit(self, root: Path, message: str = DEFAULT_COMMIT_MESSAGE) -> ProcessResult:
        """Commit every modified tracked file."""
        return self._run(root, "commit", "--all", "--quiet", "-m", message)
