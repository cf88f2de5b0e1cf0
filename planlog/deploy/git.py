"""Thin wrapper around the git executable."""

import logging
import subprocess  # nosec B404 - runs the local git executable only
from pathlib import Path
from typing import List, Optional

from ..core.error_handling import GitError

logger = logging.getLogger(__name__)


class GitRepository:
    """Runs git commands in one working tree."""

    def __init__(self, path: str | Path = ".", executable: str = "git"):
        self.path = Path(path)
        self.executable = executable

    def _run(self, *args: str) -> str:
        command: List[str] = [self.executable, *args]
        logger.debug(f"Running {' '.join(command)} in {self.path}")
        try:
            result = subprocess.run(  # nosec B603 - fixed argument list, no shell
                command,
                cwd=self.path,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitError(
                f"git executable not found: {self.executable}",
                details={"command": command},
            ) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise GitError(
                f"'{' '.join(command)}' failed with exit code "
                f"{result.returncode}: {stderr}",
                details={
                    "command": command,
                    "returncode": result.returncode,
                    "stderr": stderr,
                },
            )
        return (result.stdout or "").rstrip()

    def current_branch(self) -> str:
        """Name of the checked out branch; raises GitError on a detached HEAD."""
        branch = self._run("rev-parse", "--abbrev-ref", "HEAD")
        if branch == "HEAD":
            raise GitError("HEAD is detached; check out a branch first")
        return branch

    def is_clean(self) -> bool:
        """True when there are no staged, unstaged or untracked changes."""
        return self.changed_files() == []

    def changed_files(self) -> List[str]:
        output = self._run("status", "--porcelain")
        return [line[3:] for line in output.splitlines() if line.strip()]

    def head_commit(self) -> str:
        return self._run("rev-parse", "HEAD")

    def remote_url(self, remote: str = "origin") -> Optional[str]:
        try:
            return self._run("remote", "get-url", remote)
        except GitError:
            return None

    def push(self, remote: str, branch: str) -> str:
        """Push a branch to a remote and return git's report."""
        logger.info(f"Pushing {branch} to {remote}")
        return self._run("push", remote, branch)
