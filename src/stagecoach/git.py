"""
Git collaborator.

Thin wrapper over the ``git`` CLI for the operations a pipeline needs:
resolve the commit being built, and publish a one-file change to a
manifest repository (pull, add, commit under a fixed identity, push).
"""

from __future__ import annotations

import logging

from stagecoach.errors import ExternalDependencyError, StageExecutionError
from stagecoach.process import CommandResult, run_command

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120


class GitRepository:
    """
    A working copy on disk.

    Example:
        repo = GitRepository("/work/manifests")
        repo.pull()
        repo.add("deploy/values.yaml")
        if repo.has_staged_changes():
            repo.commit("Update image tag", "CI Bot", "ci@example.com")
            repo.push()
    """

    def __init__(self, path: str, timeout: float | None = DEFAULT_TIMEOUT) -> None:
        self.path = path
        self.timeout = timeout

    def _git(self, *args: str, check: bool = True) -> CommandResult:
        result = run_command(["git", *args], timeout=self.timeout, cwd=self.path)
        if check and not result.ok:
            raise StageExecutionError(
                f"git {args[0]} failed with exit code {result.returncode}: {result.stderr}",
                exit_code=result.returncode,
                details=result.to_dict(),
            )
        return result

    def short_head(self) -> str:
        """Short hash of HEAD."""
        return self._git("rev-parse", "--short", "HEAD").stdout

    def current_branch(self) -> str:
        return self._git("rev-parse", "--abbrev-ref", "HEAD").stdout

    def pull(self, remote: str = "origin", branch: str | None = None) -> None:
        args = ["pull", "--ff-only", remote]
        if branch:
            args.append(branch)
        result = self._git(*args, check=False)
        if not result.ok:
            raise ExternalDependencyError(
                f"git pull from {remote} failed: {result.stderr}",
                exit_code=result.returncode,
            )

    def add(self, *paths: str) -> None:
        self._git("add", "--", *paths)

    def has_staged_changes(self) -> bool:
        """True if the index differs from HEAD."""
        result = self._git("diff", "--cached", "--quiet", check=False)
        if result.returncode not in (0, 1):
            raise StageExecutionError(f"git diff failed: {result.stderr}", exit_code=result.returncode)
        return result.returncode == 1

    def commit(self, message: str, author_name: str, author_email: str) -> str:
        """Commit the index under the given identity. Returns the new short hash."""
        self._git(
            "-c",
            f"user.name={author_name}",
            "-c",
            f"user.email={author_email}",
            "commit",
            "-m",
            message,
        )
        sha = self.short_head()
        logger.debug("Committed %s in %s", sha, self.path)
        return sha

    def commits_ahead(self, remote: str = "origin", branch: str | None = None) -> int:
        """
        Number of local commits the remote branch does not have.

        Compares HEAD with the remote-tracking ref (``remote/branch``, or the
        configured upstream when no branch is given). A branch with no
        tracking ref counts as 0.
        """
        upstream = f"{remote}/{branch}" if branch else "@{u}"
        result = self._git("rev-list", "--count", f"{upstream}..HEAD", check=False)
        if not result.ok:
            logger.debug("No tracking ref %s in %s: %s", upstream, self.path, result.stderr)
            return 0
        return int(result.stdout or 0)

    def push(self, remote: str = "origin", branch: str | None = None) -> None:
        args = ["push", remote]
        if branch:
            args.append(f"HEAD:{branch}")
        result = self._git(*args, check=False)
        if not result.ok:
            raise ExternalDependencyError(
                f"git push to {remote} was rejected: {result.stderr}",
                exit_code=result.returncode,
            )
