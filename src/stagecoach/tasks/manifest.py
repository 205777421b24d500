"""
ManifestUpdateTask - point a deployment manifest at the new image tag.

The orchestrator reconciles from a manifest repository. Publishing a build
means rewriting the manifest's ``tag:`` line to the commit hash, then
committing and pushing the file. An unchanged file produces no commit, so
re-running the stage for the same commit is a no-op, unless an earlier run
committed the tag and then failed to push it; that commit is pushed now.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable
from typing import TYPE_CHECKING

from stagecoach.error_codes import ErrorKind
from stagecoach.errors import StageExecutionError
from stagecoach.git import GitRepository
from stagecoach.tasks.interface import Task
from stagecoach.tasks.result import TaskResult

if TYPE_CHECKING:
    from stagecoach.models.bindings import EnvironmentBindings
    from stagecoach.models.stage import Stage

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"tag:.*")

DEFAULT_AUTHOR_NAME = "stagecoach"
DEFAULT_AUTHOR_EMAIL = "stagecoach@localhost"
DEFAULT_MESSAGE = "Update image tag to {commit}"


def rewrite_tag(text: str, commit: str) -> str:
    """Replace every ``tag:...`` occurrence with ``tag: <commit>``, keeping indentation."""
    return TAG_PATTERN.sub(lambda _: f"tag: {commit}", text)


class ManifestUpdateTask(Task):
    """
    Rewrite the manifest tag and publish it through git.

    Context Parameters:
        manifest (str): Manifest path, relative to repo_dir (required)
        repo_dir (str): Working copy of the manifest repository (default: ".")
        commit (str): New tag value (default: the COMMIT binding)
        author_name (str): Commit author name
        author_email (str): Commit author email
        message (str): Commit message; {commit} is replaced (default: "Update image tag to {commit}")
        remote (str): Remote to push to (default: "origin")
        branch (str): Remote branch to push to (default: current upstream)
        pull (bool): Fast-forward the working copy before editing (default: False)
        push (bool): Push after committing (default: True)

    Outputs:
        changed (bool): Whether the file content changed
        committed (str|None): New commit hash, if a commit was made
        pushed (bool): Whether anything was pushed
        manifest (str): Path of the manifest
    """

    def __init__(self, repository_factory: Callable[[str], GitRepository] = GitRepository) -> None:
        self.repository_factory = repository_factory

    def validate(self, stage: Stage) -> list[str]:
        if not stage.context.get("manifest"):
            return [f"Manifest stage '{stage.name}' needs a 'manifest' path"]
        return []

    def execute(self, stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
        context = stage.context
        manifest = context.get("manifest")
        if not manifest:
            return TaskResult.failed(error="No 'manifest' specified", kind=ErrorKind.DEFINITION)

        commit = context.get("commit") or bindings.get("COMMIT")
        if not commit:
            return TaskResult.failed(error="No commit hash to write into the manifest", kind=ErrorKind.DEFINITION)

        repo_dir = str(context.get("repo_dir", "."))
        path = os.path.join(repo_dir, str(manifest))
        repo = self.repository_factory(repo_dir)
        remote = str(context.get("remote", "origin"))
        branch = context.get("branch")

        if context.get("pull", False):
            repo.pull(remote, branch)

        if not os.path.isfile(path):
            raise StageExecutionError(f"Manifest file not found: {path}")

        with open(path, encoding="utf-8") as f:
            original = f.read()
        if not TAG_PATTERN.search(original):
            raise StageExecutionError(f"Manifest {path} has no 'tag:' line")

        updated = rewrite_tag(original, str(commit))
        push = context.get("push", True)
        outputs: dict[str, object] = {"manifest": path, "changed": False, "committed": None, "pushed": False}
        if updated == original:
            # A previous run may have committed the tag but failed to push it
            if push and repo.commits_ahead(remote, branch):
                logger.info("Manifest %s already at tag %s, pushing unpublished commits", path, commit)
                repo.push(remote, branch)
                outputs["pushed"] = True
            else:
                logger.debug("Manifest %s already at tag %s, nothing to commit", path, commit)
            return TaskResult.success(outputs=outputs)

        with open(path, "w", encoding="utf-8") as f:
            f.write(updated)
        outputs["changed"] = True

        repo.add(str(manifest))
        if not repo.has_staged_changes():
            return TaskResult.success(outputs=outputs)

        message = str(context.get("message", DEFAULT_MESSAGE)).replace("{commit}", str(commit))
        outputs["committed"] = repo.commit(
            message,
            str(context.get("author_name", DEFAULT_AUTHOR_NAME)),
            str(context.get("author_email", DEFAULT_AUTHOR_EMAIL)),
        )
        if push:
            repo.push(remote, branch)
            outputs["pushed"] = True

        return TaskResult.success(outputs=outputs)
