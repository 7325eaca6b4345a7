"""Recording fake of the staging collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from relstage.core.config import StageConfig
from relstage.core.result import Err, Ok, Result
from relstage.git.repository import GitError, Repository
from relstage.release.artifacts import PushBuildOptions
from relstage.release.changelog import ChangelogOptions
from relstage.release.submit import SubmitOptions
from relstage.stage.errors import StageError
from relstage.stage.model import Versions
from relstage.stage.versions import generate_release_versions


@dataclass
class FakeStageImpl:
    """StageImpl that records calls and simulates a repository.

    `tags` and `branches` are the refs that exist; `fail` maps a method name
    to the error it returns on every call.
    """

    config: StageConfig = field(default_factory=StageConfig)
    tags: set[str] = field(default_factory=set)
    branches: set[str] = field(default_factory=set)
    head_branch: str = ""
    fail: dict[str, StageError | GitError] = field(default_factory=dict)
    calls: list[tuple[object, ...]] = field(default_factory=list)

    def _record(self, name: str, *args: object) -> Result[None, Any]:
        self.calls.append((name, *args))
        error = self.fail.get(name)
        if error is not None:
            return Err(error)
        return Ok(None)

    def names(self) -> list[str]:
        return [str(c[0]) for c in self.calls]

    def calls_to(self, name: str) -> list[tuple[object, ...]]:
        return [c[1:] for c in self.calls if c[0] == name]

    # StageImpl

    def submit(self, options: SubmitOptions) -> Result[None, StageError]:
        return self._record("submit", options)

    def check_prerequisites(self, workspace_dir: Path) -> Result[None, StageError]:
        return self._record("check_prerequisites", workspace_dir)

    def prepare_workspace_stage(self, repo_root: Path) -> Result[None, StageError]:
        return self._record("prepare_workspace_stage", repo_root)

    def generate_release_version(
        self,
        release_type: str,
        version: str,
        branch: str,
        branch_from_default: bool,
    ) -> Result[Versions, StageError]:
        recorded = self._record(
            "generate_release_version", release_type, version, branch, branch_from_default
        )
        if isinstance(recorded, Err):
            return recorded
        return generate_release_versions(
            release_type=release_type,
            build_version=version,
            branch=branch,
            branch_from_default=branch_from_default,
            config=self.config,
        )

    def configure_global_default_user_and_email(self) -> Result[None, GitError]:
        return self._record("configure_global_default_user_and_email")

    def open_repo(self, repo_path: Path) -> Result[Repository, GitError]:
        recorded = self._record("open_repo", repo_path)
        if isinstance(recorded, Err):
            return recorded
        return Ok(Repository(repo_path))

    def rev_parse(self, repo: Repository, rev: str) -> Result[str, GitError]:
        recorded = self._record("rev_parse", rev)
        if isinstance(recorded, Err):
            return recorded
        if rev in self.tags:
            return Ok("f" * 40)
        return Err(GitError(command="rev-parse", message=f"unknown revision: {rev}"))

    def has_branch(self, repo: Repository, branch: str) -> Result[bool, GitError]:
        recorded = self._record("has_branch", branch)
        if isinstance(recorded, Err):
            return recorded
        return Ok(branch in self.branches)

    def checkout(self, repo: Repository, *args: str) -> Result[None, GitError]:
        recorded = self._record("checkout", *args)
        if isinstance(recorded, Err):
            return recorded
        if args[0] == "-b":
            self.branches.add(args[1])
            self.head_branch = args[1]
        elif args[0] in self.branches:
            self.head_branch = args[0]
        else:
            # a commit: detached HEAD
            self.head_branch = ""
        return recorded

    def current_branch(self, repo: Repository) -> Result[str, GitError]:
        recorded = self._record("current_branch")
        if isinstance(recorded, Err):
            return recorded
        return Ok(self.head_branch)

    def commit_empty(self, repo: Repository, message: str) -> Result[None, GitError]:
        return self._record("commit_empty", message)

    def tag(self, repo: Repository, name: str, message: str) -> Result[None, GitError]:
        recorded = self._record("tag", name, message)
        if isinstance(recorded, Ok):
            self.tags.add(name)
        return recorded

    def check_release_bucket(self, options: PushBuildOptions) -> Result[None, StageError]:
        return self._record("check_release_bucket", options)

    def make_cross(self, version: str) -> Result[None, StageError]:
        return self._record("make_cross", version)

    def generate_changelog(self, options: ChangelogOptions) -> Result[None, StageError]:
        return self._record("generate_changelog", options)

    def stage_local_source_tree(
        self, options: PushBuildOptions, work_dir: Path, build_version: str
    ) -> Result[None, StageError]:
        return self._record("stage_local_source_tree", options, work_dir, build_version)

    def stage_local_artifacts(self, options: PushBuildOptions) -> Result[None, StageError]:
        return self._record("stage_local_artifacts", options)

    def push_release_artifacts(
        self, options: PushBuildOptions, src_path: Path, gcs_path: str
    ) -> Result[None, StageError]:
        return self._record("push_release_artifacts", options, src_path, gcs_path)

    def push_container_images(self, options: PushBuildOptions) -> Result[None, StageError]:
        return self._record("push_container_images", options)
