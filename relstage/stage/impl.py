"""Collaborator boundary of the staging controller.

StageImpl is every side-effecting call the controller makes. The
production adapter delegates to the git, storage and release modules;
tests inject a recording fake instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from relstage.core.config import StageConfig
from relstage.core.result import Result
from relstage.git.repository import GitError, Repository, configure_global_default_identity
from relstage.output.console import ConsoleProtocol
from relstage.release import artifacts, changelog, images, make, prereqs, submit, workspace
from relstage.release.artifacts import PushBuildOptions
from relstage.release.changelog import ChangelogOptions
from relstage.release.submit import SubmitOptions
from relstage.stage.errors import StageError
from relstage.stage.model import Versions
from relstage.stage.versions import generate_release_versions


class StageImpl(Protocol):
    def submit(self, options: SubmitOptions) -> Result[None, StageError]: ...

    def check_prerequisites(self, workspace_dir: Path) -> Result[None, StageError]: ...

    def prepare_workspace_stage(self, repo_root: Path) -> Result[None, StageError]: ...

    def generate_release_version(
        self,
        release_type: str,
        version: str,
        branch: str,
        branch_from_default: bool,
    ) -> Result[Versions, StageError]: ...

    def configure_global_default_user_and_email(self) -> Result[None, GitError]: ...

    def open_repo(self, repo_path: Path) -> Result[Repository, GitError]: ...

    def rev_parse(self, repo: Repository, rev: str) -> Result[str, GitError]: ...

    def has_branch(self, repo: Repository, branch: str) -> Result[bool, GitError]: ...

    def checkout(self, repo: Repository, *args: str) -> Result[None, GitError]: ...

    def current_branch(self, repo: Repository) -> Result[str, GitError]: ...

    def commit_empty(self, repo: Repository, message: str) -> Result[None, GitError]: ...

    def tag(self, repo: Repository, name: str, message: str) -> Result[None, GitError]: ...

    def check_release_bucket(self, options: PushBuildOptions) -> Result[None, StageError]: ...

    def make_cross(self, version: str) -> Result[None, StageError]: ...

    def generate_changelog(self, options: ChangelogOptions) -> Result[None, StageError]: ...

    def stage_local_source_tree(
        self, options: PushBuildOptions, work_dir: Path, build_version: str
    ) -> Result[None, StageError]: ...

    def stage_local_artifacts(self, options: PushBuildOptions) -> Result[None, StageError]: ...

    def push_release_artifacts(
        self, options: PushBuildOptions, src_path: Path, gcs_path: str
    ) -> Result[None, StageError]: ...

    def push_container_images(self, options: PushBuildOptions) -> Result[None, StageError]: ...


class DefaultStageImpl:
    """Production collaborators."""

    def __init__(self, *, config: StageConfig, repo_root: Path, console: ConsoleProtocol) -> None:
        self._config = config
        self._repo_root = repo_root
        self._console = console

    def submit(self, options: SubmitOptions) -> Result[None, StageError]:
        return submit.submit_build(
            options, config=self._config.submit, cwd=self._repo_root, console=self._console
        )

    def check_prerequisites(self, workspace_dir: Path) -> Result[None, StageError]:
        return prereqs.check_prerequisites(
            workspace_dir=workspace_dir,
            config=self._config.prerequisites,
            console=self._console,
        )

    def prepare_workspace_stage(self, repo_root: Path) -> Result[None, StageError]:
        return workspace.prepare_workspace_stage(
            repo_root=repo_root, config=self._config, console=self._console
        )

    def generate_release_version(
        self,
        release_type: str,
        version: str,
        branch: str,
        branch_from_default: bool,
    ) -> Result[Versions, StageError]:
        return generate_release_versions(
            release_type=release_type,
            build_version=version,
            branch=branch,
            branch_from_default=branch_from_default,
            config=self._config,
        )

    def configure_global_default_user_and_email(self) -> Result[None, GitError]:
        return configure_global_default_identity(cwd=self._repo_root)

    def open_repo(self, repo_path: Path) -> Result[Repository, GitError]:
        return Repository.open(repo_path)

    def rev_parse(self, repo: Repository, rev: str) -> Result[str, GitError]:
        return repo.rev_parse(rev)

    def has_branch(self, repo: Repository, branch: str) -> Result[bool, GitError]:
        return repo.has_branch(branch)

    def checkout(self, repo: Repository, *args: str) -> Result[None, GitError]:
        self._console.command(["git", "checkout", *args])
        return repo.checkout(*args)

    def current_branch(self, repo: Repository) -> Result[str, GitError]:
        return repo.current_branch()

    def commit_empty(self, repo: Repository, message: str) -> Result[None, GitError]:
        self._console.command(["git", "commit", "--allow-empty", "-m", message])
        return repo.commit_empty(message)

    def tag(self, repo: Repository, name: str, message: str) -> Result[None, GitError]:
        self._console.command(["git", "tag", "--annotate", "--message", message, name])
        return repo.tag(name, message)

    def check_release_bucket(self, options: PushBuildOptions) -> Result[None, StageError]:
        return artifacts.check_release_bucket(options, console=self._console)

    def make_cross(self, version: str) -> Result[None, StageError]:
        return make.make_release(
            version=version, repo_root=self._repo_root, config=self._config, console=self._console
        )

    def generate_changelog(self, options: ChangelogOptions) -> Result[None, StageError]:
        return changelog.generate_changelog(
            options, command=self._config.changelog.command, console=self._console
        )

    def stage_local_source_tree(
        self, options: PushBuildOptions, work_dir: Path, build_version: str
    ) -> Result[None, StageError]:
        return artifacts.stage_local_source_tree(
            options, work_dir=work_dir, build_version=build_version, console=self._console
        )

    def stage_local_artifacts(self, options: PushBuildOptions) -> Result[None, StageError]:
        return artifacts.stage_local_artifacts(options, console=self._console)

    def push_release_artifacts(
        self, options: PushBuildOptions, src_path: Path, gcs_path: str
    ) -> Result[None, StageError]:
        return artifacts.push_release_artifacts(
            options, src_path=src_path, gcs_path=gcs_path, console=self._console
        )

    def push_container_images(self, options: PushBuildOptions) -> Result[None, StageError]:
        return images.push_container_images(options, console=self._console)
