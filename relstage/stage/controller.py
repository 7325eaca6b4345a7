"""Stage controller.

Drives the staging phases in a fixed order and owns the StageState. A
phase can only start once: calling one out of order, twice, or after an
earlier phase failed is rejected before it has any side effect.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Literal, TypeVar

from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol, Style
from relstage.release.changelog import ChangelogOptions
from relstage.release.make import build_dir_for
from relstage.release.submit import SubmitOptions
from relstage.stage.builder import build_versions
from relstage.stage.errors import StageError
from relstage.stage.impl import DefaultStageImpl, StageImpl
from relstage.stage.model import StageOptions, StageState, Versions
from relstage.stage.stager import stage_artifacts
from relstage.stage.tagger import tag_repository

T = TypeVar("T")

Phase = Literal[
    "validate_options",
    "check_prerequisites",
    "set_build_candidate",
    "generate_release_version",
    "prepare_workspace",
    "tag_repository",
    "build",
    "generate_changelog",
    "stage_artifacts",
]

PHASES: tuple[Phase, ...] = (
    "validate_options",
    "check_prerequisites",
    "set_build_candidate",
    "generate_release_version",
    "prepare_workspace",
    "tag_repository",
    "build",
    "generate_changelog",
    "stage_artifacts",
)

_PHASE_TITLES: dict[Phase, str] = {
    "validate_options": "Validating options",
    "check_prerequisites": "Checking prerequisites",
    "set_build_candidate": "Setting build candidate",
    "generate_release_version": "Generating release versions",
    "prepare_workspace": "Preparing workspace",
    "tag_repository": "Tagging repository",
    "build": "Building release artifacts",
    "generate_changelog": "Generating changelog",
    "stage_artifacts": "Staging artifacts",
}

RELEASE_NOTES_HTML = Path("src") / "release-notes.html"


class StageController:
    def __init__(
        self,
        options: StageOptions,
        *,
        console: ConsoleProtocol,
        impl: StageImpl | None = None,
    ) -> None:
        self.options = options
        self.console = console
        self.impl: StageImpl = impl or DefaultStageImpl(
            config=options.config, repo_root=options.repo_root, console=console
        )
        self.state: StageState | None = None
        self._started: list[Phase] = []
        self._failed: Phase | None = None

    @property
    def started_phases(self) -> tuple[Phase, ...]:
        return tuple(self._started)

    def run(self) -> Result[str, StageError]:
        """Run every phase in order; returns the promote command."""
        steps: tuple[Callable[[], Result[None, StageError]], ...] = (
            self.validate_options,
            self.check_prerequisites,
            self.set_build_candidate,
            self.generate_release_version,
            self.prepare_workspace,
            self.tag_repository,
            self.build,
            self.generate_changelog,
        )
        for step in steps:
            done = step()
            if isinstance(done, Err):
                return done
        return self.stage_artifacts()

    def submit(self) -> Result[None, StageError]:
        """Submit this staging run to the remote build service instead."""
        return self.impl.submit(
            SubmitOptions(
                stage=True,
                no_mock=self.options.no_mock,
                branch=self.options.release_branch,
                release_type=self.options.release_type,
                build_version=self.options.build_version,
            )
        ).map_err(lambda e: e.in_phase("submit"))

    # Phases

    def validate_options(self) -> Result[None, StageError]:
        return self._run_phase("validate_options", self._validate_options)

    def check_prerequisites(self) -> Result[None, StageError]:
        return self._run_phase(
            "check_prerequisites",
            lambda: self.impl.check_prerequisites(self.options.workspace_dir),
        )

    def set_build_candidate(self) -> Result[None, StageError]:
        return self._run_phase("set_build_candidate", self._set_build_candidate)

    def generate_release_version(self) -> Result[None, StageError]:
        return self._run_phase("generate_release_version", self._generate_release_version)

    def prepare_workspace(self) -> Result[None, StageError]:
        return self._run_phase(
            "prepare_workspace",
            lambda: self.impl.prepare_workspace_stage(self.options.repo_root),
        )

    def tag_repository(self) -> Result[None, StageError]:
        return self._run_phase(
            "tag_repository",
            lambda: tag_repository(
                impl=self.impl,
                options=self.options,
                state=self._state(),
                console=self.console,
            ),
        )

    def build(self) -> Result[None, StageError]:
        return self._run_phase(
            "build",
            lambda: build_versions(impl=self.impl, versions=self._versions(), console=self.console),
        )

    def generate_changelog(self) -> Result[None, StageError]:
        return self._run_phase("generate_changelog", self._generate_changelog)

    def stage_artifacts(self) -> Result[str, StageError]:
        return self._run_phase(
            "stage_artifacts",
            lambda: stage_artifacts(
                impl=self.impl,
                options=self.options,
                versions=self._versions(),
                console=self.console,
            ),
        )

    # Internals

    def _run_phase(
        self, phase: Phase, body: Callable[[], Result[T, StageError]]
    ) -> Result[T, StageError]:
        if self._failed is not None:
            return Err(
                StageError(
                    kind="out_of_order",
                    message=f"staging already failed in {self._failed}; start a new run",
                    phase=phase,
                )
            )
        expected = PHASES[len(self._started)] if len(self._started) < len(PHASES) else None
        if phase != expected:
            return Err(
                StageError(
                    kind="out_of_order",
                    message=(
                        f"{phase} cannot run now"
                        + (f" (next phase is {expected})" if expected else " (staging is complete)")
                    ),
                    phase=phase,
                )
            )

        self._started.append(phase)
        self.console.header(_PHASE_TITLES[phase])
        result = body()
        if isinstance(result, Err):
            self._failed = phase
            return Err(result.error.in_phase(phase))
        return result

    def _state(self) -> StageState:
        # Phase ordering guarantees validate_options populated the state.
        assert self.state is not None
        return self.state

    def _versions(self) -> Versions:
        versions = self._state().versions
        assert versions is not None
        return versions

    def _validate_options(self) -> Result[None, StageError]:
        state = self.options.validate()
        if isinstance(state, Err):
            return state
        self.state = state.value
        self.console.print(
            f"build candidate {state.value.build_candidate} (commit {state.value.commit})",
            Style.DIM,
        )
        return Ok(None)

    def _set_build_candidate(self) -> Result[None, StageError]:
        """Discover the parent branch.

        A release branch that exists neither locally nor on the remote is
        cut from the default branch in this run, which only rc and official
        releases may do.
        """
        state = self._state()
        config = self.options.config
        branch = self.options.release_branch

        state.parent_branch = ""
        if branch == config.default_branch:
            return Ok(None)

        repo = self.impl.open_repo(self.options.repo_root)
        if isinstance(repo, Err):
            return Err(
                StageError(kind="git_failed", message=f"open repository: {repo.error.message}")
            )
        exists = self.impl.has_branch(repo.value, branch)
        if isinstance(exists, Err):
            return Err(
                StageError(
                    kind="git_failed",
                    message=f"check if repository has branch {branch}: {exists.error.message}",
                )
            )
        if exists.value:
            self.console.print(f"release branch {branch} exists", Style.DIM)
            return Ok(None)

        if self.options.release_type not in ("rc", "official"):
            return Err(
                StageError(
                    kind="branch_mismatch",
                    message=f"release branch {branch} does not exist",
                    hint="Only rc or official releases can create a new release branch.",
                )
            )
        state.parent_branch = config.default_branch
        self.console.print(
            f"release branch {branch} will be cut from {state.parent_branch}", Style.DIM
        )
        return Ok(None)

    def _generate_release_version(self) -> Result[None, StageError]:
        state = self._state()
        versions = self.impl.generate_release_version(
            self.options.release_type,
            self.options.build_version,
            self.options.release_branch,
            state.parent_branch == self.options.config.default_branch,
        )
        if isinstance(versions, Err):
            return versions
        state.versions = versions.value
        self.console.print(
            f"versions: {', '.join(versions.value.ordered())} (prime {versions.value.prime})",
            Style.DIM,
        )
        return Ok(None)

    def _generate_changelog(self) -> Result[None, StageError]:
        state = self._state()
        prime = self._versions().prime
        branch = state.parent_branch or self.options.release_branch
        build_dir = build_dir_for(
            repo_root=self.options.repo_root, version=prime, config=self.options.config
        )
        return self.impl.generate_changelog(
            ChangelogOptions(
                repo_path=self.options.repo_root,
                tag=prime,
                branch=branch,
                bucket=self.options.bucket(),
                html_file=self.options.workspace_dir / RELEASE_NOTES_HTML,
                tars=build_dir / self.options.config.paths.release_tars,
                dependencies=True,
            )
        )
