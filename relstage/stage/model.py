from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from relstage.core.config import StageConfig
from relstage.core.result import Err, Ok, Result
from relstage.stage.errors import StageError
from relstage.stage.semver import SemVer, parse_release_branch, parse_version

ReleaseType = Literal["alpha", "beta", "rc", "official"]
RELEASE_TYPES: tuple[ReleaseType, ...] = ("alpha", "beta", "rc", "official")


def is_release_branch(branch: str, config: StageConfig) -> bool:
    """True for the default branch or a `<prefix>MAJOR.MINOR[.PATCH]` branch."""
    if branch == config.default_branch:
        return True
    return any(
        parse_release_branch(branch, prefix=p) is not None for p in config.release_branch_prefixes
    )


@dataclass(frozen=True, slots=True)
class Versions:
    """Versions cut by one staging run.

    `ordered()` is the sequence every phase iterates; `prime` is always a
    member and decides the release branch and the changelog scope.
    """

    prime: str
    official: str = ""
    rc: str = ""
    beta: str = ""
    alpha: str = ""

    def __post_init__(self) -> None:
        ordered = self.ordered()
        if self.prime not in ordered:
            raise ValueError(f"prime version {self.prime!r} is not part of {ordered}")
        if len(set(ordered)) != len(ordered):
            raise ValueError(f"duplicate versions: {ordered}")

    def ordered(self) -> tuple[str, ...]:
        # official before rc before beta before alpha
        return tuple(v for v in (self.official, self.rc, self.beta, self.alpha) if v)


@dataclass(slots=True)
class StageState:
    """Mutable orchestration state, owned by one StageController.

    `parent_branch == ""` means the release is tagged directly on the build
    candidate commit instead of on a branch.
    """

    build_candidate: SemVer
    parent_branch: str = ""
    versions: Versions | None = None

    @property
    def commit(self) -> str:
        return self.build_candidate.commit or ""


@dataclass(frozen=True, slots=True)
class StageOptions:
    release_type: str
    release_branch: str
    build_version: str = ""
    no_mock: bool = False
    repo_root: Path = Path(".")
    workspace_dir: Path = Path(".")
    config: StageConfig = field(default_factory=StageConfig)

    def bucket(self) -> str:
        """Destination bucket: production with --nomock, test bucket otherwise."""
        if self.no_mock:
            return self.config.buckets.production
        return self.config.buckets.test

    def container_registry(self) -> str:
        if self.no_mock:
            return self.config.registries.staging
        return self.config.registries.mock

    def validate(self) -> Result[StageState, StageError]:
        """Validate the options and create the initial staging state."""
        if self.release_type not in RELEASE_TYPES:
            return Err(
                StageError(
                    kind="invalid_options",
                    message=f"invalid release type: {self.release_type!r}",
                    hint=f"Expected one of: {', '.join(RELEASE_TYPES)}",
                )
            )

        if not is_release_branch(self.release_branch, self.config):
            return Err(
                StageError(
                    kind="invalid_options",
                    message=f"invalid release branch: {self.release_branch!r}",
                    hint=(
                        f"Expected {self.config.default_branch} or "
                        f"{self.config.release_branch_prefixes[0]}MAJOR.MINOR"
                    ),
                )
            )

        if not self.build_version.strip():
            return Err(StageError(kind="invalid_options", message="build version is required"))

        candidate = parse_version(self.build_version)
        if candidate is None:
            return Err(
                StageError(
                    kind="invalid_version",
                    message=f"invalid build version: {self.build_version}",
                    hint="Expected: vMAJOR.MINOR.PATCH[-PRE]+COMMIT",
                )
            )
        if candidate.commit is None:
            return Err(
                StageError(
                    kind="invalid_version",
                    message=f"build version carries no commit metadata: {self.build_version}",
                    hint="Use the full build version, e.g. v1.30.0-alpha.0.42+0123abcd",
                )
            )

        return Ok(StageState(build_candidate=candidate))
