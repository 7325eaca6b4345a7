"""Typed staging configuration.

`relstage.toml` is optional; every key has a default so a bare repository
can be staged against the mock bucket and registry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_str_tuple, get_table

__all__ = [
    "BucketsConfig",
    "BuildConfig",
    "ChangelogConfig",
    "ConfigError",
    "PathsConfig",
    "PrerequisitesConfig",
    "RegistriesConfig",
    "StageConfig",
    "SubmitConfig",
    "CONFIG_FILENAME",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "relstage.toml"

DEFAULT_PRODUCT = "Kubernetes"
DEFAULT_BRANCH = "master"
RELEASE_BRANCH_PREFIX = "release-"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BucketsConfig:
    production: str = "kubernetes-release"
    test: str = "kubernetes-release-gcb"


@dataclass(frozen=True, slots=True)
class RegistriesConfig:
    staging: str = "gcr.io/k8s-staging-kubernetes"
    mock: str = "gcr.io/k8s-staging-releng-test"


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Build output layout, relative to the repository root.

    Each version builds into `<build_dir>-<version>`.
    """

    build_dir: str = "_output"
    gcs_stage: str = "gcs-stage"
    images: str = "release-images"
    release_tars: str = "release-tars"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    command: tuple[str, ...] = ("make", "cross-in-a-container")


@dataclass(frozen=True, slots=True)
class ChangelogConfig:
    command: tuple[str, ...] = ("release-notes",)


@dataclass(frozen=True, slots=True)
class SubmitConfig:
    project: str = "kubernetes-release-test"
    config_file: str = "cloudbuild.yaml"


@dataclass(frozen=True, slots=True)
class PrerequisitesConfig:
    tools: tuple[str, ...] = ("git", "gsutil", "docker")
    min_disk_gb: int = 100


@dataclass(frozen=True, slots=True)
class StageConfig:
    """Main configuration container."""

    product: str = DEFAULT_PRODUCT
    default_branch: str = DEFAULT_BRANCH
    release_branch_prefixes: tuple[str, ...] = (RELEASE_BRANCH_PREFIX,)
    buckets: BucketsConfig = field(default_factory=BucketsConfig)
    registries: RegistriesConfig = field(default_factory=RegistriesConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    submit: SubmitConfig = field(default_factory=SubmitConfig)
    prerequisites: PrerequisitesConfig = field(default_factory=PrerequisitesConfig)

    def is_release_branch_name(self, branch: str) -> bool:
        """True if the branch carries one of the release-branch prefixes."""
        return any(branch.startswith(p) for p in self.release_branch_prefixes)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> StageConfig:
        """Create StageConfig from a mapping (parsed TOML)."""
        d = cls()
        buckets: StrDict = get_table(data, "buckets") or {}
        registries: StrDict = get_table(data, "registries") or {}
        paths: StrDict = get_table(data, "paths") or {}
        build: StrDict = get_table(data, "build") or {}
        changelog: StrDict = get_table(data, "changelog") or {}
        submit: StrDict = get_table(data, "submit") or {}
        prereqs: StrDict = get_table(data, "prerequisites") or {}

        min_disk = get_int(prereqs, "min_disk_gb")

        return cls(
            product=get_str(data, "product") or d.product,
            default_branch=get_str(data, "default_branch") or d.default_branch,
            release_branch_prefixes=get_str_tuple(data, "release_branch_prefixes")
            or d.release_branch_prefixes,
            buckets=BucketsConfig(
                production=get_str(buckets, "production") or d.buckets.production,
                test=get_str(buckets, "test") or d.buckets.test,
            ),
            registries=RegistriesConfig(
                staging=get_str(registries, "staging") or d.registries.staging,
                mock=get_str(registries, "mock") or d.registries.mock,
            ),
            paths=PathsConfig(
                build_dir=get_str(paths, "build_dir") or d.paths.build_dir,
                gcs_stage=get_str(paths, "gcs_stage") or d.paths.gcs_stage,
                images=get_str(paths, "images") or d.paths.images,
                release_tars=get_str(paths, "release_tars") or d.paths.release_tars,
            ),
            build=BuildConfig(command=get_str_tuple(build, "command") or d.build.command),
            changelog=ChangelogConfig(
                command=get_str_tuple(changelog, "command") or d.changelog.command
            ),
            submit=SubmitConfig(
                project=get_str(submit, "project") or d.submit.project,
                config_file=get_str(submit, "config_file") or d.submit.config_file,
            ),
            prerequisites=PrerequisitesConfig(
                tools=get_str_tuple(prereqs, "tools") or d.prerequisites.tools,
                min_disk_gb=d.prerequisites.min_disk_gb if min_disk is None else min_disk,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[StageConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relstage.toml

    Returns:
        Ok(StageConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(StageConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> StageConfig:
    """Load config from file, or return defaults if the file is absent."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return StageConfig()
