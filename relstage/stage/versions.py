"""Release version resolution.

The build version (the `git describe` of the build candidate) already
encodes the tag history of the branch: `v1.30.0-alpha.0.42+0123abcd` is 42
commits past `v1.30.0-alpha.0`. Resolution is therefore a pure function of
the release type, the build version and the branch.
"""

from __future__ import annotations

from relstage.core.config import StageConfig
from relstage.core.result import Err, Ok, Result
from relstage.stage.errors import StageError
from relstage.stage.model import RELEASE_TYPES, Versions
from relstage.stage.semver import SemVer, format_prerelease, parse_release_branch, parse_version


def release_branch_version(branch: str, config: StageConfig) -> tuple[int, int] | None:
    for prefix in config.release_branch_prefixes:
        parsed = parse_release_branch(branch, prefix=prefix)
        if parsed is not None:
            return parsed
    return None


def _next_number(sv: SemVer, label: str) -> int:
    if sv.pre_label == label and sv.pre_number is not None:
        return sv.pre_number + 1
    return 0


def _mismatch(message: str, hint: str | None = None) -> Err[StageError]:
    return Err(StageError(kind="branch_mismatch", message=message, hint=hint))


def generate_release_versions(
    *,
    release_type: str,
    build_version: str,
    branch: str,
    branch_from_default: bool,
    config: StageConfig | None = None,
) -> Result[Versions, StageError]:
    """Compute the ordered versions to cut and the prime version.

    Args:
        release_type: One of alpha, beta, rc, official.
        build_version: Build candidate version, e.g. v1.30.0-rc.1.5+abc.
        branch: Target release branch.
        branch_from_default: True when `branch` is about to be cut from the
            default branch in this run.
    """
    cfg = config or StageConfig()

    if release_type not in RELEASE_TYPES:
        return Err(
            StageError(kind="invalid_options", message=f"unknown release type: {release_type!r}")
        )

    sv = parse_version(build_version)
    if sv is None:
        return Err(
            StageError(kind="invalid_version", message=f"invalid build version: {build_version}")
        )

    on_default = branch == cfg.default_branch
    branch_version = release_branch_version(branch, cfg)

    official = rc = beta = alpha = ""

    if branch_from_default:
        if branch_version is None:
            return _mismatch(
                f"cannot cut {branch!r} from {cfg.default_branch}: not a release branch name"
            )
        if branch_version != (sv.major, sv.minor):
            return _mismatch(
                f"branch {branch} does not match build version {build_version}",
                hint=f"Expected {cfg.release_branch_prefixes[0]}{sv.major}.{sv.minor}",
            )
        if release_type not in ("rc", "official"):
            return _mismatch(
                f"{release_type} releases cannot create the new branch {branch}",
                hint="Cut the branch with an rc or official release.",
            )
        if release_type == "rc":
            # New branch: first rc on it, next alpha cycle continues on the default branch.
            rc = format_prerelease(sv.major, sv.minor, 0, "rc", 0)
            alpha = format_prerelease(sv.major, sv.minor + 1, 0, "alpha", 0)

    match release_type:
        case "official":
            if on_default:
                return _mismatch(f"official releases are not cut from {cfg.default_branch}")
            official = sv.core_tag()
            # A branch cut by an official release carries only the official tag.
            if not branch_from_default:
                # Seed the next patch cycle on the release branch.
                rc = format_prerelease(sv.major, sv.minor, sv.patch + 1, "rc", 0)
            prime = official
        case "rc":
            if on_default:
                return _mismatch(f"rc releases are not cut from {cfg.default_branch}")
            if not branch_from_default:
                rc = format_prerelease(sv.major, sv.minor, sv.patch, "rc", _next_number(sv, "rc"))
            prime = rc
        case "beta":
            if sv.pre_label == "rc":
                return Err(
                    StageError(
                        kind="invalid_version",
                        message=f"cannot stage a beta from rc build version {build_version}",
                    )
                )
            beta = format_prerelease(sv.major, sv.minor, sv.patch, "beta", _next_number(sv, "beta"))
            prime = beta
        case _:
            if not on_default:
                return _mismatch(f"alpha releases are only cut from {cfg.default_branch}")
            if sv.pre_label not in (None, "alpha"):
                return Err(
                    StageError(
                        kind="invalid_version",
                        message=f"cannot stage an alpha from build version {build_version}",
                    )
                )
            alpha = format_prerelease(
                sv.major, sv.minor, sv.patch, "alpha", _next_number(sv, "alpha")
            )
            prime = alpha

    return Ok(Versions(prime=prime, official=official, rc=rc, beta=beta, alpha=alpha))
