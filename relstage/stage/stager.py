from __future__ import annotations

import shlex
from pathlib import Path, PurePosixPath

from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol
from relstage.release.artifacts import PushBuildOptions
from relstage.release.make import build_dir_for
from relstage.stage.errors import StageError
from relstage.stage.impl import StageImpl
from relstage.stage.model import StageOptions, Versions


def staging_path(*, build_version: str, version: str) -> str:
    """Remote staging root of a version: `stage/<build_version>/<version>`."""
    return str(PurePosixPath("stage", build_version, version))


def promote_command(options: StageOptions) -> str:
    """The command an operator runs to release a staged build."""
    cmd = [
        "relstage",
        "submit",
        "--release",
        "--type",
        options.release_type,
        "--branch",
        options.release_branch,
        f"--build-version={options.build_version}",
    ]
    if options.no_mock:
        cmd.append("--nomock")
    return shlex.join(cmd)


def push_build_options(options: StageOptions, version: str) -> PushBuildOptions:
    return PushBuildOptions(
        bucket=options.bucket(),
        build_dir=build_dir_for(
            repo_root=options.repo_root, version=version, config=options.config
        ),
        registry=options.container_registry(),
        version=version,
        paths=options.config.paths,
    )


def stage_artifacts(
    *,
    impl: StageImpl,
    options: StageOptions,
    versions: Versions,
    console: ConsoleProtocol,
) -> Result[str, StageError]:
    """Upload every version's artifacts and images; return the promote command.

    Uploads are not skipped on re-runs; no-clobber copies keep them idempotent.
    """
    for version in versions.ordered():
        console.print(f"Staging artifacts for version {version}")
        staged = _stage_version(impl=impl, options=options, version=version)
        if isinstance(staged, Err):
            return Err(staged.error.for_version(version))
        console.success(f"staged {version}")

    command = promote_command(options)
    console.info(f"To release this staged build, run:\n\n$ {command}")
    return Ok(command)


def _stage_version(
    *, impl: StageImpl, options: StageOptions, version: str
) -> Result[None, StageError]:
    push_options = push_build_options(options, version)
    paths = options.config.paths

    bucket = impl.check_release_bucket(push_options)
    if isinstance(bucket, Err):
        return bucket

    source = impl.stage_local_source_tree(
        push_options, options.workspace_dir, options.build_version
    )
    if isinstance(source, Err):
        return source

    local = impl.stage_local_artifacts(push_options)
    if isinstance(local, Err):
        return local

    gcs_path = staging_path(build_version=options.build_version, version=version)
    build_dir: Path = push_options.build_dir
    copies = (
        (build_dir / paths.gcs_stage / version, f"{gcs_path}/{paths.gcs_stage}/{version}"),
        (build_dir / paths.images, f"{gcs_path}/{paths.images}"),
    )
    for src_path, remote_path in copies:
        pushed = impl.push_release_artifacts(push_options, src_path, remote_path)
        if isinstance(pushed, Err):
            return pushed

    return impl.push_container_images(push_options)
