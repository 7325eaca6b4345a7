"""Push container images from build archives into a registry.

The build leaves one docker archive per image and architecture:

    <build_dir>/release-images/<arch>/<image>.tar

Each archive is loaded, retagged as `<registry>/<name>-<arch>:<version>`,
pushed, and the local tag removed again.
"""

from __future__ import annotations

import json
import tarfile
from pathlib import Path

from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol
from relstage.platform.process import run as run_process
from relstage.release.artifacts import PushBuildOptions
from relstage.release.timeouts import (
    DOCKER_LOAD_TIMEOUT_SECONDS,
    DOCKER_PUSH_TIMEOUT_SECONDS,
    LOCAL_TIMEOUT_SECONDS,
)
from relstage.stage.errors import StageError


def repo_tag_from_tarball(path: Path) -> Result[str, StageError]:
    """Read the first RepoTag from a docker archive's manifest.json."""
    try:
        with tarfile.open(path) as tar:
            member = tar.extractfile("manifest.json")
            if member is None:
                raise KeyError("manifest.json")
            manifest: object = json.loads(member.read().decode("utf-8"))
    except (OSError, KeyError, tarfile.TarError, json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(
            StageError(kind="push_failed", message=f"cannot read image archive {path}", hint=str(e))
        )

    if isinstance(manifest, list) and manifest and isinstance(manifest[0], dict):
        tags = manifest[0].get("RepoTags")
        if isinstance(tags, list) and tags and isinstance(tags[0], str):
            return Ok(tags[0])
    return Err(StageError(kind="push_failed", message=f"no repo tag in image archive {path}"))


def target_image(*, repo_tag: str, registry: str, arch: str, version: str) -> str:
    """Registry tag for an image: `<registry>/<name>-<arch>:<version>`."""
    name = repo_tag.rsplit(":", 1)[0].rsplit("/", 1)[-1]
    if not name.endswith(f"-{arch}"):
        name = f"{name}-{arch}"
    return f"{registry.rstrip('/')}/{name}:{version}"


def _docker(
    args: list[str], *, cwd: Path, timeout: float, console: ConsoleProtocol
) -> Result[str, StageError]:
    cmd = ["docker", *args]
    console.command(cmd)
    result = run_process(cmd, cwd=cwd, timeout=timeout)
    if isinstance(result, Err):
        return Err(
            StageError(
                kind="push_failed",
                message=f"docker {args[0]} failed",
                hint=result.error.detail,
            )
        )
    return Ok(result.value)


def push_container_images(
    options: PushBuildOptions, *, console: ConsoleProtocol
) -> Result[None, StageError]:
    images_dir = options.images_dir
    if not images_dir.is_dir():
        return Err(
            StageError(kind="push_failed", message=f"images directory not found: {images_dir}")
        )

    for arch_dir in sorted(images_dir.iterdir()):
        if not arch_dir.is_dir():
            continue
        arch = arch_dir.name
        for archive in sorted(arch_dir.glob("*.tar")):
            if not archive.is_file():
                continue

            repo_tag = repo_tag_from_tarball(archive)
            if isinstance(repo_tag, Err):
                return repo_tag
            target = target_image(
                repo_tag=repo_tag.value,
                registry=options.registry,
                arch=arch,
                version=options.version,
            )

            steps: tuple[tuple[list[str], float], ...] = (
                (["load", "--input", str(archive)], DOCKER_LOAD_TIMEOUT_SECONDS),
                (["tag", repo_tag.value, target], LOCAL_TIMEOUT_SECONDS),
                (["push", target], DOCKER_PUSH_TIMEOUT_SECONDS),
                (["rmi", target], LOCAL_TIMEOUT_SECONDS),
            )
            for args, timeout in steps:
                done = _docker(args, cwd=arch_dir, timeout=timeout, console=console)
                if isinstance(done, Err):
                    return Err(done.error)

    return Ok(None)
