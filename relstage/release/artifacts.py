from __future__ import annotations

import hashlib
import shutil
import tarfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from relstage.core.config import PathsConfig
from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol, Style
from relstage.stage.errors import StageError
from relstage.storage.gcs import CopyOptions, bucket_accessible, copy_to_remote

SOURCE_TARBALL = "src.tar.gz"
_CHECKSUM_ALGORITHMS = ("sha256", "sha512")
_HASH_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True, slots=True)
class PushBuildOptions:
    """Where one version's build output lives and where it is pushed to."""

    bucket: str
    build_dir: Path
    registry: str
    version: str
    paths: PathsConfig = field(default_factory=PathsConfig)

    @property
    def release_tars_dir(self) -> Path:
        return self.build_dir / self.paths.release_tars

    @property
    def gcs_stage_dir(self) -> Path:
        return self.build_dir / self.paths.gcs_stage / self.version

    @property
    def images_dir(self) -> Path:
        return self.build_dir / self.paths.images


def check_release_bucket(
    options: PushBuildOptions, *, console: ConsoleProtocol
) -> Result[None, StageError]:
    console.print(f"checking access to bucket {options.bucket}", Style.DIM)
    result = bucket_accessible(bucket=options.bucket, cwd=options.build_dir.parent)
    if isinstance(result, Err):
        return Err(
            StageError(
                kind="bucket_unavailable",
                message=result.error.message,
                hint=result.error.hint,
            )
        )
    return Ok(None)


def _exclude_from_source(
    build_dir_prefix: str,
) -> Callable[[tarfile.TarInfo], tarfile.TarInfo | None]:
    def _filter(info: tarfile.TarInfo) -> tarfile.TarInfo | None:
        parts = Path(info.name).parts
        if ".git" in parts:
            return None
        if any(p.startswith(build_dir_prefix) for p in parts):
            return None
        return info

    return _filter


def stage_local_source_tree(
    options: PushBuildOptions,
    *,
    work_dir: Path,
    build_version: str,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    """Tar the source tree and upload it to `stage/<build_version>/src.tar.gz`."""
    tarball = options.build_dir / SOURCE_TARBALL
    console.print(f"creating source tarball {tarball}", Style.DIM)
    try:
        options.build_dir.mkdir(parents=True, exist_ok=True)
        with tarfile.open(tarball, "w:gz") as tar:
            for entry in sorted(work_dir.iterdir()):
                if entry.resolve() == options.build_dir.resolve():
                    continue
                tar.add(
                    entry,
                    arcname=entry.name,
                    filter=_exclude_from_source(options.paths.build_dir),
                )
    except OSError as e:
        return Err(
            StageError(kind="upload_failed", message="failed to create source tarball", hint=str(e))
        )

    copied = copy_to_remote(
        src=tarball,
        gcs_path=f"{options.bucket}/stage/{build_version}/{SOURCE_TARBALL}",
        console=console,
        options=CopyOptions(recursive=False, allow_missing=False),
    )
    if isinstance(copied, Err):
        return Err(
            StageError(kind="upload_failed", message=copied.error.message, hint=copied.error.hint)
        )
    return Ok(None)


def _file_digest(path: Path, algorithm: str) -> str:
    h = hashlib.new(algorithm)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_HASH_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def stage_local_artifacts(
    options: PushBuildOptions, *, console: ConsoleProtocol
) -> Result[None, StageError]:
    """Copy release tarballs into the gcs-stage tree and write their checksums."""
    src = options.release_tars_dir
    if not src.is_dir():
        return Err(
            StageError(
                kind="upload_failed",
                message=f"release tarballs not found: {src}",
                hint="Did the build for this version complete?",
            )
        )

    dst = options.gcs_stage_dir
    console.print(f"staging release artifacts into {dst}", Style.DIM)
    try:
        dst.mkdir(parents=True, exist_ok=True)
        for artifact in sorted(p for p in src.iterdir() if p.is_file()):
            target = dst / artifact.name
            shutil.copy2(artifact, target)
            for algorithm in _CHECKSUM_ALGORITHMS:
                digest = _file_digest(target, algorithm)
                (dst / f"{artifact.name}.{algorithm}").write_text(digest + "\n", encoding="utf-8")
    except OSError as e:
        return Err(
            StageError(kind="upload_failed", message="failed to stage local artifacts", hint=str(e))
        )
    return Ok(None)


def push_release_artifacts(
    options: PushBuildOptions,
    *,
    src_path: Path,
    gcs_path: str,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    """Copy a local build subtree to `gs://<bucket>/<gcs_path>`."""
    copied = copy_to_remote(
        src=src_path, gcs_path=f"{options.bucket}/{gcs_path}", console=console
    )
    if isinstance(copied, Err):
        return Err(
            StageError(kind="upload_failed", message=copied.error.message, hint=copied.error.hint)
        )
    return Ok(None)
