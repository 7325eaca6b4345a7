from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path

from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol, Style
from relstage.platform.process import run as run_process

GCS_PREFIX = "gs://"

# Uploads of release tarballs and image archives can be large.
_GSUTIL_TIMEOUT_SECONDS = 60 * 60.0
_GSUTIL_QUERY_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class StorageError:
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class CopyOptions:
    concurrent: bool = True
    recursive: bool = True
    # Re-running a staging job must never overwrite already staged objects.
    no_clobber: bool = True
    # A missing local source is skipped instead of failing the copy.
    allow_missing: bool = True


DEFAULT_COPY_OPTIONS = CopyOptions()


def normalize_gcs_path(*parts: str) -> Result[str, StorageError]:
    """Join path parts into a single `gs://` URL.

    Only the first part may carry the `gs://` scheme; a scheme anywhere else
    usually means a caller joined two already-normalized paths.
    """
    if not parts:
        return Err(StorageError("must contain at least one path part"))
    if all(p == "" for p in parts):
        return Err(StorageError("path should not be an empty string"))
    for part in parts[1:]:
        if "gs:/" in part:
            return Err(
                StorageError(
                    f"path part contains a `gs:/` scheme: {part}",
                    hint="Only the first path part may be a gs:// URL.",
                )
            )

    joined = posixpath.normpath("/".join(p for p in parts if p))
    for prefix in (GCS_PREFIX, "gs:/", "/"):
        joined = joined.removeprefix(prefix)
    if not joined or joined == ".":
        return Err(StorageError("path should not be an empty string"))
    return Ok(GCS_PREFIX + joined)


def bucket_accessible(*, bucket: str, cwd: Path) -> Result[None, StorageError]:
    """Check that the bucket exists and the caller may list it."""
    url = normalize_gcs_path(bucket)
    if isinstance(url, Err):
        return url

    result = run_process(
        ["gsutil", "ls", "-b", url.value], cwd=cwd, timeout=_GSUTIL_QUERY_TIMEOUT_SECONDS
    )
    if isinstance(result, Err):
        return Err(
            StorageError(
                f"bucket not accessible: {url.value}",
                hint=result.error.detail,
            )
        )
    return Ok(None)


def copy_to_remote(
    *,
    src: Path,
    gcs_path: str,
    console: ConsoleProtocol,
    options: CopyOptions = DEFAULT_COPY_OPTIONS,
) -> Result[None, StorageError]:
    """Copy a local file or directory tree to a gs:// destination."""
    dst = normalize_gcs_path(gcs_path)
    if isinstance(dst, Err):
        return dst

    if not src.exists():
        if options.allow_missing:
            console.print(f"source {src} does not exist, skipping upload", Style.DIM)
            return Ok(None)
        return Err(StorageError(f"source does not exist: {src}"))

    args = ["gsutil"]
    if options.concurrent:
        args.append("-m")
    args.append("cp")
    if options.recursive:
        args.append("-r")
    if options.no_clobber:
        args.append("-n")
    args.extend([str(src), dst.value])

    console.command(args)
    cwd = src if src.is_dir() else src.parent
    result = run_process(args, cwd=cwd, timeout=_GSUTIL_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(StorageError(f"copy to {dst.value} failed", hint=result.error.detail))
    return Ok(None)
