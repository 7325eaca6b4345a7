"""Object storage primitives (Google Cloud Storage via gsutil)."""

from relstage.storage.gcs import (
    DEFAULT_COPY_OPTIONS,
    GCS_PREFIX,
    CopyOptions,
    StorageError,
    bucket_accessible,
    copy_to_remote,
    normalize_gcs_path,
)

__all__ = [
    "DEFAULT_COPY_OPTIONS",
    "GCS_PREFIX",
    "CopyOptions",
    "StorageError",
    "bucket_accessible",
    "copy_to_remote",
    "normalize_gcs_path",
]
