"""Error presentation utilities.

Centralized StageError formatting and exit code mapping for the CLI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relstage.core.errors import ErrorCode
from relstage.output.console import Style
from relstage.stage.errors import StageError

if TYPE_CHECKING:
    from relstage.output.console import ConsoleProtocol

__all__ = ["print_stage_error", "stage_error_exit_code"]


def print_stage_error(error: StageError, console: ConsoleProtocol) -> None:
    console.error(error.describe())
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    if error.kind in {"tag_exists", "git_failed"}:
        console.print(
            "Repository state may be partially updated; inspect it before re-running.",
            Style.DIM,
        )


def stage_error_exit_code(error: StageError) -> int:
    match error.kind:
        case "invalid_options" | "invalid_version" | "branch_mismatch" | "out_of_order":
            return int(ErrorCode.USER_ERROR)
        case "prerequisite_missing" | "bucket_unavailable":
            return int(ErrorCode.ENV_ERROR)
        case "build_failed" | "changelog_failed":
            return int(ErrorCode.BUILD_ERROR)
        case "upload_failed" | "push_failed" | "submit_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "workspace_failed" | "git_failed":
            return int(ErrorCode.IO_ERROR)
        case "tag_exists":
            return int(ErrorCode.CONFLICT)
    return int(ErrorCode.USER_ERROR)
