from __future__ import annotations

import shutil
from pathlib import Path

from relstage.core.config import PrerequisitesConfig
from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol, Style
from relstage.stage.errors import StageError

_GIB = 1024**3


def check_prerequisites(
    *,
    workspace_dir: Path,
    config: PrerequisitesConfig,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    """Verify required tools are on PATH and enough disk space is free."""
    missing = [tool for tool in config.tools if shutil.which(tool) is None]
    if missing:
        return Err(
            StageError(
                kind="prerequisite_missing",
                message=f"required tools not found: {', '.join(missing)}",
                hint="Install them and make sure they are on PATH.",
            )
        )
    for tool in config.tools:
        console.print(f"{tool}: found", Style.DIM)

    try:
        free = shutil.disk_usage(workspace_dir).free
    except OSError as e:
        return Err(
            StageError(
                kind="prerequisite_missing",
                message=f"cannot determine free disk space in {workspace_dir}",
                hint=str(e),
            )
        )

    free_gb = free // _GIB
    if free_gb < config.min_disk_gb:
        return Err(
            StageError(
                kind="prerequisite_missing",
                message=f"not enough disk space: {free_gb} GB free, {config.min_disk_gb} GB needed",
            )
        )
    console.print(f"disk space: {free_gb} GB free", Style.DIM)
    return Ok(None)
