from __future__ import annotations

import shutil
from pathlib import Path

from relstage.core.config import StageConfig
from relstage.core.result import Err, Ok, Result
from relstage.git.repository import Repository
from relstage.output.console import ConsoleProtocol, Style
from relstage.stage.errors import StageError


def prepare_workspace_stage(
    *,
    repo_root: Path,
    config: StageConfig,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    """Ensure a clean checkout and remove build outputs of earlier runs."""
    repo = Repository(repo_root)
    if not repo.exists():
        return Err(
            StageError(kind="workspace_failed", message=f"not a git repository: {repo_root}")
        )
    if not repo.is_clean():
        return Err(
            StageError(
                kind="workspace_failed",
                message=f"repository has uncommitted changes: {repo_root}",
                hint="Commit/stash changes (or use a fresh clone), then retry.",
            )
        )

    for stale in sorted(repo_root.glob(f"{config.paths.build_dir}*")):
        if not stale.is_dir():
            continue
        console.print(f"removing stale build directory {stale.name}", Style.DIM)
        try:
            shutil.rmtree(stale)
        except OSError as e:
            return Err(
                StageError(
                    kind="workspace_failed",
                    message=f"failed to remove {stale}",
                    hint=str(e),
                )
            )

    return Ok(None)
