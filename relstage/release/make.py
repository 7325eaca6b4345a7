from __future__ import annotations

import os
from pathlib import Path

from relstage.core.config import StageConfig
from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol
from relstage.platform.process import run_silent
from relstage.stage.errors import StageError


def build_dir_for(*, repo_root: Path, version: str, config: StageConfig) -> Path:
    """Local output directory of a version's build: `<repo>/<build_dir>-<version>`."""
    return repo_root / f"{config.paths.build_dir}-{version}"


def make_release(
    *,
    version: str,
    repo_root: Path,
    config: StageConfig,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    """Build the release artifacts for one version.

    The build tool receives the version and its output directory through
    the environment and streams its output to the terminal.
    """
    cmd = list(config.build.command)
    env = {
        **os.environ,
        "RELEASE_VERSION": version,
        "OUTPUT_DIR": str(build_dir_for(repo_root=repo_root, version=version, config=config)),
    }

    console.command(cmd)
    result = run_silent(cmd, cwd=repo_root, env=env)
    if isinstance(result, Err):
        return Err(
            StageError(
                kind="build_failed",
                message=f"build failed for {version} (exit {result.error.returncode})",
                hint=result.error.stderr.strip() or None,
            )
        )
    return Ok(None)
