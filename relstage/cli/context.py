from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relstage.core.config import CONFIG_FILENAME, StageConfig, load_config
from relstage.core.errors import ErrorCode
from relstage.core.result import Err
from relstage.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    workspace_dir: Path
    config: StageConfig
    console: ConsoleProtocol


def build_context(
    *,
    repo: Path | None,
    workspace: Path | None,
    config_path: Path | None,
) -> CLIContext:
    try:
        repo_root = (repo or Path.cwd()).expanduser().resolve()
        workspace_dir = (workspace or repo_root).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid path: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not repo_root.is_dir():
        typer.echo(f"error: repository not found: {repo_root}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config = StageConfig()
    path = config_path or repo_root / CONFIG_FILENAME
    if config_path is not None or path.exists():
        loaded = load_config(path)
        if isinstance(loaded, Err):
            typer.echo(f"error: {loaded.error.message}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        config = loaded.value

    return CLIContext(
        repo_root=repo_root,
        workspace_dir=workspace_dir,
        config=config,
        console=RichConsole(),
    )
