from __future__ import annotations

from pathlib import Path

import typer

from relstage import __version__
from relstage.cli.context import build_context
from relstage.core.errors import ErrorCode
from relstage.core.result import Err
from relstage.output.errors import print_stage_error, stage_error_exit_code
from relstage.release.submit import SubmitOptions
from relstage.stage.controller import StageController
from relstage.stage.impl import DefaultStageImpl
from relstage.stage.model import RELEASE_TYPES, StageOptions

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_TYPE_HELP = f"Release type ({', '.join(RELEASE_TYPES)})"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        is_eager=True,
        callback=_version_callback,
    ),
) -> None:
    """Tag, build and stage releases for promotion."""


@app.command()
def stage(
    release_type: str = typer.Option(..., "--type", help=_TYPE_HELP),
    branch: str = typer.Option(..., "--branch", help="Release branch, e.g. release-1.30"),
    build_version: str = typer.Option(
        ..., "--build-version", help="Build candidate, e.g. v1.30.0-rc.0.12+0123abcd"
    ),
    no_mock: bool = typer.Option(False, "--nomock", help="Stage to production locations."),
    repo: Path | None = typer.Option(None, "--repo", help="Repository root (default: cwd)"),
    workspace: Path | None = typer.Option(
        None, "--workspace", help="Workspace directory (default: repository root)"
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to relstage.toml"),
) -> None:
    """Tag, build and stage a release."""
    ctx = build_context(repo=repo, workspace=workspace, config_path=config)
    options = StageOptions(
        release_type=release_type,
        release_branch=branch,
        build_version=build_version,
        no_mock=no_mock,
        repo_root=ctx.repo_root,
        workspace_dir=ctx.workspace_dir,
        config=ctx.config,
    )

    result = StageController(options, console=ctx.console).run()
    if isinstance(result, Err):
        print_stage_error(result.error, ctx.console)
        raise typer.Exit(code=stage_error_exit_code(result.error))
    ctx.console.success("staging complete")


@app.command()
def submit(
    release_type: str = typer.Option(..., "--type", help=_TYPE_HELP),
    branch: str = typer.Option(..., "--branch", help="Release branch"),
    build_version: str = typer.Option("", "--build-version", help="Build candidate version"),
    no_mock: bool = typer.Option(False, "--nomock", help="Submit a production run."),
    release: bool = typer.Option(
        False, "--release", help="Promote a staged build instead of staging."
    ),
    repo: Path | None = typer.Option(None, "--repo", help="Repository root (default: cwd)"),
    config: Path | None = typer.Option(None, "--config", help="Path to relstage.toml"),
) -> None:
    """Submit a staging (or promote) job to the remote build service."""
    if release_type not in RELEASE_TYPES:
        typer.echo(f"error: invalid release type: {release_type}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx = build_context(repo=repo, workspace=None, config_path=config)
    impl = DefaultStageImpl(config=ctx.config, repo_root=ctx.repo_root, console=ctx.console)
    result = impl.submit(
        SubmitOptions(
            release_type=release_type,
            branch=branch,
            build_version=build_version,
            no_mock=no_mock,
            stage=not release,
            release=release,
        )
    )
    if isinstance(result, Err):
        print_stage_error(result.error.in_phase("submit"), ctx.console)
        raise typer.Exit(code=stage_error_exit_code(result.error))
    ctx.console.success("job submitted")


def main() -> None:
    app()
