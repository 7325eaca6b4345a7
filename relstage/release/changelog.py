from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol
from relstage.platform.process import run as run_process
from relstage.release.timeouts import CHANGELOG_TIMEOUT_SECONDS
from relstage.stage.errors import StageError


@dataclass(frozen=True, slots=True)
class ChangelogOptions:
    repo_path: Path
    tag: str
    branch: str
    bucket: str
    html_file: Path
    tars: Path
    dependencies: bool = True

    def to_args(self) -> list[str]:
        args = [
            f"--repo={self.repo_path}",
            f"--tag={self.tag}",
            f"--branch={self.branch}",
            f"--bucket={self.bucket}",
            f"--html-file={self.html_file}",
            f"--tars={self.tars}",
        ]
        if self.dependencies:
            args.append("--dependencies")
        return args


def generate_changelog(
    options: ChangelogOptions,
    *,
    command: tuple[str, ...],
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    """Run the changelog generator for the prime version."""
    cmd = [*command, *options.to_args()]
    console.command(cmd)
    result = run_process(cmd, cwd=options.repo_path, timeout=CHANGELOG_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            StageError(
                kind="changelog_failed",
                message=f"changelog generation failed for {options.tag}",
                hint=result.error.detail,
            )
        )
    return Ok(None)
