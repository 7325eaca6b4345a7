from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relstage.core.config import SubmitConfig
from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol, Style
from relstage.platform.process import run as run_process
from relstage.release.timeouts import GCLOUD_SUBMIT_TIMEOUT_SECONDS
from relstage.stage.errors import StageError


@dataclass(frozen=True, slots=True)
class SubmitOptions:
    release_type: str
    branch: str
    build_version: str = ""
    no_mock: bool = False
    stage: bool = False
    release: bool = False

    @property
    def mode(self) -> str:
        return "release" if self.release else "stage"

    def substitutions(self) -> str:
        values = (
            ("_MODE", self.mode),
            ("_RELEASE_TYPE", self.release_type),
            ("_BRANCH", self.branch),
            ("_BUILDVERSION", self.build_version),
            ("_NOMOCK", "--nomock" if self.no_mock else ""),
        )
        return ",".join(f"{k}={v}" for k, v in values)


def submit_build(
    options: SubmitOptions,
    *,
    config: SubmitConfig,
    cwd: Path,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    """Submit a remote staging (or promote) job to Google Cloud Build."""
    if options.stage == options.release:
        return Err(
            StageError(
                kind="invalid_options",
                message="exactly one of stage or release must be requested",
            )
        )
    if options.release and not options.build_version:
        return Err(
            StageError(
                kind="invalid_options",
                message="promoting a staged build requires its build version",
            )
        )

    cmd = [
        "gcloud",
        "builds",
        "submit",
        "--no-source",
        f"--project={config.project}",
        f"--config={config.config_file}",
        f"--substitutions={options.substitutions()}",
    ]
    console.command(cmd)
    if not options.no_mock:
        console.print("mock run: nothing will be published", Style.DIM)

    result = run_process(cmd, cwd=cwd, timeout=GCLOUD_SUBMIT_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            StageError(
                kind="submit_failed",
                message=f"failed to submit {options.mode} job",
                hint=result.error.detail,
            )
        )
    return Ok(None)
