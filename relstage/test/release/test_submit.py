"""Tests for relstage.release.submit and relstage.release.changelog."""

from __future__ import annotations

from pathlib import Path

import pytest

import relstage.release.changelog as changelog_mod
import relstage.release.submit as submit_mod
from relstage.core.config import SubmitConfig
from relstage.core.result import Err, Ok, Result
from relstage.output.console import MockConsole
from relstage.platform.process import ProcessError
from relstage.release.changelog import ChangelogOptions, generate_changelog
from relstage.release.submit import SubmitOptions, submit_build


class _Process:
    def __init__(self, result: Result[str, ProcessError] | None = None) -> None:
        self.calls: list[list[str]] = []
        self.result: Result[str, ProcessError] = result or Ok("")

    def __call__(self, cmd: list[str], cwd: Path, **_: object) -> Result[str, ProcessError]:
        self.calls.append(cmd)
        return self.result


class TestSubmitOptions:
    def test_stage_substitutions(self) -> None:
        options = SubmitOptions(
            release_type="rc",
            branch="release-1.30",
            build_version="v1.30.0-rc.0.1+abc",
            stage=True,
        )
        assert options.mode == "stage"
        assert options.substitutions() == (
            "_MODE=stage,_RELEASE_TYPE=rc,_BRANCH=release-1.30,"
            "_BUILDVERSION=v1.30.0-rc.0.1+abc,_NOMOCK="
        )

    def test_release_nomock(self) -> None:
        options = SubmitOptions(
            release_type="official",
            branch="release-1.30",
            build_version="v1.30.0",
            no_mock=True,
            release=True,
        )
        assert options.mode == "release"
        assert options.substitutions().endswith("_NOMOCK=--nomock")


class TestSubmitBuild:
    def test_submits_gcloud_build(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        process = _Process()
        monkeypatch.setattr(submit_mod, "run_process", process)
        console = MockConsole()

        result = submit_build(
            SubmitOptions(release_type="alpha", branch="master", stage=True),
            config=SubmitConfig(),
            cwd=tmp_path,
            console=console,
        )

        assert result == Ok(None)
        assert process.calls[0][:4] == ["gcloud", "builds", "submit", "--no-source"]
        assert "--project=kubernetes-release-test" in process.calls[0]
        assert "--config=cloudbuild.yaml" in process.calls[0]
        assert console.find("mock run")

    @pytest.mark.parametrize(
        "options",
        [
            SubmitOptions(release_type="rc", branch="release-1.30"),
            SubmitOptions(release_type="rc", branch="release-1.30", stage=True, release=True),
            SubmitOptions(release_type="rc", branch="release-1.30", release=True),
        ],
    )
    def test_invalid_requests(
        self, options: SubmitOptions, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        process = _Process()
        monkeypatch.setattr(submit_mod, "run_process", process)
        result = submit_build(options, config=SubmitConfig(), cwd=tmp_path, console=MockConsole())
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_options"
        assert process.calls == []

    def test_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        error = ProcessError(("gcloud",), 1, "", "PERMISSION_DENIED")
        monkeypatch.setattr(submit_mod, "run_process", _Process(Err(error)))
        result = submit_build(
            SubmitOptions(release_type="beta", branch="release-1.30", stage=True),
            config=SubmitConfig(),
            cwd=tmp_path,
            console=MockConsole(),
        )
        assert isinstance(result, Err)
        assert result.error.kind == "submit_failed"
        assert result.error.hint == "PERMISSION_DENIED"


def _changelog_options(tmp_path: Path) -> ChangelogOptions:
    return ChangelogOptions(
        repo_path=tmp_path,
        tag="v1.30.0",
        branch="release-1.30",
        bucket="kubernetes-release-gcb",
        html_file=tmp_path / "src" / "release-notes.html",
        tars=tmp_path / "_output-v1.30.0" / "release-tars",
    )


class TestChangelog:
    def test_args(self, tmp_path: Path) -> None:
        assert _changelog_options(tmp_path).to_args() == [
            f"--repo={tmp_path}",
            "--tag=v1.30.0",
            "--branch=release-1.30",
            "--bucket=kubernetes-release-gcb",
            f"--html-file={tmp_path / 'src' / 'release-notes.html'}",
            f"--tars={tmp_path / '_output-v1.30.0' / 'release-tars'}",
            "--dependencies",
        ]

    def test_runs_configured_command(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        process = _Process()
        monkeypatch.setattr(changelog_mod, "run_process", process)
        result = generate_changelog(
            _changelog_options(tmp_path), command=("release-notes",), console=MockConsole()
        )
        assert result == Ok(None)
        assert process.calls[0][0] == "release-notes"
        assert "--tag=v1.30.0" in process.calls[0]

    def test_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        error = ProcessError(("release-notes",), 1, "", "rate limited")
        monkeypatch.setattr(changelog_mod, "run_process", _Process(Err(error)))
        result = generate_changelog(
            _changelog_options(tmp_path), command=("release-notes",), console=MockConsole()
        )
        assert isinstance(result, Err)
        assert result.error.kind == "changelog_failed"
        assert result.error.hint == "rate limited"
