"""Tests for relstage.platform.process module."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from relstage.core.result import Err, Ok
from relstage.platform.process import ProcessError, run, run_silent


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(("git", "status"), 1, "", "fatal: not a git repository")
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(("gsutil", "-m", "cp", "-r", "src", "gs://b"), 1, "", "")
        assert str(error) == "gsutil -m cp ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        assert ProcessError(("x",), 1, "out", " err \n").detail == "err"
        assert ProcessError(("x",), 1, "out\n", "").detail == "out"
        assert ProcessError(("x",), 2, "", "").detail == "x failed (exit 2)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    @patch("subprocess.run")
    def test_success_returns_stdout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="abc123\n", stderr="")
        result = run(["git", "rev-parse", "HEAD"], cwd=tmp_path, timeout=5)
        assert result == Ok("abc123\n")
        kwargs = mock_run.call_args.kwargs
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["timeout"] == 5
        assert kwargs["env"] is None

    @patch("subprocess.run")
    def test_failure_returns_process_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal")
        result = run(["git", "tag"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 128
        assert result.error.stderr == "fatal"
        assert result.error.command == ("git", "tag")

    @patch("subprocess.run")
    def test_timeout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["docker"], timeout=1)
        result = run(["docker", "push", "img"], cwd=tmp_path, timeout=1)
        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr

    @patch("subprocess.run")
    def test_missing_binary(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = FileNotFoundError("gsutil")
        result = run(["gsutil", "ls"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    @patch("subprocess.run")
    def test_env_is_passed_as_dict(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        run(["make"], cwd=tmp_path, env={"RELEASE_VERSION": "v1.0.0"})
        assert mock_run.call_args.kwargs["env"] == {"RELEASE_VERSION": "v1.0.0"}


class TestRunSilent:
    @patch("subprocess.run")
    def test_streams_without_capture(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = MagicMock(returncode=0)
        assert run_silent(["make"], cwd=tmp_path) == Ok(None)
        kwargs = mock_run.call_args.kwargs
        assert "capture_output" not in kwargs
        assert "timeout" not in kwargs

    @patch("subprocess.run")
    def test_failure(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = MagicMock(returncode=2)
        result = run_silent(["make"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 2
