"""Tests for building and staging every release version."""

from __future__ import annotations

from pathlib import Path

from relstage.core.result import Err, Ok
from relstage.output.console import MockConsole
from relstage.release.artifacts import PushBuildOptions
from relstage.stage.builder import build_versions
from relstage.stage.errors import StageError
from relstage.stage.model import StageOptions, Versions
from relstage.stage.stager import promote_command, stage_artifacts, staging_path
from relstage.test.stage.fakes import FakeStageImpl

BUILD_VERSION = "v1.30.0-rc.2.4+0123abcd"
VERSIONS = Versions(prime="v1.30.0", official="v1.30.0", rc="v1.30.1-rc.0")


def _options(tmp_path: Path, *, no_mock: bool = False) -> StageOptions:
    return StageOptions(
        release_type="official",
        release_branch="release-1.30",
        build_version=BUILD_VERSION,
        no_mock=no_mock,
        repo_root=tmp_path / "kubernetes",
        workspace_dir=tmp_path,
    )


class TestBuildVersions:
    def test_builds_in_order(self, impl: FakeStageImpl) -> None:
        console = MockConsole()
        assert build_versions(impl=impl, versions=VERSIONS, console=console) == Ok(None)
        assert impl.calls_to("make_cross") == [("v1.30.0",), ("v1.30.1-rc.0",)]
        assert console.find("OK built v1.30.1-rc.0")

    def test_stops_at_first_failure(self, impl: FakeStageImpl) -> None:
        impl.fail["make_cross"] = StageError(kind="build_failed", message="exit 2")
        result = build_versions(impl=impl, versions=VERSIONS, console=MockConsole())
        assert isinstance(result, Err)
        assert result.error.version == "v1.30.0"
        assert len(impl.calls_to("make_cross")) == 1


def test_staging_path() -> None:
    assert staging_path(build_version=BUILD_VERSION, version="v1.30.0") == (
        "stage/v1.30.0-rc.2.4+0123abcd/v1.30.0"
    )


class TestPromoteCommand:
    def test_mock(self, tmp_path: Path) -> None:
        assert promote_command(_options(tmp_path)) == (
            "relstage submit --release --type official --branch release-1.30 "
            "--build-version=v1.30.0-rc.2.4+0123abcd"
        )

    def test_nomock(self, tmp_path: Path) -> None:
        assert promote_command(_options(tmp_path, no_mock=True)).endswith(" --nomock")


class TestStageArtifacts:
    def test_stages_every_version(self, impl: FakeStageImpl, tmp_path: Path) -> None:
        console = MockConsole()
        options = _options(tmp_path)

        result = stage_artifacts(impl=impl, options=options, versions=VERSIONS, console=console)

        assert result == Ok(promote_command(options))
        per_version = [
            "check_release_bucket",
            "stage_local_source_tree",
            "stage_local_artifacts",
            "push_release_artifacts",
            "push_release_artifacts",
            "push_container_images",
        ]
        assert impl.names() == per_version * 2
        assert console.find("To release this staged build, run:")

    def test_push_locations(self, impl: FakeStageImpl, tmp_path: Path) -> None:
        options = _options(tmp_path)
        stage_artifacts(impl=impl, options=options, versions=VERSIONS, console=MockConsole())

        build_dir = tmp_path / "kubernetes" / "_output-v1.30.0"
        pushes = [(src, dst) for _, src, dst in impl.calls_to("push_release_artifacts")][:2]
        assert pushes == [
            (
                build_dir / "gcs-stage" / "v1.30.0",
                f"stage/{BUILD_VERSION}/v1.30.0/gcs-stage/v1.30.0",
            ),
            (build_dir / "release-images", f"stage/{BUILD_VERSION}/v1.30.0/release-images"),
        ]

        source = impl.calls_to("stage_local_source_tree")[0]
        assert source[1:] == (tmp_path, BUILD_VERSION)

    def test_push_options_follow_mock_mode(self, impl: FakeStageImpl, tmp_path: Path) -> None:
        stage_artifacts(
            impl=impl,
            options=_options(tmp_path, no_mock=True),
            versions=Versions(prime="v1.30.0", official="v1.30.0"),
            console=MockConsole(),
        )
        (push_options,) = impl.calls_to("push_container_images")[0]
        assert isinstance(push_options, PushBuildOptions)
        assert push_options.bucket == "kubernetes-release"
        assert push_options.registry == "gcr.io/k8s-staging-kubernetes"
        assert push_options.version == "v1.30.0"

    def test_failure_stops_remaining_versions(self, impl: FakeStageImpl, tmp_path: Path) -> None:
        impl.fail["push_container_images"] = StageError(kind="push_failed", message="denied")
        result = stage_artifacts(
            impl=impl, options=_options(tmp_path), versions=VERSIONS, console=MockConsole()
        )
        assert isinstance(result, Err)
        assert result.error.version == "v1.30.0"
        assert len(impl.calls_to("check_release_bucket")) == 1


def test_unavailable_bucket_stops_before_uploads(impl: FakeStageImpl, tmp_path: Path) -> None:
    impl.fail["check_release_bucket"] = StageError(
        kind="bucket_unavailable", message="bucket not accessible: gs://kubernetes-release-gcb"
    )

    result = stage_artifacts(
        impl=impl, options=_options(tmp_path), versions=VERSIONS, console=MockConsole()
    )

    assert isinstance(result, Err)
    assert result.error.kind == "bucket_unavailable"
    assert result.error.version == "v1.30.0"
    assert impl.names() == ["check_release_bucket"]
