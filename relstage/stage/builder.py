from __future__ import annotations

from relstage.core.result import Err, Ok, Result
from relstage.output.console import ConsoleProtocol
from relstage.stage.errors import StageError
from relstage.stage.impl import StageImpl
from relstage.stage.model import Versions


def build_versions(
    *,
    impl: StageImpl,
    versions: Versions,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    """Build every version in order; stop at the first failure.

    Outputs of versions built before a failure are left on disk.
    """
    for version in versions.ordered():
        console.print(f"Building release artifacts for {version}")
        built = impl.make_cross(version)
        if isinstance(built, Err):
            return Err(built.error.for_version(version))
        console.success(f"built {version}")
    return Ok(None)
