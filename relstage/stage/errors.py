from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

StageErrorKind = Literal[
    "invalid_options",
    "invalid_version",
    "branch_mismatch",
    "out_of_order",
    "prerequisite_missing",
    "workspace_failed",
    "tag_exists",
    "git_failed",
    "build_failed",
    "changelog_failed",
    "bucket_unavailable",
    "upload_failed",
    "push_failed",
    "submit_failed",
]


@dataclass(frozen=True, slots=True)
class StageError:
    kind: StageErrorKind
    message: str
    hint: str | None = None
    # Filled in by the controller / per-version loops.
    phase: str | None = None
    version: str | None = None

    def in_phase(self, phase: str) -> StageError:
        if self.phase is not None:
            return self
        return replace(self, phase=phase)

    def for_version(self, version: str) -> StageError:
        return replace(self, version=version)

    def describe(self) -> str:
        """One-line message with phase/version context."""
        context = [c for c in (self.phase, self.version) if c]
        if not context:
            return self.message
        return f"{' '.join(context)}: {self.message}"
