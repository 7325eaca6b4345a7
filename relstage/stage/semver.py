from __future__ import annotations

import re
from dataclasses import dataclass

# v1.30.0, v1.30.0-alpha.1, v1.30.0-alpha.0.42+0123abcd
_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

PRERELEASE_LABELS = ("alpha", "beta", "rc")


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @property
    def pre_label(self) -> str | None:
        """Pre-release label (`alpha`, `beta`, `rc`, ...) if any."""
        return self.pre[0] if self.pre else None

    @property
    def pre_number(self) -> int | None:
        if len(self.pre) < 2 or not self.pre[1].isdigit():
            return None
        return int(self.pre[1])

    @property
    def commit(self) -> str | None:
        """Source commit embedded as the first build-metadata field."""
        return self.build[0] if self.build else None

    def core_tag(self) -> str:
        return f"v{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        out = self.core_tag()
        if self.pre:
            out += "-" + ".".join(self.pre)
        if self.build:
            out += "+" + ".".join(self.build)
        return out


def parse_version(tag: str) -> SemVer | None:
    m = _VERSION_RE.match(tag.strip())
    if m is None:
        return None
    pre = tuple(m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), pre, build)


def format_prerelease(major: int, minor: int, patch: int, label: str, n: int) -> str:
    return f"v{major}.{minor}.{patch}-{label}.{n}"


def parse_release_branch(branch: str, *, prefix: str) -> tuple[int, int] | None:
    """Parse `<prefix>MAJOR.MINOR[.PATCH]` into (major, minor)."""
    m = re.match(rf"^{re.escape(prefix)}(0|[1-9]\d*)\.(0|[1-9]\d*)(?:\.(0|[1-9]\d*))?$", branch)
    if m is None:
        return None
    return (int(m.group(1)), int(m.group(2)))
