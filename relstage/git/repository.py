"""Git repository abstraction.

The Repository class wraps the git plumbing the staging tagger needs.
All operations return Result types; nothing here decides policy.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.current_branch():
        case Ok(""):
            print("detached HEAD")
        case Ok(branch):
            print(f"on {branch}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relstage.core.result import Err, Ok, Result
from relstage.platform.process import ProcessError
from relstage.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

DEFAULT_REMOTE = "origin"
DEFAULT_USER_NAME = "Release Staging"
DEFAULT_USER_EMAIL = "release-staging@localhost"

__all__ = [
    "GitError",
    "Repository",
    "configure_global_default_identity",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _git_error(command: str, e: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or fallback,
        returncode=e.returncode,
    )


class Repository:
    """Git working copy opened by path.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, *, remote: str = DEFAULT_REMOTE) -> None:
        self.path = path
        self.remote = remote

    @classmethod
    def open(cls, path: Path) -> Result[Repository, GitError]:
        """Open an existing working copy, failing if path is not a repository."""
        repo = cls(path)
        if not repo.exists():
            return Err(GitError(command="open", message=f"not a git repository: {path}"))
        return Ok(repo)

    def exists(self) -> bool:
        """Check if this is a valid git repository (.git dir or file)."""
        return (self.path / ".git").exists()

    def rev_parse(self, rev: str) -> Result[str, GitError]:
        """Resolve a revision to a commit hash.

        An Err means the revision does not resolve (or git failed).
        """
        result = self._run(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e, f"unknown revision: {rev}"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def has_branch(self, branch: str) -> Result[bool, GitError]:
        """Check whether a branch exists locally or on the remote."""
        result = self._run(
            [
                "for-each-ref",
                "--format=%(refname)",
                f"refs/heads/{branch}",
                f"refs/remotes/{self.remote}/{branch}",
            ]
        )
        match result:
            case Err(e):
                return Err(_git_error("for-each-ref", e, "branch lookup failed"))
            case Ok(stdout):
                return Ok(bool(stdout.strip()))

    def checkout(self, *args: str) -> Result[None, GitError]:
        """Run `git checkout` with the given arguments (e.g. `-b name commit`)."""
        result = self._run(["checkout", *args])
        if isinstance(result, Err):
            return Err(_git_error("checkout", result.error, "checkout failed"))
        return Ok(None)

    def current_branch(self) -> Result[str, GitError]:
        """Get the current branch name; empty string on detached HEAD."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e, "cannot read current branch"))
            case Ok(stdout):
                branch = stdout.strip()
                return Ok("" if branch == "HEAD" else branch)

    def commit_empty(self, message: str) -> Result[None, GitError]:
        result = self._run(["commit", "--allow-empty", "-m", message])
        if isinstance(result, Err):
            return Err(_git_error("commit", result.error, "empty commit failed"))
        return Ok(None)

    def tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD."""
        result = self._run(["tag", "--annotate", "--message", message, name])
        if isinstance(result, Err):
            return Err(_git_error("tag", result.error, f"failed to tag {name}"))
        return Ok(None)

    def is_clean(self) -> bool:
        """Check if the working tree has no changes.

        Returns False if status cannot be determined.
        """
        result = self._run(["status", "--porcelain"])
        match result:
            case Ok(stdout):
                return stdout.strip() == ""
            case Err(_):
                return False

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push", "clone"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)


def configure_global_default_identity(
    *,
    cwd: Path,
    name: str = DEFAULT_USER_NAME,
    email: str = DEFAULT_USER_EMAIL,
) -> Result[None, GitError]:
    """Set a global git user.name/user.email unless one is already configured."""
    for key, value in (("user.name", name), ("user.email", email)):
        current = run_process(
            ["git", "config", "--global", "--get", key], cwd=cwd, timeout=_GIT_TIMEOUT_SECONDS
        )
        if isinstance(current, Ok) and current.value.strip():
            continue
        result = run_process(
            ["git", "config", "--global", key, value], cwd=cwd, timeout=_GIT_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return Err(_git_error("config", result.error, f"failed to set {key}"))
    return Ok(None)
