"""Git operations used by the staging tagger.

Usage:
    from relstage.git import Repository

    repo = Repository(Path("/path/to/repo"))
    if isinstance(repo.rev_parse("v1.30.0"), Ok):
        print("already tagged")
"""

from relstage.git.repository import (
    GitError,
    Repository,
    configure_global_default_identity,
)

__all__ = [
    "GitError",
    "Repository",
    "configure_global_default_identity",
]
