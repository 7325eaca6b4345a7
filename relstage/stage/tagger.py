"""Repository tagging.

Per version, in `Versions.ordered()` order:

1. the tag must not resolve yet (hard stop, never a skip);
2. check out the target: the candidate commit (no parent branch), the
   release branch (prime version, created from the candidate commit when
   missing) or the parent branch (non-prime versions);
3. on a release branch, add an empty release commit so the tag's commit is
   unique to it and `git describe` cannot pick the wrong nearby tag;
4. create the annotated tag.

The first failure aborts the whole phase.
"""

from __future__ import annotations

from relstage.core.result import Err, Ok, Result
from relstage.git.repository import GitError, Repository
from relstage.output.console import ConsoleProtocol, Style
from relstage.stage.errors import StageError
from relstage.stage.impl import StageImpl
from relstage.stage.model import StageOptions, StageState, Versions


def _git_failed(step: str, e: GitError) -> Err[StageError]:
    return Err(StageError(kind="git_failed", message=f"{step}: {e.message}"))


def tag_repository(
    *,
    impl: StageImpl,
    options: StageOptions,
    state: StageState,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    versions = state.versions
    if versions is None:
        return Err(StageError(kind="out_of_order", message="release versions not generated yet"))

    console.print("Configuring git user and email", Style.DIM)
    identity = impl.configure_global_default_user_and_email()
    if isinstance(identity, Err):
        return _git_failed("configure git user and email", identity.error)

    repo = impl.open_repo(options.repo_root)
    if isinstance(repo, Err):
        return _git_failed("open repository", repo.error)

    for version in versions.ordered():
        console.print(f"Preparing version {version}")
        tagged = _tag_version(
            impl=impl,
            repo=repo.value,
            version=version,
            versions=versions,
            options=options,
            state=state,
            console=console,
        )
        if isinstance(tagged, Err):
            return Err(tagged.error.for_version(version))
        console.success(f"tagged {version}")

    return Ok(None)


def _tag_version(
    *,
    impl: StageImpl,
    repo: Repository,
    version: str,
    versions: Versions,
    options: StageOptions,
    state: StageState,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    if isinstance(impl.rev_parse(repo, version), Ok):
        return Err(
            StageError(
                kind="tag_exists",
                message=f"tag {version} already exists",
                hint="Inspect the repository; staging never re-tags an existing version.",
            )
        )

    checked_out = _checkout_target(
        impl=impl,
        repo=repo,
        version=version,
        versions=versions,
        options=options,
        state=state,
        console=console,
    )
    if isinstance(checked_out, Err):
        return checked_out

    # "" when the commit was checked out directly (detached HEAD).
    branch = impl.current_branch(repo)
    if isinstance(branch, Err):
        return _git_failed("get current branch", branch.error)
    console.print(f"Current branch is {branch.value!r}", Style.DIM)

    if branch.value and options.config.is_release_branch_name(branch.value):
        console.print(f"Creating empty release commit for tag {version}", Style.DIM)
        committed = impl.commit_empty(
            repo, f"Release commit for {options.config.product} {version}"
        )
        if isinstance(committed, Err):
            return _git_failed("create empty release commit", committed.error)

    console.print(f"Tagging version {version}", Style.DIM)
    tagged = impl.tag(
        repo,
        version,
        f"{options.config.product} {options.release_type} release {version}",
    )
    if isinstance(tagged, Err):
        return _git_failed("tag version", tagged.error)
    return Ok(None)


def _checkout_target(
    *,
    impl: StageImpl,
    repo: Repository,
    version: str,
    versions: Versions,
    options: StageOptions,
    state: StageState,
    console: ConsoleProtocol,
) -> Result[None, StageError]:
    commit = state.commit

    if not state.parent_branch:
        console.print(f"Checking out commit {commit}", Style.DIM)
        done = impl.checkout(repo, commit)
        if isinstance(done, Err):
            return _git_failed("checkout release commit", done.error)
        return Ok(None)

    console.print(f"Parent branch provided: {state.parent_branch}", Style.DIM)

    if version != versions.prime:
        console.print(f"Version {version} is not the prime, checking out parent branch", Style.DIM)
        done = impl.checkout(repo, state.parent_branch)
        if isinstance(done, Err):
            return _git_failed("checkout parent branch", done.error)
        return Ok(None)

    release_branch = options.release_branch
    exists = impl.has_branch(repo, release_branch)
    if isinstance(exists, Err):
        return Err(
            StageError(
                kind="git_failed",
                message=f"check if repository has branch {release_branch}: {exists.error.message}",
            )
        )

    if exists.value:
        console.print(f"Checking out existing release branch {release_branch}", Style.DIM)
        done = impl.checkout(repo, release_branch)
        if isinstance(done, Err):
            return _git_failed("checkout release branch", done.error)
        return Ok(None)

    console.print(f"Creating release branch {release_branch} from commit {commit}", Style.DIM)
    done = impl.checkout(repo, "-b", release_branch, commit)
    if isinstance(done, Err):
        return _git_failed("create new release branch", done.error)
    return Ok(None)
