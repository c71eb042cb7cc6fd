"""Merge operations for Hero.

Merges another commit into the attached branch.  When the current head is
an ancestor of the other side, the branch is fast-forwarded.  Otherwise a
two-parent commit is written whose files are chosen path by path:

1. identical digest on both sides -> that version;
2. common-ancestor precedence -> the side that changed relative to the
   merge base wins (this includes a deletion on one side);
3. nonempty wins -> a missing or empty version loses to a nonempty one;
4. otherwise the prompter picks ``ours`` or ``theirs``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from herovc.exceptions import DetachedHeadError, NothingToMergeError
from herovc.models.merge import MergeResult, Resolution
from herovc.models.reference import Detached
from herovc.operations.dag import find_merge_base
from herovc.operations.navigation import (
    branch_head,
    head_state,
    parse_reference,
    resolve_reference,
)

if TYPE_CHECKING:
    from herovc.engine.cache import CommitCache
    from herovc.engine.checkout import CheckoutEngine
    from herovc.engine.commit import CommitEngine
    from herovc.models.commit import FileEntry
    from herovc.protocols import Prompter
    from herovc.storage.repositories import ObjectRepository, RefRepository

logger = logging.getLogger(__name__)


def resolve_path(
    path: str,
    ours: FileEntry | None,
    theirs: FileEntry | None,
    base: FileEntry | None,
    prompter: Prompter,
) -> tuple[FileEntry | None, Resolution]:
    """Pick the merged version of one path.  None means deleted."""
    ours_digest = ours.digest if ours is not None else None
    theirs_digest = theirs.digest if theirs is not None else None
    base_digest = base.digest if base is not None else None

    if ours_digest == theirs_digest:
        return ours, Resolution.IDENTICAL

    if ours_digest == base_digest:
        return theirs, Resolution.ANCESTOR
    if theirs_digest == base_digest:
        return ours, Resolution.ANCESTOR

    ours_empty = ours is None or ours.size == 0
    theirs_empty = theirs is None or theirs.size == 0
    if ours_empty and not theirs_empty:
        return theirs, Resolution.NONEMPTY
    if theirs_empty and not ours_empty:
        return ours, Resolution.NONEMPTY

    side = prompter.choose_side(
        path, f"Both sides changed {path}. Keep 'ours' or 'theirs'?"
    )
    return (ours if side == "ours" else theirs), Resolution.USER


def merge(
    token: str,
    *,
    title: str | None,
    message: str,
    ref_repo: RefRepository,
    object_repo: ObjectRepository,
    commit_cache: CommitCache,
    commit_engine: CommitEngine,
    checkout_engine: CheckoutEngine,
    prompter: Prompter,
) -> MergeResult:
    """Merge the commit *token* refers to into the attached branch.

    Raises:
        DetachedHeadError: If HEAD is detached.
        NothingToMergeError: If the other side is already an ancestor.
        InvalidReferenceError: If *token* cannot be resolved.
    """
    state = head_state(ref_repo)
    if isinstance(state, Detached):
        raise DetachedHeadError()

    ours = branch_head(state.branch, ref_repo)
    theirs = resolve_reference(parse_reference(token, ref_repo, object_repo), ref_repo)
    base = find_merge_base(ours, theirs, commit_cache)

    if theirs == ours or base == theirs:
        raise NothingToMergeError(token)

    if base == ours:
        restored = checkout_engine.restore(theirs, previous_digest=ours)
        ref_repo.set_branch(state.branch, theirs)
        logger.info("Fast-forward %s to %s", state.branch, theirs[:12])
        return MergeResult(
            digest=theirs,
            fast_forward=True,
            merge_base=base,
            warnings=restored.warnings,
        )

    ours_files = commit_cache.load(ours).file_map()
    theirs_files = commit_cache.load(theirs).file_map()
    base_files = commit_cache.load(base).file_map() if base is not None else {}

    merged: list[FileEntry] = []
    resolutions: dict[str, Resolution] = {}
    for path in sorted(set(ours_files) | set(theirs_files)):
        chosen, rule = resolve_path(
            path,
            ours_files.get(path),
            theirs_files.get(path),
            base_files.get(path),
            prompter,
        )
        resolutions[path] = rule
        if chosen is not None:
            merged.append(chosen.model_copy(update={"path": path}))
        logger.debug("Merge %s: %s", path, rule)

    commit = commit_engine.make_commit(
        merged,
        parent=ours,
        merge_parent=theirs,
        title=title or f"Merge {token} into {state.branch}",
        message=message,
    )
    digest = commit_engine.write(commit)
    restored = checkout_engine.restore(digest, previous_digest=ours)
    ref_repo.set_branch(state.branch, digest)

    return MergeResult(
        digest=digest,
        merge_base=base,
        resolutions=resolutions,
        warnings=restored.warnings,
    )
