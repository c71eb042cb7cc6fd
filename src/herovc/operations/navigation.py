"""Navigation operations for Hero -- reference resolution and checkout.

These operations manipulate the current position without creating new
commits.  They compose storage primitives (ref repo, object repo) and the
checkout engine into user-facing actions.

HEAD state machine::

    checkout HEAD       -> position unchanged; a detached marker that equals
                           the branch head is redundant and is cleared
    checkout <branch>   -> Attached(branch)
    checkout <digest>   -> Attached if it equals the attached branch's head,
                           else Detached(digest) with HEAD left untouched
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from herovc.engine.hashing import is_digest, is_hex_prefix
from herovc.exceptions import (
    BranchNotFoundError,
    CommitNotFoundError,
    InvalidReferenceError,
    RepositoryError,
)
from herovc.models.reference import (
    HEAD_TOKEN,
    Attached,
    CurrentPosition,
    Detached,
    HeadState,
    Named,
    Raw,
    Reference,
)

if TYPE_CHECKING:
    from herovc.engine.checkout import CheckoutEngine
    from herovc.storage.repositories import ObjectRepository, RefRepository

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    """Outcome of a checkout.

    Attributes:
        digest: The commit now checked out.
        state: The HEAD state after checkout.
        written: Paths written to the working tree.
        skipped: Paths left alone because they already matched.
        removed: Paths removed because the target does not track them.
        warnings: Integrity anomalies and other non-fatal notes.
    """

    digest: str
    state: HeadState
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_detached(self) -> bool:
        return isinstance(self.state, Detached)


def head_state(ref_repo: RefRepository) -> HeadState:
    """Read the persisted HEAD state.

    Raises:
        RepositoryError: If the HEAD marker is missing.
    """
    branch = ref_repo.get_head_branch()
    if branch is None:
        raise RepositoryError("Could not find repository HEAD - have you run init?")
    lock = ref_repo.get_lock()
    if lock is not None:
        return Detached(branch=branch, digest=lock)
    return Attached(branch=branch)


def branch_head(branch: str, ref_repo: RefRepository) -> str:
    digest = ref_repo.get_branch(branch)
    if digest is None:
        raise BranchNotFoundError(branch)
    return digest


def current_position(ref_repo: RefRepository) -> str:
    """Digest of the current position (branch head, or the detached digest)."""
    state = head_state(ref_repo)
    if isinstance(state, Detached):
        return state.digest
    return branch_head(state.branch, ref_repo)


def parse_reference(
    token: str,
    ref_repo: RefRepository,
    object_repo: ObjectRepository,
) -> Reference:
    """Parse a user-supplied token into a Reference.

    Resolution order:
    1. ``HEAD`` -> CurrentPosition
    2. Existing branch name -> Named
    3. Full digest of a stored commit -> Raw
    4. Unique hex prefix (min 4 chars) of a stored commit -> Raw

    An unreadable branch directory is a hard failure rather than a silent
    fall-through to digest matching.

    Raises:
        RepositoryError: If the branch directory cannot be read.
        CommitNotFoundError: If a full digest is not stored.
        AmbiguousPrefixError: If a prefix matches multiple commits.
        InvalidReferenceError: If nothing matches.
    """
    if token == HEAD_TOKEN:
        return CurrentPosition()

    if token in ref_repo.list_branches():
        return Named(token)

    if is_digest(token):
        if not object_repo.exists(token):
            raise CommitNotFoundError(token)
        return Raw(token)

    if is_hex_prefix(token):
        found = object_repo.find_by_prefix(token)
        if found is not None:
            return Raw(found)

    raise InvalidReferenceError(f"Unknown reference: {token}")


def resolve_reference(reference: Reference, ref_repo: RefRepository) -> str:
    """Resolve a parsed Reference to a commit digest."""
    if isinstance(reference, CurrentPosition):
        return current_position(ref_repo)
    if isinstance(reference, Named):
        return branch_head(reference.name, ref_repo)
    return reference.digest


def checkout_transition(
    reference: Reference,
    state: HeadState,
    ref_repo: RefRepository,
) -> tuple[str, HeadState]:
    """Compute (target digest, next HEAD state) without touching disk."""
    if isinstance(reference, Named):
        return branch_head(reference.name, ref_repo), Attached(reference.name)

    attached_head = ref_repo.get_branch(state.branch)

    if isinstance(reference, CurrentPosition):
        if isinstance(state, Detached) and state.digest != attached_head:
            return state.digest, state
        if attached_head is None:
            raise BranchNotFoundError(state.branch)
        return attached_head, Attached(state.branch)

    if reference.digest == attached_head:
        return reference.digest, Attached(state.branch)
    return reference.digest, Detached(branch=state.branch, digest=reference.digest)


def apply_state(state: HeadState, ref_repo: RefRepository) -> None:
    """Persist a HEAD state."""
    if ref_repo.get_head_branch() != state.branch:
        ref_repo.set_head_branch(state.branch)
    if isinstance(state, Detached):
        ref_repo.set_lock(state.digest)
    else:
        ref_repo.clear_lock()


def checkout(
    token: str,
    ref_repo: RefRepository,
    object_repo: ObjectRepository,
    engine: CheckoutEngine,
    *,
    prune: bool = True,
) -> CheckoutResult:
    """Check out a reference into the working tree and move HEAD.

    The commit is read and the working tree restored before the HEAD
    state is written, so an unknown or unreadable commit leaves HEAD as
    it was.

    Raises:
        InvalidReferenceError: If the token cannot be resolved.
        CommitFormatError: If the target commit cannot be parsed.
    """
    state = head_state(ref_repo)
    previous = current_position(ref_repo)
    reference = parse_reference(token, ref_repo, object_repo)
    digest, next_state = checkout_transition(reference, state, ref_repo)

    restored = engine.restore(digest, previous_digest=previous, prune=prune)
    apply_state(next_state, ref_repo)

    result = CheckoutResult(
        digest=digest,
        state=next_state,
        written=restored.written,
        skipped=restored.skipped,
        removed=restored.removed,
        warnings=restored.warnings,
    )
    if result.is_detached and not isinstance(state, Detached):
        note = (
            "You are detached from the HEAD commit. Commits made in this state "
            "will not advance any branch and are reachable only by their hash."
        )
        logger.warning(note)
        result.warnings.append(note)
    return result


def normalize(
    digest: str,
    ref_repo: RefRepository,
    *,
    prefer: str | None = None,
) -> str:
    """Most readable name for a digest: a branch whose head it is, else itself.

    Args:
        digest: Commit digest.
        ref_repo: Ref repository for branch lookups.
        prefer: Branch to report first when several share the head.
    """
    try:
        names = ref_repo.list_branches()
    except RepositoryError:
        logger.debug("Branch directory unreadable; showing raw digest", exc_info=True)
        return digest
    if digest in names:
        return digest
    if prefer is not None and ref_repo.get_branch(prefer) == digest:
        return prefer
    for name in names:
        if ref_repo.get_branch(name) == digest:
            return name
    return digest
