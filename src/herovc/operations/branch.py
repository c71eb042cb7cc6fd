"""Branch operations for Hero.

Create, list, and validate branches.  One file per branch under
``branches/`` enforces name uniqueness.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from herovc.engine.hashing import is_digest
from herovc.exceptions import InvalidBranchNameError
from herovc.models.reference import HEAD_TOKEN, Attached, Detached
from herovc.operations.navigation import (
    apply_state,
    head_state,
    parse_reference,
    resolve_reference,
)

if TYPE_CHECKING:
    from herovc.protocols import Prompter
    from herovc.storage.repositories import ObjectRepository, RefRepository

logger = logging.getLogger(__name__)

# Characters forbidden in branch names (git-style)
_FORBIDDEN_CHARS = re.compile(r"[\s~^:?*\[\\,]")


def validate_branch_name(name: str) -> None:
    """Validate a branch name against naming rules.

    Names are stored as file names, so they must be filesystem-safe; they
    also must not shadow the ``HEAD`` token or look like a digest.

    Raises InvalidBranchNameError on violation.
    """
    if not name:
        raise InvalidBranchNameError(name, "branch name cannot be empty")

    if name == HEAD_TOKEN:
        raise InvalidBranchNameError(name, f"'{HEAD_TOKEN}' is reserved")

    if is_digest(name):
        raise InvalidBranchNameError(name, "branch name cannot be a commit digest")

    if ".." in name:
        raise InvalidBranchNameError(name, "branch name cannot contain '..'")

    if name.startswith("."):
        raise InvalidBranchNameError(name, "branch name cannot start with '.'")

    if name.endswith("."):
        raise InvalidBranchNameError(name, "branch name cannot end with '.'")

    if _FORBIDDEN_CHARS.search(name):
        raise InvalidBranchNameError(
            name,
            "branch name contains forbidden characters "
            "(whitespace, ~, ^, :, ?, *, [, \\, ,)",
        )

    if name.startswith("/") or name.endswith("/") or "//" in name:
        raise InvalidBranchNameError(name, "branch name has invalid slash usage")

    if any(part.startswith(".") for part in name.split("/")):
        raise InvalidBranchNameError(name, "branch name components cannot start with '.'")


def create_branch(
    name: str,
    ref_repo: RefRepository,
    object_repo: ObjectRepository,
    prompter: Prompter,
    *,
    reference: str = HEAD_TOKEN,
) -> str | None:
    """Create (or, after confirmation, overwrite) a branch.

    If the branch points at the currently detached digest, the detached
    marker is cleared and HEAD attaches to the new branch: the detached
    work is now tracked.

    Args:
        name: Branch name (validated against naming rules).
        ref_repo: Ref repository for branch storage.
        object_repo: Object repository for reference resolution.
        prompter: Asked before an existing branch is overwritten.
        reference: What the branch should point at.  Defaults to HEAD.

    Returns:
        The digest the branch now points at, or None if the user declined
        to overwrite an existing branch.

    Raises:
        InvalidBranchNameError: If the name is invalid.
        InvalidReferenceError: If the reference cannot be resolved.
    """
    validate_branch_name(name)

    digest = resolve_reference(parse_reference(reference, ref_repo, object_repo), ref_repo)

    existing = ref_repo.get_branch(name)
    if existing is not None:
        question = f"Branch '{name}' already exists at {existing[:12]}. Overwrite it?"
        if not prompter.confirm(question, default=False):
            logger.info("Branch %s left unchanged", name)
            return None

    ref_repo.set_branch(name, digest)
    logger.debug("Branch %s -> %s", name, digest[:12])

    state = head_state(ref_repo)
    if isinstance(state, Detached) and state.digest == digest:
        apply_state(Attached(name), ref_repo)
        logger.info("Detached position %s is now tracked by %s", digest[:12], name)

    return digest


def list_branches(ref_repo: RefRepository) -> list[str]:
    """List all branch names, sorted."""
    return ref_repo.list_branches()
