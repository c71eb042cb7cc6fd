"""Hero exception hierarchy.

All Hero-specific exceptions inherit from HeroError.  Each class carries
the process exit status the CLI reports when the error is fatal.
"""


class HeroError(Exception):
    """Base exception for all Hero errors."""

    exit_code = 1


# ---------------------------------------------------------------------------
# Environment errors
# ---------------------------------------------------------------------------


class RepositoryError(HeroError):
    """Raised when the repository directory is missing, unreadable, or unwritable."""

    exit_code = 1


class RepositoryNotFoundError(RepositoryError):
    """Raised when no repository can be found at or above a directory."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Not a hero repository (or any parent up to /): {path}. "
            "Run 'hero init' first."
        )


class RepositoryExistsError(RepositoryError):
    """Raised when init targets a directory that already holds a repository."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Repository already exists: {path}")


class ObjectNotFoundError(RepositoryError):
    """Raised when a staged blob is missing from the index directory."""

    def __init__(self, digest: str) -> None:
        self.digest = digest
        super().__init__(f"Staged blob not found: {digest}")


# ---------------------------------------------------------------------------
# Reference errors
# ---------------------------------------------------------------------------


class InvalidReferenceError(HeroError):
    """Raised when a reference cannot be resolved to a commit."""

    exit_code = 2


class CommitNotFoundError(InvalidReferenceError):
    """Raised when a commit digest lookup fails."""

    def __init__(self, digest: str) -> None:
        self.digest = digest
        super().__init__(f"Commit not found: {digest}")


class BranchNotFoundError(InvalidReferenceError):
    """Raised when a branch lookup fails."""

    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(f"Branch not found: {branch_name}")


class AmbiguousPrefixError(InvalidReferenceError):
    """Raised when a digest prefix matches multiple commits."""

    def __init__(self, prefix: str, candidates: list[str]) -> None:
        self.prefix = prefix
        self.candidates = candidates
        candidate_str = ", ".join(c[:12] + "..." for c in candidates[:5])
        super().__init__(
            f"Ambiguous prefix '{prefix}'. Matches: {candidate_str}"
        )


class InvalidBranchNameError(InvalidReferenceError):
    """Raised when a branch name violates naming rules."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid branch name '{name}': {reason}")


# ---------------------------------------------------------------------------
# Staging errors
# ---------------------------------------------------------------------------


class StageFailedError(HeroError):
    """Raised when a file cannot be staged.

    The whole index has been emptied by the time this is raised; the
    caller must re-add the files it wants staged.
    """

    exit_code = 3

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(
            f"Could not stage {path}: {reason}. "
            "Index emptied; please re-add the appropriate files."
        )


# ---------------------------------------------------------------------------
# Commit format errors
# ---------------------------------------------------------------------------


class CommitFormatError(HeroError):
    """Raised when a commit blob does not follow the commit grammar."""

    exit_code = 4


class TruncatedCommitError(CommitFormatError):
    """Raised when a commit blob ends before a declared field or payload."""

    def __init__(self, offset: int, wanted: str) -> None:
        self.offset = offset
        self.wanted = wanted
        super().__init__(f"Commit truncated at byte {offset}: expected {wanted}")


# ---------------------------------------------------------------------------
# Merge errors
# ---------------------------------------------------------------------------


class MergeError(HeroError):
    """Base exception for all merge errors."""

    exit_code = 5


class DetachedHeadError(MergeError):
    """Raised when merging while HEAD is detached."""

    def __init__(self) -> None:
        super().__init__(
            "Cannot merge in detached HEAD state. "
            "Use 'hero checkout <branch>' to return to a branch."
        )


class NothingToMergeError(MergeError):
    """Raised when the other side is already contained in the current head."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"'{reference}' is already up-to-date")


# ---------------------------------------------------------------------------
# Migration errors
# ---------------------------------------------------------------------------


class MigrationError(HeroError):
    """Raised when a repository layout cannot be upgraded."""

    exit_code = 6
