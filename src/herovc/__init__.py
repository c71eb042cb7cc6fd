"""Hero: a minimal version-control engine.

Content-addressed commits of a file tree, a staging index, branches, and
a HEAD that is either attached to a branch or detached at a commit.
"""

from herovc._version import __version__

# Core entry point
from herovc.repo import CommitResult, Repository

# Commit and reference types
from herovc.models.commit import Commit, FileEntry, LogEntry
from herovc.models.reference import (
    Attached,
    CurrentPosition,
    Detached,
    HeadState,
    Named,
    Raw,
    Reference,
)

# Configuration
from herovc.models.config import LAYOUT_VERSION, RepoConfig

# Branch and merge models
from herovc.models.branch import BranchInfo
from herovc.models.merge import MergeResult, Resolution

# Protocols
from herovc.protocols import Prompter, StaticPrompter

# Codec and hashing
from herovc.engine.codec import decode_commit, encode_commit
from herovc.engine.hashing import digest

# Operation results
from herovc.operations.history import StatusInfo
from herovc.operations.navigation import CheckoutResult

# Exceptions
from herovc.exceptions import (
    AmbiguousPrefixError,
    BranchNotFoundError,
    CommitFormatError,
    CommitNotFoundError,
    DetachedHeadError,
    HeroError,
    InvalidBranchNameError,
    InvalidReferenceError,
    MergeError,
    MigrationError,
    NothingToMergeError,
    ObjectNotFoundError,
    RepositoryError,
    RepositoryExistsError,
    RepositoryNotFoundError,
    StageFailedError,
    TruncatedCommitError,
)

__all__ = [
    "__version__",
    # Core
    "Repository",
    "CommitResult",
    # Models
    "Commit",
    "FileEntry",
    "LogEntry",
    "BranchInfo",
    "MergeResult",
    "Resolution",
    "StatusInfo",
    "CheckoutResult",
    # References
    "Reference",
    "CurrentPosition",
    "Named",
    "Raw",
    "HeadState",
    "Attached",
    "Detached",
    # Configuration
    "RepoConfig",
    "LAYOUT_VERSION",
    # Protocols
    "Prompter",
    "StaticPrompter",
    # Codec
    "encode_commit",
    "decode_commit",
    "digest",
    # Exceptions
    "HeroError",
    "RepositoryError",
    "RepositoryNotFoundError",
    "RepositoryExistsError",
    "ObjectNotFoundError",
    "InvalidReferenceError",
    "CommitNotFoundError",
    "BranchNotFoundError",
    "AmbiguousPrefixError",
    "InvalidBranchNameError",
    "StageFailedError",
    "CommitFormatError",
    "TruncatedCommitError",
    "MergeError",
    "DetachedHeadError",
    "NothingToMergeError",
    "MigrationError",
]
