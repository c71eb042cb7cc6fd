"""Configuration models for Hero.

RepoConfig holds per-repository settings.  Defaults describe the current
on-disk layout; nothing is persisted, the config is supplied per process.
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator

# Current on-disk layout version (see herovc.migrate).
LAYOUT_VERSION = "0.03.0"

REPO_DIR_NAME = ".hero"


class RepoConfig(BaseModel):
    """Per-repository configuration."""

    repo_dir_name: str = REPO_DIR_NAME
    default_branch: str = "main"
    commit_cache_maxsize: int = 64
    prune_removed_files: bool = True
    verify_objects: bool = True

    @field_validator("commit_cache_maxsize")
    @classmethod
    def _positive_cache(cls, v: int) -> int:
        if v < 1:
            raise ValueError("commit_cache_maxsize must be at least 1")
        return v
