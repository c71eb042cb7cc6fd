"""Branch domain model for Hero.

BranchInfo is the SDK-facing model returned when listing branches.
"""

from __future__ import annotations

from pydantic import BaseModel


class BranchInfo(BaseModel):
    """SDK-facing branch information model.

    Returned by Repository.list_branches() and Repository.branch().
    """

    name: str
    digest: str
    is_current: bool = False
