"""Statistics shapes returned by StatsService."""

from typing import Dict

from pydantic import Field

from notestash.schemas.common import CamelModel


class StatsResponse(CamelModel):
    """
    Per-user note statistics.

    by_priority always carries all three levels, zero-filled.
    """
    total_notes: int = Field(description="Number of notes the user owns")
    high_priority: int = Field(description="Notes with priority High")
    categories: int = Field(description="Number of distinct categories in use")
    by_category: Dict[str, int] = Field(default_factory=dict)
    by_priority: Dict[str, int] = Field(default_factory=dict)


class GlobalStats(CamelModel):
    """Record counts across every partition."""
    users: int
    notes: int
