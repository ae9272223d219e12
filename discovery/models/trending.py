"""
Trending snapshot: the only long-lived data the engine reads.

Refreshed by an external aggregation process and handed to the retriever as a
read-only value; the engine never mutates or refreshes it.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .candidate import Candidate, ensure_candidates


class TrendingSnapshot(BaseModel):
    """Globally trending candidates, highest trending gauge first."""

    model_config = ConfigDict(frozen=True)

    candidates: Tuple[Candidate, ...] = ()
    refreshed_at: Optional[str] = None

    @classmethod
    def from_items(
        cls,
        items: List[Union[Dict[str, Any], Candidate]],
        refreshed_at: Optional[str] = None,
    ) -> "TrendingSnapshot":
        candidates = sorted(ensure_candidates(items), key=lambda c: (-c.trending, c.id))
        return cls(candidates=tuple(candidates), refreshed_at=refreshed_at)

    def __len__(self) -> int:
        return len(self.candidates)
