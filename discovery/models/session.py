"""
Session model: ephemeral per-session state owned by the engine.

shown_ids only grows; recent_domains is the FIFO diversity window (oldest first).
"""

from typing import List, Set

from pydantic import BaseModel, Field


class SessionState(BaseModel):
    """State of one discovery session. Discarded at session end."""

    user_id: str
    session_id: str
    window_size: int = 3
    shown_ids: Set[str] = Field(default_factory=set)
    recent_domains: List[str] = Field(default_factory=list)
    created_at: str
