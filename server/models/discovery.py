"""Discovery-related Pydantic models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    user_id: str = Field(min_length=1)


class SessionCreated(BaseModel):
    session_id: str
    user_id: str
    created_at: str


class NextDiscoveryRequest(BaseModel):
    user_id: str = Field(min_length=1)
    session_id: str = Field(min_length=1)
    # Per-request override of the stored wildness; clamped, never rejected
    wildness: Optional[float] = None
    # Extra exclusions from the history collaborator (e.g. permanently skipped)
    excluded_ids: List[str] = []


class DiscoveryResponse(BaseModel):
    candidate_id: str
    domain: str
    title: Optional[str] = ""
    url: Optional[str] = ""
    score: float
    breakdown: Dict[str, float]
    reason: str
    source: str
    attempts: int
    diversity_violation: bool
    wildness: int


class NoContentResponse(BaseModel):
    error: str = "no_content"
    cause: str
    message: str = "Nothing new right now"


class SessionSnapshot(BaseModel):
    user_id: str
    session_id: str
    created_at: str
    shown_ids: List[str]
    recent_domains: List[str]
