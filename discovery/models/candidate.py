"""
Candidate model: a read-only snapshot of one content item supplied by the content store.

Gauges (quality, trending) are precomputed upstream; this core never mutates them.
Built from store dicts via Candidate.model_validate(d) or ensure_candidates().
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_domain(domain: str) -> str:
    """Lowercase a domain and strip a leading 'www.' so blocks match regardless of spelling."""
    d = (domain or "").strip().lower()
    if d.startswith("www."):
        d = d[4:]
    return d


def normalize_domains(domains: Iterable[str]) -> FrozenSet[str]:
    return frozenset(normalize_domain(d) for d in domains if d and normalize_domain(d))


class Candidate(BaseModel):
    """
    Content item eligible for discovery.

    Only id, domain, topics, quality, trending and active matter to selection;
    display fields (title, url) ride along for the response.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    domain: str
    topics: FrozenSet[str] = frozenset()
    quality: float = Field(0.5, ge=0.0, le=1.0)
    trending: float = Field(0.0, ge=0.0, le=1.0)
    active: bool = True
    title: Optional[str] = ""
    url: Optional[str] = ""

    @field_validator("domain", mode="before")
    @classmethod
    def _normalize_domain(cls, v: Any) -> str:
        return normalize_domain(str(v or ""))

    @field_validator("topics", mode="before")
    @classmethod
    def _normalize_topics(cls, v: Any) -> FrozenSet[str]:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        return frozenset(str(t).strip().lower() for t in v if str(t).strip())


def ensure_candidates(
    items: List[Union[Dict[str, Any], "Candidate"]],
) -> List["Candidate"]:
    """Convert list of dicts or Candidates to list of Candidate models for the pipeline."""
    return [
        Candidate.model_validate(c) if isinstance(c, dict) else c
        for c in items
    ]
