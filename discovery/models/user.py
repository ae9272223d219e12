"""
User context: taste profile and exploration preference for one request.

Built from the preference collaborator's raw dict via UserContext.from_preferences(),
which absorbs out-of-range wildness (clamp) and malformed topic/blocked-domain data
(cold-start defaults) instead of failing the request.
"""

import logging
import math
from typing import Any, Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from ..errors import InvalidWildness, MalformedPreferences
from .candidate import normalize_domains
from .config import DiscoveryConfig, resolve_config

logger = logging.getLogger(__name__)


def clamp_wildness(value: Any, config: Optional[DiscoveryConfig] = None) -> Tuple[int, bool]:
    """
    Clamp wildness into [wildness_min, wildness_max].

    Returns (wildness, clamped). Raises InvalidWildness when value is not a finite number.
    """
    config = resolve_config(config)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidWildness(f"wildness must be a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidWildness(f"wildness must be finite, got {value}")
    w = int(round(value))
    if w < config.wildness_min:
        return config.wildness_min, True
    if w > config.wildness_max:
        return config.wildness_max, True
    return w, False


def _as_string_set(value: Any, field: str) -> FrozenSet[str]:
    """Coerce a list/set of strings; raise MalformedPreferences for anything else."""
    if value is None:
        raise MalformedPreferences(f"{field} missing")
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        raise MalformedPreferences(f"{field} must be a list of strings")
    out = set()
    for item in value:
        if not isinstance(item, str):
            raise MalformedPreferences(f"{field} contains non-string {item!r}")
        if item.strip():
            out.add(item.strip().lower())
    return frozenset(out)


class UserContext(BaseModel):
    """
    Preferences for one user at request time.

    preferred_topics empty = cold start. blocked_domains are normalized and are
    never relaxed by any fallback.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    preferred_topics: FrozenSet[str] = frozenset()
    wildness: int = 35
    blocked_domains: FrozenSet[str] = frozenset()

    # Recovery flags, set by from_preferences for observability
    wildness_clamped: bool = False
    preferences_malformed: bool = False

    @field_validator("blocked_domains", mode="before")
    @classmethod
    def _normalize_blocked(cls, v: Any) -> FrozenSet[str]:
        return normalize_domains(v or [])

    @field_validator("preferred_topics", mode="before")
    @classmethod
    def _normalize_topics(cls, v: Any) -> FrozenSet[str]:
        return frozenset(str(t).strip().lower() for t in (v or []) if str(t).strip())

    @property
    def cold_start(self) -> bool:
        return not self.preferred_topics

    def with_wildness(self, wildness: Any, config: Optional[DiscoveryConfig] = None) -> "UserContext":
        """Copy with a per-request wildness override, clamped like stored preferences."""
        config = resolve_config(config)
        try:
            w, clamped = clamp_wildness(wildness, config)
        except InvalidWildness as e:
            logger.warning(
                "[preferences] INVALID_WILDNESS user_id=%s value=%r error=%s; keeping %d",
                self.user_id, wildness, e, self.wildness,
            )
            return self.model_copy(update={"wildness_clamped": True})
        if clamped:
            logger.warning(
                "[preferences] WILDNESS_CLAMPED user_id=%s value=%r clamped=%d",
                self.user_id, wildness, w,
            )
        return self.model_copy(update={"wildness": w, "wildness_clamped": self.wildness_clamped or clamped})

    @classmethod
    def from_preferences(
        cls,
        user_id: str,
        raw: Optional[Dict[str, Any]],
        config: Optional[DiscoveryConfig] = None,
    ) -> "UserContext":
        """
        Build a context from the preference collaborator's raw record.

        Unknown users (raw is None) get the cold-start profile with default wildness.
        Missing or ill-typed preferred_topics / blocked_domains fall back to empty sets
        (MalformedPreferences, logged). Out-of-range wildness is clamped (InvalidWildness, logged).
        """
        config = resolve_config(config)
        if raw is None:
            return cls(user_id=user_id, wildness=config.default_wildness)

        malformed = False
        try:
            topics = _as_string_set(raw.get("preferred_topics"), "preferred_topics")
        except MalformedPreferences as e:
            logger.warning("[preferences] MALFORMED_PREFERENCES user_id=%s error=%s; cold start", user_id, e)
            topics = frozenset()
            malformed = True
        try:
            blocked = _as_string_set(raw.get("blocked_domains", []), "blocked_domains")
        except MalformedPreferences as e:
            # Salvage string entries; blocked domains are never dropped
            logger.warning("[preferences] MALFORMED_PREFERENCES user_id=%s error=%s", user_id, e)
            value = raw.get("blocked_domains")
            if isinstance(value, str):
                blocked = frozenset([value])
            elif isinstance(value, (list, tuple, set, frozenset)):
                blocked = frozenset(d for d in value if isinstance(d, str))
            else:
                blocked = frozenset()
            malformed = True

        clamped = False
        wildness_raw = raw.get("wildness")
        if wildness_raw is None:
            wildness = config.default_wildness
        else:
            try:
                wildness, clamped = clamp_wildness(wildness_raw, config)
            except InvalidWildness as e:
                logger.warning(
                    "[preferences] INVALID_WILDNESS user_id=%s value=%r error=%s; using default %d",
                    user_id, wildness_raw, e, config.default_wildness,
                )
                wildness, clamped = config.default_wildness, True
            else:
                if clamped:
                    logger.warning(
                        "[preferences] WILDNESS_CLAMPED user_id=%s value=%r clamped=%d",
                        user_id, wildness_raw, wildness,
                    )

        return cls(
            user_id=user_id,
            preferred_topics=topics,
            wildness=wildness,
            blocked_domains=blocked,
            wildness_clamped=clamped,
            preferences_malformed=malformed,
        )
