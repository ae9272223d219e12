"""
Engine configuration: scoring weights, exploration, diversity, and retrieval.

DiscoveryConfig defaults are defined here. The server may pass a dict
(e.g. from a JSON file named by DISCOVERY_CONFIG_PATH); from_dict() merges it with these defaults.
"""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class DiscoveryConfig(BaseModel):
    """Configuration for the discovery selection engine."""

    # -------------------------------------------------------------------------
    # Composite score weights (must sum to 1.0)
    # score = w1 * topic_affinity + w2 * quality + w3 * trending + w4 * novelty
    # -------------------------------------------------------------------------

    weight_topic_affinity: float = Field(0.25, ge=0.0, le=1.0)
    weight_quality: float = Field(0.25, ge=0.0, le=1.0)
    weight_trending: float = Field(0.25, ge=0.0, le=1.0)
    weight_novelty: float = Field(0.25, ge=0.0, le=1.0)

    # Topic affinity given to every candidate when the user has no preferred topics.
    cold_start_topic_affinity: float = Field(0.5, ge=0.0, le=1.0)

    # -------------------------------------------------------------------------
    # Exploration: wildness -> softmax temperature
    # tau = curve(wildness / wildness_max) * temperature_max
    # -------------------------------------------------------------------------

    # Temperature reached at maximum wildness. 5.0 keeps the top/bottom probability
    # ratio under ~1.07 for a 0.3 score spread, i.e. near-uniform.
    temperature_max: float = Field(5.0, gt=0.0)
    # "linear" maps wildness straight through; "quadratic" keeps low and mid
    # wildness closer to exploitation.
    temperature_curve: Literal["linear", "quadratic"] = "linear"

    wildness_min: int = 0
    wildness_max: int = 100
    # Used when the preference collaborator has no usable wildness for a user.
    default_wildness: int = 35

    # -------------------------------------------------------------------------
    # Diversity guard
    # -------------------------------------------------------------------------

    # K: number of most recently shown domains a pick may not repeat.
    diversity_window_size: int = Field(3, ge=0)
    # M: selection attempts before a violating pick is accepted anyway.
    diversity_max_attempts: int = Field(5, ge=1)

    # -------------------------------------------------------------------------
    # Candidate retrieval
    # -------------------------------------------------------------------------

    # Max candidates requested from the content store per request.
    candidate_limit: int = Field(200, ge=1)
    # Below this many candidates the retriever relaxes and then falls back.
    min_viable_candidates: int = Field(5, ge=1)
    # Cap per source domain inside the pool, applied in quality order.
    max_candidates_per_domain: int = Field(20, ge=1)
    # Narrow the primary fetch to the user's preferred topics (relaxed first on shortfall).
    topic_prefilter_enabled: bool = True
    # Timeout on the primary store fetch before degrading to the trending snapshot.
    fetch_timeout_seconds: float = Field(2.0, gt=0.0)
    # Max items taken from the cached trending snapshot.
    trending_fallback_limit: int = Field(50, ge=1)

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    # Sessions untouched for this long are discarded by the registry.
    session_idle_ttl_seconds: float = Field(1800.0, gt=0.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        total = (
            self.weight_topic_affinity
            + self.weight_quality
            + self.weight_trending
            + self.weight_novelty
        )
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")
        return self

    @model_validator(mode="after")
    def wildness_range_ordered(self):
        if self.wildness_min >= self.wildness_max:
            raise ValueError(
                f"wildness_min ({self.wildness_min}) must be below wildness_max ({self.wildness_max})"
            )
        if not self.wildness_min <= self.default_wildness <= self.wildness_max:
            raise ValueError(f"default_wildness {self.default_wildness} outside wildness range")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "DiscoveryConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "weights" in config_dict:
            w = config_dict["weights"]
            for short, field in (
                ("topic_affinity", "weight_topic_affinity"),
                ("quality", "weight_quality"),
                ("trending", "weight_trending"),
                ("novelty", "weight_novelty"),
            ):
                if short in w:
                    flat[field] = w[short]
        if "diversity" in config_dict:
            d = config_dict["diversity"]
            if "window_size" in d:
                flat["diversity_window_size"] = d["window_size"]
            if "max_attempts" in d:
                flat["diversity_max_attempts"] = d["max_attempts"]
        if "exploration" in config_dict:
            flat.update(config_dict["exploration"])
        if "sessions" in config_dict:
            s = config_dict["sessions"]
            if "idle_ttl_seconds" in s:
                flat["session_idle_ttl_seconds"] = s["idle_ttl_seconds"]
        if "retrieval" in config_dict:
            flat.update(config_dict["retrieval"])
        # Flat keys are accepted as well
        flat.update({k: v for k, v in config_dict.items() if not isinstance(v, dict)})
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = DiscoveryConfig()


def resolve_config(config: Optional["DiscoveryConfig"]) -> "DiscoveryConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
