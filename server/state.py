"""Application state: collaborator adapters and the discovery engine."""

import logging
from typing import Any, Optional

from discovery import CandidateRetriever, DiscoveryConfig, DiscoveryEngine, RandomSource
from discovery import default_random_source

from .config import ServerConfig, get_config
from .services import (
    InMemoryPreferenceStore,
    JsonContentStore,
    JsonPreferenceStore,
    JsonTrendingSource,
)

logger = logging.getLogger(__name__)


class AppState:
    """Global application state."""

    def __init__(
        self,
        config: ServerConfig,
        content_store: Optional[Any] = None,
        preference_store: Optional[Any] = None,
        trending_source: Optional[JsonTrendingSource] = None,
        discovery_config: Optional[DiscoveryConfig] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.config = config
        self.discovery_config = discovery_config if discovery_config is not None else config.load_discovery_config()

        # Collaborators: JSON-backed unless injected
        self.content_store = (
            content_store if content_store is not None else JsonContentStore(config.content_json_path)
        )
        logger.info("[startup] Content store: %s", type(self.content_store).__name__)
        self.preference_store = (
            preference_store if preference_store is not None else self._create_preference_store(config)
        )
        self.trending_source = (
            trending_source if trending_source is not None else JsonTrendingSource(config.trending_json_path)
        )
        if self.trending_source.current() is None:
            self.trending_source.refresh()

        retriever = CandidateRetriever(
            self.content_store,
            trending=self.trending_source.current,
            config=self.discovery_config,
        )
        self.engine = DiscoveryEngine(
            retriever,
            config=self.discovery_config,
            rng=rng if rng is not None else default_random_source(config.random_seed),
        )

    def _create_preference_store(self, config: ServerConfig) -> Any:
        """JSON preference store when a path is configured, else empty (everyone cold-starts)."""
        if config.preferences_json_path:
            return JsonPreferenceStore(config.preferences_json_path)
        logger.warning("[startup] PREFERENCES_JSON_PATH not set; all users start cold")
        return InMemoryPreferenceStore()


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Install (or clear) the process-wide state; used by the app factory and tests."""
    global _state
    _state = state
