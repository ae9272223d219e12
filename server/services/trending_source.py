"""
Trending snapshot source.

The trending set is computed elsewhere; this service only loads the latest export
and hands the engine a read-only TrendingSnapshot. refresh() swaps the snapshot
atomically; readers never see a partially loaded one.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from discovery.models import TrendingSnapshot

from .content_store import load_json_items

logger = logging.getLogger(__name__)


class JsonTrendingSource:
    """Holds the current TrendingSnapshot loaded from a JSON file ({"trending": [...]} or a list)."""

    def __init__(self, path: Optional[Union[Path, str]] = None):
        self._path = Path(path) if path else None
        self._snapshot: Optional[TrendingSnapshot] = None

    def current(self) -> Optional[TrendingSnapshot]:
        """The snapshot handed to the retriever; None until one has loaded."""
        return self._snapshot

    def replace(self, snapshot: TrendingSnapshot) -> None:
        self._snapshot = snapshot

    def refresh(self) -> Optional[TrendingSnapshot]:
        """Reload from disk. Keeps the previous snapshot if the file is missing."""
        if self._path is None or not self._path.exists():
            logger.warning("[trending] TRENDING_SOURCE_MISSING path=%s", self._path)
            return self._snapshot
        items = load_json_items(self._path, "trending")
        refreshed_at = datetime.fromtimestamp(self._path.stat().st_mtime, tz=timezone.utc).isoformat()
        self._snapshot = TrendingSnapshot.from_items(items, refreshed_at=refreshed_at)
        logger.info("[trending] TRENDING_REFRESHED items=%d refreshed_at=%s", len(self._snapshot), refreshed_at)
        return self._snapshot
