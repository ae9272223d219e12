"""
Content Store abstraction.

Implements the storage collaborator's candidate query for the discovery engine:
active-only, excluded ids and blocked domains removed, optional topic narrowing,
quality descending, bounded by limit.
Implementations: in-memory (tests, local), JSON file (local service).
"""

import json
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Union

from discovery.models import Candidate, ensure_candidates


def load_json_items(path: Path, key: str) -> List[Dict]:
    """Read a JSON list, or a dict holding the list under key."""
    with open(path) as f:
        data = json.load(f)
    items = data.get(key, []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError(f"{path}: expected a list of items under {key!r}")
    return items


class InMemoryContentStore:
    """
    Content store backed by a list of candidates held in memory.
    Used for tests and as the base of the JSON-file store.
    """

    def __init__(self, items: List[Union[Dict[str, Any], Candidate]]):
        self._candidates: List[Candidate] = sorted(
            ensure_candidates(items), key=lambda c: (-c.quality, c.id)
        )

    def __len__(self) -> int:
        return len(self._candidates)

    def fetch_candidates(
        self,
        excluded_ids: FrozenSet[str],
        blocked_domains: FrozenSet[str],
        limit: int,
        topics: Optional[FrozenSet[str]] = None,
    ) -> List[Candidate]:
        out: List[Candidate] = []
        for c in self._candidates:
            if not c.active or c.id in excluded_ids or c.domain in blocked_domains:
                continue
            if topics and not (c.topics & topics):
                continue
            out.append(c)
            if len(out) >= limit:
                break
        return out

    async def fetch_candidates_async(
        self,
        excluded_ids: FrozenSet[str],
        blocked_domains: FrozenSet[str],
        limit: int,
        topics: Optional[FrozenSet[str]] = None,
    ) -> List[Candidate]:
        """Async path: in-memory, same as fetch_candidates."""
        return self.fetch_candidates(excluded_ids, blocked_domains, limit, topics)


class JsonContentStore(InMemoryContentStore):
    """
    Content store backed by a JSON file (list of items, or {"content": [...]}).
    Used when CONTENT_JSON_PATH points at a local export of the content table.
    """

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)
        if not self._path.exists():
            raise FileNotFoundError(f"Content JSON not found: {self._path}")
        super().__init__(load_json_items(self._path, "content"))
