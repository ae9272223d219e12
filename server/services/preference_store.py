"""
Preference Store abstraction.

Supplies the raw preference record (preferred_topics, wildness, blocked_domains)
for a user id. The engine turns it into a UserContext and absorbs malformed data.
Implementations: in-memory, JSON file.
"""

import json
from pathlib import Path
from typing import Dict, Optional, Protocol, Union


class PreferenceStore(Protocol):
    """Protocol for preference lookup. Returns None for unknown users."""

    async def get_preferences_async(self, user_id: str) -> Optional[Dict]:
        ...


class InMemoryPreferenceStore:
    """Preference store over a dict of user_id -> record."""

    def __init__(self, records: Optional[Dict[str, Dict]] = None):
        self._records: Dict[str, Dict] = dict(records or {})

    def get_preferences(self, user_id: str) -> Optional[Dict]:
        return self._records.get(user_id)

    async def get_preferences_async(self, user_id: str) -> Optional[Dict]:
        return self.get_preferences(user_id)


class JsonPreferenceStore(InMemoryPreferenceStore):
    """
    Preference store backed by a JSON file.

    Accepts {"users": [{"user_id": ..., ...}]}, a bare list of such records,
    or a dict keyed by user id.
    """

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)
        records: Dict[str, Dict] = {}
        if self._path.exists():
            with open(self._path) as f:
                data = json.load(f)
            users = data.get("users", data) if isinstance(data, dict) else data
            if isinstance(users, list):
                for u in users:
                    uid = u.get("user_id") or u.get("id")
                    if uid:
                        records[uid] = u
            elif isinstance(users, dict):
                for uid, u in users.items():
                    records[uid] = u
        super().__init__(records)
