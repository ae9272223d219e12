"""Backing logic: collaborator adapters for content, preferences, and trending."""

from .content_store import InMemoryContentStore, JsonContentStore
from .preference_store import InMemoryPreferenceStore, JsonPreferenceStore, PreferenceStore
from .trending_source import JsonTrendingSource

__all__ = [
    "InMemoryContentStore",
    "InMemoryPreferenceStore",
    "JsonContentStore",
    "JsonPreferenceStore",
    "JsonTrendingSource",
    "PreferenceStore",
]
