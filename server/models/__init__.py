"""Pydantic request/response models for the API."""

from .discovery import (
    CreateSessionRequest,
    DiscoveryResponse,
    NextDiscoveryRequest,
    NoContentResponse,
    SessionCreated,
    SessionSnapshot,
)

__all__ = [
    "CreateSessionRequest",
    "DiscoveryResponse",
    "NextDiscoveryRequest",
    "NoContentResponse",
    "SessionCreated",
    "SessionSnapshot",
]
