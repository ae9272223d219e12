"""
Error kinds for the discovery selection core.

Only NoContentAvailable crosses the engine boundary; every other condition is
absorbed by the stage that detects it and logged as a degraded path.
"""

from typing import Optional


class DiscoveryError(Exception):
    """Base class for discovery core errors."""


class NoContentAvailable(DiscoveryError):
    """
    The eligible pool is empty after every fallback relaxation.

    cause is "exhausted" when retrieval worked but nothing is eligible, or
    "retrieval_timeout" when both the primary fetch and the trending fallback failed.
    """

    def __init__(
        self,
        user_id: str,
        session_id: Optional[str] = None,
        cause: str = "exhausted",
    ):
        self.user_id = user_id
        self.session_id = session_id
        self.cause = cause
        super().__init__(
            f"No content available for user={user_id!r} session={session_id!r} ({cause})"
        )


class RetrievalTimeout(DiscoveryError):
    """The primary fetch and the trending fallback both failed to produce a pool."""


class InvalidWildness(DiscoveryError, ValueError):
    """Wildness outside its declared range, or not a number at all."""


class MalformedPreferences(DiscoveryError, ValueError):
    """Preferred topics or blocked domains missing or of the wrong shape."""


class EmptyCandidatePool(DiscoveryError, ValueError):
    """The exploration controller was handed no candidates (caller contract violation)."""
