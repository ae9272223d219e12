"""Stats endpoint."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/stats")
def get_stats():
    """Selection counters and degraded-path counts since startup."""
    state = get_state()
    stats = state.engine.stats.model_dump()
    stats["active_sessions"] = len(state.engine.sessions)
    return stats
