"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    """Health check with collaborator status."""
    state = get_state()
    snapshot = state.trending_source.current()
    content_count = len(state.content_store) if hasattr(state.content_store, "__len__") else None
    return {
        "status": "ok",
        "service": "discovery-engine",
        "content_items": content_count,
        "trending_items": len(snapshot) if snapshot is not None else 0,
        "trending_refreshed_at": snapshot.refreshed_at if snapshot is not None else None,
        "active_sessions": len(state.engine.sessions),
    }
