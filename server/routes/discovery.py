"""Discovery session and next-pick endpoints."""

import logging
import uuid

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from discovery import NoContentAvailable, UserContext

from ..models import (
    CreateSessionRequest,
    DiscoveryResponse,
    NextDiscoveryRequest,
    NoContentResponse,
    SessionCreated,
    SessionSnapshot,
)
from ..state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


async def _user_context(user_id: str) -> UserContext:
    """Fetch raw preferences and turn them into a UserContext (cold start for unknown users)."""
    state = get_state()
    raw = await state.preference_store.get_preferences_async(user_id)
    return UserContext.from_preferences(user_id, raw, state.discovery_config)


@router.post("/sessions", response_model=SessionCreated)
async def create_session(request: CreateSessionRequest):
    """Start a discovery session for a user."""
    state = get_state()
    session_id = str(uuid.uuid4())[:8]
    tracker = state.engine.sessions.get_or_create(request.user_id, session_id)
    snapshot = tracker.snapshot()
    return SessionCreated(session_id=session_id, user_id=request.user_id, created_at=snapshot.created_at)


@router.post(
    "/next",
    response_model=DiscoveryResponse,
    responses={404: {"model": NoContentResponse}},
)
async def next_discovery(request: NextDiscoveryRequest):
    """Select the next discovery for a user within a session."""
    state = get_state()
    user = await _user_context(request.user_id)
    if request.wildness is not None:
        user = user.with_wildness(request.wildness, state.discovery_config)

    try:
        result = await state.engine.select_next(
            user,
            request.session_id,
            extra_excluded_ids=request.excluded_ids,
        )
    except NoContentAvailable as e:
        body = NoContentResponse(cause=e.cause)
        return JSONResponse(status_code=404, content=body.model_dump())

    candidate = result.pick.candidate
    return DiscoveryResponse(
        candidate_id=candidate.id,
        domain=candidate.domain,
        title=candidate.title,
        url=candidate.url,
        score=round(result.pick.score, 4),
        breakdown=result.breakdown(),
        reason=result.reason,
        source=result.source,
        attempts=result.attempts,
        diversity_violation=result.diversity_violation,
        wildness=result.wildness,
    )


@router.get("/sessions/{user_id}/{session_id}", response_model=SessionSnapshot)
async def get_session(user_id: str, session_id: str):
    state = get_state()
    tracker = state.engine.sessions.get(user_id, session_id)
    if tracker is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    snapshot = tracker.snapshot()
    return SessionSnapshot(
        user_id=snapshot.user_id,
        session_id=snapshot.session_id,
        created_at=snapshot.created_at,
        shown_ids=sorted(snapshot.shown_ids),
        recent_domains=snapshot.recent_domains,
    )


@router.delete("/sessions/{user_id}/{session_id}")
async def end_session(user_id: str, session_id: str):
    state = get_state()
    final = state.engine.end_session(user_id, session_id)
    if final is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {"session_id": session_id, "shown_count": len(final.shown_ids)}


@router.post("/trending/refresh")
async def refresh_trending():
    """Reload the trending snapshot exported by the aggregation job."""
    state = get_state()
    snapshot = state.trending_source.refresh()
    return {
        "items": len(snapshot) if snapshot is not None else 0,
        "refreshed_at": snapshot.refreshed_at if snapshot is not None else None,
    }
