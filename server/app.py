"""
Discovery service: FastAPI app factory.

Use: uvicorn server.app:app
Or:  from server import app
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_config
from .routes import register_routes
from .state import AppState, get_state, set_state

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_app(state: Optional[AppState] = None) -> FastAPI:
    """Build FastAPI app with CORS, routes, and startup. Pass state to inject collaborators."""
    config = state.config if state is not None else get_config()
    _configure_logging(config.log_level)
    if state is not None:
        set_state(state)

    app = FastAPI(
        title="Discovery Engine API",
        description="Personalized discovery selection: one surprising, relevant item per request",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("[server] UNHANDLED_ERROR path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"error": "internal_error"})

    @app.on_event("startup")
    def _load_state():
        ok, errors = config.validate()
        if not ok and state is None:
            for err in errors:
                logger.warning("[startup] CONFIG_INVALID %s", err)
        loaded = get_state()
        snapshot = loaded.trending_source.current()
        logger.info(
            "[startup] Discovery engine ready: trending=%d window=%d attempts=%d tau_max=%.2f",
            len(snapshot) if snapshot is not None else 0,
            loaded.discovery_config.diversity_window_size,
            loaded.discovery_config.diversity_max_attempts,
            loaded.discovery_config.temperature_max,
        )

    return app


app = create_app()
