from __future__ import annotations

import time
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from api.routes import sessions as session_routes
from api.services.sessions import SessionStore
from reptrack import __version__
from reptrack.config import SessionConfig


def create_app(
    config: Optional[SessionConfig] = None,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    app = FastAPI(
        title="Rep Counter API",
        description="Counts exercise repetitions from client-side BlazePose keypoints.",
        version=__version__,
    )
    app.state.sessions = SessionStore(config, clock=clock)
    app.include_router(session_routes.router)

    @app.get("/", include_in_schema=False)
    async def redirect_to_docs() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    return app


app = create_app()
