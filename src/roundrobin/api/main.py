"""
FastAPI application entry point for RoundRobin.

This module exposes HTTP endpoints for the tournament front end: the
player roster, match results, and saved tournament brackets.  Errors are
reported as ``{"error": message}`` with a 400 status for bad input and 500
for storage failures.

To run the server:

    uvicorn roundrobin.api.main:app --reload

You can then access the automatic documentation at http://localhost:3000/docs
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import Settings, load_settings
from ..db.gateway import SQLGateway
from ..db.models import Match, Player, TournamentSnapshot
from ..db.session import Database
from ..engine.engine import Engine
from ..exceptions import RoundRobinError, StorageError
from .middleware import BodySizeLimitMiddleware

logger = logging.getLogger(__name__)


def get_engine(request: Request) -> Iterator[Engine]:
    """Build an engine around a fresh session for one request."""
    database: Database = request.app.state.database
    settings: Settings = request.app.state.settings
    with database.session() as session:
        yield Engine(SQLGateway(session), strict_match_validation=settings.strict_match_validation)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        settings = load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings)
        app.state.database = database
        try:
            database.open()
            if database.ping():
                logger.info("Database connected successfully")
        except StorageError:
            # Keep serving; each request reports the storage failure itself.
            logger.error("Database unavailable at startup")
        try:
            yield
        finally:
            database.close()

    app = FastAPI(title="RoundRobin API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RoundRobinError)
    async def handle_roundrobin_error(request: Request, exc: RoundRobinError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"{request.method} {request.url.path} error: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "invalid request") if errors else "invalid request"
        logger.warning(f"{request.method} {request.url.path} error: {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.get("/health", tags=["System"])
    def health_check(request: Request) -> Dict[str, str]:
        """Health check that also round-trips the database."""
        if not request.app.state.database.ping():
            raise StorageError("database unreachable")
        return {"status": "ok"}

    @app.get("/players", tags=["Players"], response_model=List[Player])
    def list_players(engine: Engine = Depends(get_engine)):
        return engine.list_players()

    @app.post("/players", tags=["Players"], response_model=Player)
    def upsert_player(payload: Any = Body(...), engine: Engine = Depends(get_engine)):
        """Create a player, or overwrite every field of the player with the given id."""
        return engine.upsert_player(payload)

    @app.delete("/players/{player_id}", tags=["Players"])
    def delete_player(player_id: int, engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
        engine.delete_player(player_id)
        return {"success": True, "message": "Player deleted"}

    @app.post("/matches", tags=["Matches"], response_model=Match)
    def record_match(payload: Any = Body(...), engine: Engine = Depends(get_engine)):
        """
        Append one match result.  When ``winner`` is omitted it is derived
        from the scores: player1 on a strictly higher score, else player2.
        """
        return engine.record_match(payload)

    @app.get("/matches", tags=["Matches"], response_model=List[Match])
    def list_matches(date: Optional[str] = None, engine: Engine = Depends(get_engine)):
        return engine.list_matches(date)

    @app.post("/tournaments", tags=["Tournaments"], response_model=TournamentSnapshot)
    def save_tournament(payload: Any = Body(...), engine: Engine = Depends(get_engine)):
        """Store a full tournament bracket. Every save appends a new row."""
        return engine.save_snapshot(payload)

    @app.get("/tournaments", tags=["Tournaments"], response_model=List[TournamentSnapshot])
    def load_tournaments(date: Optional[str] = None, engine: Engine = Depends(get_engine)):
        return engine.load_snapshots(date)

    return app


app = create_app()
