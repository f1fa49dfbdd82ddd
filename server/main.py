"""FastAPI server for the card-matching game."""

import logging
import random
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog import CardCatalog
from config import config
from errors import GameError
from logging_config import setup_logging
from middleware.request_id import RequestIDMiddleware
from players import PlayerRegistry
from routers.games import router as games_router
from routers.health import router as health_router
from routers.packs import router as packs_router
from routers.players import router as players_router
from session import SessionManager

logger = logging.getLogger(__name__)


def create_app(
    catalog: Optional[CardCatalog] = None,
    registry: Optional[PlayerRegistry] = None,
    sessions: Optional[SessionManager] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        catalog: Card catalog to serve. When omitted, one is created for
            config.CARDS_FILE and loaded at startup.
        registry: Player registry (new empty registry if omitted).
        sessions: Session manager (built from catalog and registry if omitted).

    Returns:
        FastAPI application instance.
    """
    load_catalog = catalog is None
    catalog = catalog or CardCatalog(config.CARDS_FILE)
    registry = registry or PlayerRegistry()
    if sessions is None:
        rng = random.Random(config.SHUFFLE_SEED) if config.SHUFFLE_SEED is not None else None
        sessions = SessionManager(catalog, registry, rng=rng)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the card catalog on startup."""
        if load_catalog:
            count = catalog.load()
            logger.info(
                f"Loaded {count} cards in {len(catalog.get_all_packs())} packs "
                f"from {catalog.cards_file}"
            )
        logger.info(f"Card game server started (environment={config.ENVIRONMENT})")
        yield
        logger.info(f"Shutdown with {len(sessions.get_all())} session(s) discarded")

    app = FastAPI(
        title="Card Game",
        debug=config.DEBUG,
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.catalog = catalog
    app.state.registry = registry
    app.state.sessions = sessions

    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError):
        logger.debug(f"{type(exc).__name__}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            messages.append(f"{location}: {error.get('msg')}")
        return JSONResponse(status_code=400, content={"error": "; ".join(messages)})

    app.include_router(health_router)
    app.include_router(packs_router)
    app.include_router(players_router)
    app.include_router(games_router)

    return app


def run():
    """Run the server using uvicorn."""
    import uvicorn

    setup_logging(level=config.LOG_LEVEL, environment=config.ENVIRONMENT)
    logger.info(f"Starting card game server on {config.HOST}:{config.PORT}")
    logger.info(f"Debug mode: {config.DEBUG}")

    uvicorn.run(
        create_app(),
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
