import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.routers import ws
from app.services.lobby import get_lobby, reset_lobby

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Fog Duel server")
    logger.debug("Debug mode: %s", settings.DEBUG)

    lobby = get_lobby()
    logger.info("Lobby initialized")

    yield

    # Shutdown: drop pending games and their waiting connections
    logger.info("Shutting down Fog Duel server")
    await lobby.shutdown()
    reset_lobby()
    logger.info("Lobby cleanup complete")


app = FastAPI(
    title="Fog Duel",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.debug("CORS configured with origins: %s", settings.CORS_ORIGINS)

app.include_router(ws.router)
logger.debug("Routers registered: /game, /game/{code}")


@app.get("/health")
def health():
    return {"status": "healthy"}


# Mounted last so it does not shadow the routes above
if settings.STATIC_DIR:
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
    logger.debug("Serving static files from %s", settings.STATIC_DIR)
