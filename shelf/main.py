"""Shelf Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shelf import __version__, i18n
from shelf.api.albums import router as albums_router
from shelf.config import settings
from shelf.database import init_db
from shelf.errors import AlbumError
from shelf.ws.sync import websocket_sync

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and database on startup."""
    configure_logging()
    init_db()
    logger.info("server: %s %s started", settings.app_name, __version__)
    yield
    logger.info("server: shutting down")


app = FastAPI(
    title="Shelf",
    description="Albums for a personal media library",
    version=__version__,
    lifespan=lifespan,
)

# CORS - allow all origins for local network usage
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AlbumError)
async def album_error_handler(request: Request, exc: AlbumError):
    if exc.status_code >= 500:
        logger.error("api: %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"code": exc.status_code, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.debug("api: bad request %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"code": 400, "error": i18n.msg("err_bad_request")})


# --- Register API routers ---
API_PREFIX = "/api/v1"

app.include_router(albums_router, prefix=API_PREFIX)


# --- WebSocket endpoints ---
@app.websocket("/ws")
async def ws_endpoint(ws: WebSocket, token: str = Query(default="")):
    await websocket_sync(ws, token or None)


@app.get("/")
def root():
    """Health check / server info."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
    }


@app.get("/api/v1/health")
def health():
    return {"status": "ok"}


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
