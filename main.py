"""
PeerMatch Backend API Server

Scores student/peer pairings, ranks candidate tutors, runs bulk greedy
matching and tracks tutoring sessions.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.handlers import register_exception_handlers
from app.api.routes import matching, peers, sessions, students
from app.config import LOG_LEVEL
from app.database import engine

API_VERSION = "1.0.0"

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("PeerMatch API %s starting", API_VERSION)
    yield
    await engine.dispose()
    logger.info("PeerMatch API stopped, database pool disposed")


app = FastAPI(
    title="PeerMatch API",
    description="Peer tutoring match engine",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# Open CORS for local frontends; restrict origins when deployed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def time_requests(request: Request, call_next):
    """Log method, path, status and duration of every request"""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %d in %.2fms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


register_exception_handlers(app)

for module in (students, peers, matching, sessions):
    app.include_router(module.router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe with version info"""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
        "service": "peermatch-api"
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": "PeerMatch API",
        "version": API_VERSION,
        "docs": "/api/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True, log_level=LOG_LEVEL.lower())
