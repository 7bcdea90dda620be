"""
Media Authenticity Consensus API: application entry point.

Bootstraps FastAPI, wires CORS and error handlers, registers routers and
manages the Firebase / Redis / HTTP-session lifecycle.
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load environment variables before settings are read
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

from consensus_engine.config import settings  # noqa: E402
from consensus_engine.integrations import firebase, http_client, redis_client  # noqa: E402
from consensus_engine.services.orchestrator import Orchestrator  # noqa: E402
from consensus_engine.api.analysis import router as analysis_router  # noqa: E402
from consensus_engine.api.system import router as system_router  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    firebase.initialize()
    redis_client.initialize()
    await http_client.initialize()
    app.state.orchestrator = Orchestrator.from_settings(settings)
    logger.info("[STARTUP] Consensus engine ready")

    yield

    await http_client.close()
    logger.info("[SHUTDOWN] Consensus engine stopped")


app = FastAPI(title="Media Authenticity Consensus API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error(f"[ERROR HANDLER] {request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    else:
        logger.info(f"[ERROR HANDLER] {request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"[ERROR HANDLER] Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(system_router)
app.include_router(analysis_router)


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("consensus_engine.main:app", host="0.0.0.0", port=port, log_level="info")
