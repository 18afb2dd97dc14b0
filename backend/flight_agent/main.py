import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flight_agent.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(os.environ.get("LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
_LOG_DIR.mkdir(parents=True, exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "flight_agent.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from flight_agent.errors import FlightSearchError, InvalidOffersError, InvalidWeightsError, LLMUnavailableError
from flight_agent.routers import chat, preferences, search

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield

    # Shutdown
    from flight_agent.services.flight_search_client import flight_search_client
    from flight_agent.services.history_service import history_service

    await flight_search_client.close()
    await history_service.store.close()
    logger.info("Flight search client and chat store closed")


app = FastAPI(
    title="AI Flight Agent",
    description="Natural-language flight search with multi-criteria ranking",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FlightSearchError)
async def flight_search_error_handler(request: Request, exc: FlightSearchError):
    logger.error(f"Flight search failed on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": f"Flight search failed: {exc}"})


@app.exception_handler(LLMUnavailableError)
async def llm_error_handler(request: Request, exc: LLMUnavailableError):
    logger.error(f"LLM unavailable on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(InvalidOffersError)
async def invalid_offers_handler(request: Request, exc: InvalidOffersError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(InvalidWeightsError)
async def invalid_weights_handler(request: Request, exc: InvalidWeightsError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(search.router, prefix="/api/search", tags=["search"])
app.include_router(preferences.router, prefix="/api/preferences", tags=["preferences"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "flight-agent"}
