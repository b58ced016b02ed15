"""
FastAPI app entrypoint.

The chat store and generation client are built in the lifespan (open on
start, close on shutdown) and injected into the ChatService on app.state.
create_app() accepts prebuilt collaborators so tests can swap them.
"""
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from companion.api.deps import require_generation_config
from companion.api.routes import chat, sessions
from companion.config import settings
from companion.core.constants import MSG_CHAT_FAILED, MSG_EMPTY_MESSAGE, MSG_INVALID_REQUEST, MSG_REQUEST_FAILED
from companion.core.errors import CompanionError, ConfigurationError, STATUS_BAD_REQUEST, STATUS_INTERNAL_ERROR
from companion.services.chat_service import ChatService
from companion.services.chat_store import ChatStore
from companion.services.generation import GenerationClient
from companion.services.types import Mode, Mood

if settings.gemini_api_key:
    # pydantic-ai's Google provider reads the key from the environment.
    os.environ.setdefault("GEMINI_API_KEY", settings.gemini_api_key)
    os.environ.setdefault("GOOGLE_API_KEY", settings.gemini_api_key)

logger = logging.getLogger(__name__)

if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

CHAT_PATH = "/api/chat"

_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _all_cors_origins() -> list[str]:
    extra = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return _cors_origins + extra


async def _companion_error_handler(request: Request, exc: CompanionError) -> JSONResponse:
    if isinstance(exc, ConfigurationError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    if exc.status_code >= STATUS_INTERNAL_ERROR:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


def _chat_fallback(status_code: int, response: str, mode: str | None = None) -> JSONResponse:
    """Canned reply in the chat shape: neutral mood, the client's mode when it sent a known one."""
    return JSONResponse(
        status_code=status_code,
        content={
            "response": response,
            "mood": Mood.NEUTRAL.value,
            "mode": (Mode.parse(mode) or Mode.FRIEND).value,
        },
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed body (not JSON, wrong types, missing): a 400 in the route's own shape.
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    if request.url.path == CHAT_PATH:
        body = exc.body if isinstance(exc.body, dict) else {}
        mode = body.get("mode")
        return _chat_fallback(STATUS_BAD_REQUEST, MSG_EMPTY_MESSAGE, mode if isinstance(mode, str) else None)
    return JSONResponse(status_code=STATUS_BAD_REQUEST, content={"success": False, "error": MSG_INVALID_REQUEST})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if request.url.path == CHAT_PATH:
        return _chat_fallback(STATUS_INTERNAL_ERROR, MSG_CHAT_FAILED)
    return JSONResponse(status_code=STATUS_INTERNAL_ERROR, content={"success": False, "error": MSG_REQUEST_FAILED})


def create_app(store: ChatStore | None = None, generator: GenerationClient | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        chat_store = store or ChatStore(settings.database_url, create_all=settings.db_create_all)
        chat_store.open()
        app.state.chat_service = ChatService(chat_store, generator or GenerationClient())
        logger.info(
            "%s backend ready (model=%s, gemini key loaded: %s)",
            settings.assistant_name,
            settings.ai_model,
            "yes" if settings.gemini_ready else "no",
        )
        try:
            yield
        finally:
            chat_store.close()

    app = FastAPI(title=f"{settings.assistant_name} companion", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_all_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CompanionError, _companion_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    gated = [Depends(require_generation_config)]
    app.include_router(chat.router, prefix="/api", tags=["chat"], dependencies=gated)
    app.include_router(sessions.router, prefix="/api", tags=["sessions"], dependencies=gated)

    @app.get("/api/health", tags=["health"])
    def health() -> dict:
        return {
            "status": f"{settings.assistant_name} is alive!",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "geminiReady": settings.gemini_ready,
        }

    return app


app = create_app()


def run() -> None:
    """Console entrypoint: serve the app with uvicorn on settings.port."""
    import uvicorn

    uvicorn.run("companion.main:app", host="0.0.0.0", port=settings.port)
