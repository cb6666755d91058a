"""FastAPI application entry point."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from fluent_tutor.api.routes import router
from fluent_tutor.api.websocket import handle_chat_websocket
from fluent_tutor.config import Settings, get_settings
from fluent_tutor.storage.blob_store import BlobStore, JsonFileBlobStore
from fluent_tutor.storage.user_context import UserContextStore
from fluent_tutor.tutor.client import TutorClient, TutorService


def configure_logging() -> None:
    """Configure structlog based on environment."""
    is_production = os.getenv("ENV", "development").lower() == "production"
    if is_production:
        # Production: JSON format for machine parsing
        renderer = structlog.processors.JSONRenderer()
        level = logging.INFO
    else:
        # Development: console format for human readability
        renderer = structlog.dev.ConsoleRenderer()
        level = logging.DEBUG
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def create_app(
    settings: Settings,
    store: BlobStore | None = None,
    tutor: TutorService | None = None,
) -> FastAPI:
    """Build the application with its user store and tutor collaborator."""
    app = FastAPI(title="FluentAI Tutor", version="0.1.0")
    allowed_origins_env = os.getenv(
        "ALLOWED_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000"
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in allowed_origins_env.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    if tutor is None:
        tutor = TutorClient(
            api_key=settings.openai_api_key,
            model=settings.tutor_model,
            lookup_model=settings.lookup_model,
            native_language=settings.native_language,
            target_language=settings.target_language,
        )
    users = UserContextStore(
        store or JsonFileBlobStore(settings.store_dir),
        tutor,
        history_window=settings.history_window,
    )
    users.restore()

    app.state.settings = settings
    app.state.tutor = tutor
    app.state.users = users

    @app.websocket("/ws/sessions/{session_id}")
    async def chat_endpoint(websocket: WebSocket, session_id: str) -> None:
        """Browser WebSocket endpoint for an open chat view."""
        await handle_chat_websocket(websocket, session_id, users, settings)

    return app


def main() -> None:
    """Run the application."""
    configure_logging()
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
