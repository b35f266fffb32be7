import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from layout_maker.exceptions import ConfigurationError, LayoutMakerError
from layout_maker.logging_config import setup_logging
from layout_maker.persistence.scenes import SceneRepository, Workspace
from layout_maker.settings import Settings, get_settings
from layout_maker.storage import KeyValueStore, get_storage
from services.api.exception_handlers import layout_maker_exception_handler
from services.api.routes import router as v1_router


def _load_settings() -> Settings:
    try:
        return get_settings()
    except FileNotFoundError:
        logger.warning("No configuration file found, using built-in defaults")
        return Settings()
    except ValueError as exc:
        raise ConfigurationError(str(exc), {"setting": "LAYOUT_MAKER_CONFIG"}) from exc


def create_app(settings: Settings | None = None, storage: KeyValueStore | None = None) -> FastAPI:
    # Setup structured logging
    json_logging = os.getenv("JSON_LOGGING", "false").lower() in {"true", "1", "yes"}
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE")
    setup_logging(
        level=log_level,
        json_format=json_logging,
        log_file=Path(log_file) if log_file else None,
    )

    settings = settings or _load_settings()
    storage = storage or get_storage(settings.storage)
    repository = SceneRepository(
        storage,
        key_prefix=settings.storage.key_prefix,
        orphan_policy=settings.seating.orphan_policy,
    )

    app = FastAPI(
        title="Layout Maker API",
        version="0.1.0",
        description="Canvas engine for venue floor plans: elements, walls, doors and projects",
    )
    app.state.settings = settings
    app.state.workspace = Workspace(repository, settings)

    ui_origin = os.getenv("UI_ORIGIN", "http://localhost:3000")
    cors_origins = sorted({ui_origin, "http://localhost:3000", "http://127.0.0.1:3000"})
    logger.info(f"CORS allowed origins: {cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    # Register exception handlers
    app.add_exception_handler(LayoutMakerError, layout_maker_exception_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": type(exc).__name__,
                "message": str(exc),
            },
        )

    app.include_router(v1_router)

    return app


app = create_app()


__all__ = ["app", "create_app"]
