from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from statement_analyzer.api.routes import annotations, essentials, transactions, upload
from statement_analyzer.core import settings
from statement_analyzer.logger import get_logger, setup_logging
from statement_analyzer.manager import StatementWorkspace
from statement_analyzer.services.annotations import JsonAnnotationStore
from statement_analyzer.services.essentials import EssentialCategories

logger = get_logger(__name__)


def build_workspace() -> StatementWorkspace:
    annotations_path = settings.data_path("ANNOTATIONS_FILE", settings.DEFAULT_ANNOTATIONS_FILE)
    essentials_path = settings.data_path("ESSENTIALS_FILE", settings.DEFAULT_ESSENTIALS_FILE)
    return StatementWorkspace(
        annotations=JsonAnnotationStore(data_path=annotations_path),
        essentials=EssentialCategories(
            data_path=essentials_path,
            extra=settings.get_env_list("CUSTOM_ESSENTIAL_CATEGORIES"),
        ),
    )


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing workspace...")
        settings.log_environment()
        app.state.workspace = build_workspace()
        logger.info("Workspace initialized.")
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Statement Analyzer", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(upload.router)
    app.include_router(transactions.router)
    app.include_router(annotations.router)
    app.include_router(essentials.router)

    return app


app = create_app()
