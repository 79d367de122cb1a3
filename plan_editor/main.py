from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from plan_editor.api.plan_edits import router as plan_edits_router
from plan_editor.config.settings import settings
from plan_editor.core.logger import setup_logger
from plan_editor.db.models import Base
from plan_editor.db.session import get_engine


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Configure logging and make sure the plan edit tables exist.

    Note: FastAPI requires async for lifespan context manager,
    even if no await operations are used.
    """
    setup_logger(level=settings.log_level)

    logger.info("Ensuring database tables exist")
    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables verified")

    yield

    logger.info("Plan editor shutting down")


def create_app() -> FastAPI:
    app = FastAPI(title="Plan Editor", lifespan=lifespan)
    app.include_router(plan_edits_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
