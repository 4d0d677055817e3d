"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from myawesomelist.api import awesome, health
from myawesomelist.config import settings
from myawesomelist.core.logging import setup_logging
from myawesomelist.middleware.error_codes import register_exception_handlers
from myawesomelist.middleware.tracing import CorrelationIdMiddleware
from myawesomelist.services.awesome import Awesome

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    app.state.awesome = await Awesome.create(settings)
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    try:
        yield
    finally:
        await app.state.awesome.close()
        logger.info("%s stopped", settings.APP_NAME)


def create_app() -> FastAPI:
    app = FastAPI(
        title="myawesomelist API",
        description="Awesome-list aggregation with semantic project search",
        version=settings.APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(awesome.router, tags=["AwesomeService"])
    return app


app = create_app()


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "myawesomelist API",
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("myawesomelist.main:app", host=settings.HOST, port=settings.PORT)
