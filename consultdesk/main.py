import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings
from .context import AppContext, build_context
from .domain.analytics.router import router as analytics_router
from .domain.billing.router import router as billing_router
from .domain.billing.webhooks import webhooks_router
from .domain.companion.router import router as companion_router
from .errors import AppError, app_error_handler
from .graph import ensure_graph_setup

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("neo4j").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    if getattr(app.state, "context", None) is None:
        app.state.context = build_context(app.state.settings)

    context: AppContext = app.state.context
    await ensure_graph_setup(context.graph_driver, context.settings.neo4j_database)

    yield

    logger.info("Application shutting down...")
    await context.aclose()


def create_app(
    context: Optional[AppContext] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """
    Build the API application.

    Pass a prebuilt context to inject substitute clients; otherwise clients
    are created from settings when the application starts.
    """
    settings = context.settings if context is not None else (settings or Settings.from_env())

    app = FastAPI(title="Consultdesk API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.context = context

    app.add_exception_handler(AppError, app_error_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
            raise

    allowed_origins = settings.allowed_origins
    logger.info(f"CORS allowed origins: {allowed_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(billing_router)
    app.include_router(webhooks_router)
    app.include_router(analytics_router)
    app.include_router(companion_router)

    @app.get("/")
    def root():
        return {"message": "Consultdesk API is running"}

    @app.get("/health")
    def health(request: Request):
        context: Optional[AppContext] = request.app.state.context
        return {
            "status": "healthy",
            "analytics_enabled": bool(context and context.graph_driver is not None),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
