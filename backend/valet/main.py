"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from valet import __version__
from valet.api.errors import register_exception_handlers
from valet.api.routes import agent_run, agents, auth, pipelines, runs, tabs, traits
from valet.api.routes import settings as settings_routes
from valet.core.config import settings
from valet.core.logging import get_logger, setup_logging
from valet.core.tracing import setup_tracing


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging("DEBUG" if settings.APP_ENV == "development" else "INFO")
    setup_tracing()
    logger = get_logger("startup")
    logger.info("Application starting", env=settings.APP_ENV)
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Valet API",
    description="Build AI agents, give them traits and chain them into pipelines",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

API_PREFIX = "/api"
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(agents.router, prefix=API_PREFIX)
app.include_router(agent_run.router, prefix=API_PREFIX)
app.include_router(traits.router, prefix=API_PREFIX)
app.include_router(pipelines.router, prefix=API_PREFIX)
app.include_router(runs.router, prefix=API_PREFIX)
app.include_router(tabs.router, prefix=API_PREFIX)
app.include_router(settings_routes.router, prefix=API_PREFIX)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Public health-check endpoint."""
    return {"status": "ok", "env": settings.APP_ENV}
