"""
Main FastAPI application for the set query service
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..database import init_database
from ..graphql.schema import create_graphql_router, create_schema, validate_schema
from ..logging import configure_logging, get_logger
from ..sets.loader import load_sets_from_config
from ..sets.registry import SetRegistry
from ..sets.registry import registry as default_registry

# Configure logging before creating logger
configure_logging(debug=settings.debug, level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting set query API...")
    init_database()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down set query API...")


def create_app(set_registry: SetRegistry | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Sets declared in settings.sets_config_path are registered before the
    schema is built, since building the schema freezes the registry.
    """
    set_registry = set_registry if set_registry is not None else default_registry

    if not set_registry.frozen:
        try:
            load_sets_from_config(set_registry=set_registry)
        except Exception as e:
            # Fail fast: strict mode default may raise here
            logger.error("Failed to configure sets", error=str(e))
            raise

    schema = create_schema(set_registry)
    validate_schema(schema)

    app = FastAPI(
        title="Set Query API",
        description="Query posts against sets defined by custom logic",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Basic health check endpoint."""
        return {"status": "healthy", "version": "0.1.0", "sets": set_registry.list_names()}

    app.include_router(create_graphql_router(schema), prefix="")

    logger.info("Set query API created", sets=set_registry.list_names())
    return app
