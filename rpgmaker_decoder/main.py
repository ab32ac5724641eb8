import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rpgmaker_decoder.config import get_settings
from rpgmaker_decoder.api.router import api_router
from rpgmaker_decoder.services.header_engine import get_header_engine


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    # Startup: build the engine once so a bad signature config fails fast
    scheme = get_header_engine().scheme
    logger.info(
        "Header scheme: signature=%s header_length=%d verify=%s",
        scheme.signature.to_hex(), scheme.header_length, scheme.verify_signature,
    )
    yield
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Decrypt, restore and re-encrypt RPG Maker MV/MZ asset headers",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(api_router)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app


# Create app instance
app = create_app()
