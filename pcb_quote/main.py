# pcb_quote/main.py

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

# Load environment variables before the settings are read
load_dotenv()

from pcb_quote.core.config import settings
from pcb_quote.core.error_handlers import setup_error_handlers
from pcb_quote.api.main import api_router
from pcb_quote.logging import setup_logging
from pcb_quote.services.config_loader import config_loader
from pcb_quote.services.quote_service import QuoteService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the engine configuration once and build the quote service from it."""
    setup_logging()
    engine_config = config_loader.load_engine_config(strict=settings.STRICT_ENGINE_CONFIG)
    app.state.quote_service = QuoteService(config=engine_config)
    logger.info(f"{settings.API_TITLE} {settings.API_VERSION} started, tables {engine_config.table_version}")

    yield

    logger.info("Shutting down")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

# Set up error handlers
setup_error_handlers(app)

# Include the main API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Simple liveness probe."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("pcb_quote.main:app", host=settings.HOST, port=settings.PORT)
