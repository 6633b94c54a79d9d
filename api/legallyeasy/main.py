"""
FastAPI application entrypoint.

Registers routers and error handlers, configures CORS, initializes
telemetry, and creates the flow instances on startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from legallyeasy.core.config import get_settings
from legallyeasy.core.errors import register_exception_handlers
from legallyeasy.core.telemetry import setup_telemetry, shutdown_telemetry
from legallyeasy.routers import chat, health, summarize
from legallyeasy.services.legal_chat import LegalChatFlow
from legallyeasy.services.openai_client import OpenAIService
from legallyeasy.services.summarize import SummarizationFlow

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """
    Application lifespan handler.
    Initializes the LLM client and flows on startup, cleans up on shutdown.
    """
    settings = get_settings()

    # Configure logging
    logging.basicConfig(level=settings.log_level)

    # Initialize telemetry
    setup_telemetry(settings)

    # Both flows share one client; neither keeps state between calls
    openai_service = OpenAIService(settings)

    # Store in app state for dependency injection
    application.state.summarization_flow = SummarizationFlow(openai_service)
    application.state.legal_chat_flow = LegalChatFlow(openai_service)

    logger.info("LegallyEasy API started (deployment: %s).", openai_service.model)
    yield
    logger.info("LegallyEasy API shutting down.")
    shutdown_telemetry()


app = FastAPI(
    title="LegallyEasy API",
    description="AI legal assistant: document summaries and legal Q&A.",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register routers
app.include_router(health.router)
app.include_router(summarize.router)
app.include_router(chat.router)
