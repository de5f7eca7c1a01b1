"""
FastAPI application entrypoint.
Thin layer that wires up routers and middleware.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from src.config.settings import settings
from src.config.logging_config import setup_logging, get_logger
from src.interfaces.api.middleware import setup_middleware
from src.interfaces.api.errors import setup_exception_handlers
from src.interfaces.api.dependencies import init_services
from src.interfaces.api.routers import (
    health, search, chat, sessions, listings, categories, reviews, saved, review_summary
)
# Setup logging
setup_logging()
logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
   """Application lifespan manager."""
   logger.info("Initializing services...")
   try:
       init_services()
       logger.info("Services initialized successfully")
   except Exception as e:
       logger.error(f"Service initialization failed: {e}")
       raise
   yield
   logger.info("Shutting down services...")

# Create FastAPI app
app = FastAPI(
   title=settings.api_title,
   description="Skills marketplace search and chat assistant",
   version=settings.api_version,
   lifespan=lifespan,
)

# Setup middleware
setup_middleware(app)
setup_exception_handlers(app)
# Register routers
app.include_router(health.router)
app.include_router(search.router)
app.include_router(chat.router)
app.include_router(review_summary.router)
app.include_router(listings.router, prefix="/api/v1")
app.include_router(categories.router, prefix="/api/v1")
app.include_router(sessions.router, prefix="/api/v1")
app.include_router(reviews.router, prefix="/api/v1")
app.include_router(saved.router, prefix="/api/v1")
logger.info("Application startup complete")
