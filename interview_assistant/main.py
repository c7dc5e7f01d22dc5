import sys

from dotenv import load_dotenv
from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from contextlib import asynccontextmanager
from slowapi import _rate_limit_exceeded_handler
# Settings
from interview_assistant.core.settings import get_settings
# Rate Limiter
from interview_assistant.core.route_limiters import limiter
# Routers
from interview_assistant.routes.health import router as health_router
from interview_assistant.routes.sessions import router as sessions_router
from interview_assistant.routes.answers import router as answers_router
from interview_assistant.routes.assistant_ws import router as assistant_ws_router
from interview_assistant.routes.meetings import router as meetings_router
# CORS Middleware
from interview_assistant.core.cors_middleware import add_cors_middleware
# Logger
from loguru import logger
# Database
from interview_assistant.database import create_tables
from interview_assistant.services.database.message_logger import message_logger
# Error Handling
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from interview_assistant.errors.handlers import http_exception_handler, generic_exception_handler

# Load environment variables
load_dotenv()

logger.remove()
logger.add(sys.stderr, level=get_settings().log_level)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    try:
        create_tables()
        if not get_settings().is_gateway_configured:
            logger.warning("OPENROUTER_API_KEY is not set; answers will report a configuration error")
        logger.info("Application startup completed successfully")
    except Exception as e:
        logger.error(f"Error during application startup: {e}")
        raise

    yield

    # Shutdown
    await message_logger.drain()
    logger.info("Application shutdown")

# Initialize FastAPI app
app = FastAPI(
    title="Interview Assistant API",
    description="Real-time interview answer suggestions over a multi-model chat-completion gateway",
    version="0.1.0",
    lifespan=lifespan
)
# Add CORS middleware
add_cors_middleware(app)

# Centralized error handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors()},
    )

# Add rate limiter to the app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Include routers
app.include_router(health_router)
app.include_router(sessions_router)
app.include_router(answers_router)
app.include_router(assistant_ws_router)
app.include_router(meetings_router)
