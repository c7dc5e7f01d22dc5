"""
Health check endpoint for the application.

Description:
This module defines a FastAPI route for checking the health status of the application.
Besides the status it reports which optional integrations are configured.

Arguments:
- request: An instance of Request, required for rate limiting.

Returns:
- A JSON response such as {"status": "ok", "gateway_configured": true, ...}.

Dependencies:
- fastapi: For creating the FastAPI application and defining routes.
- interview_assistant.core.route_limiters: For rate limiting functionality.
- interview_assistant.schemas.health_response: For defining the response model.
- loguru: For logging information about the health check endpoint.
"""
from fastapi import APIRouter, Request
from loguru import logger

from interview_assistant.core.route_limiters import limiter, HEALTH_RATE_LIMIT
from interview_assistant.core.settings import get_settings
from interview_assistant.schemas.health_response import HealthResponse

router = APIRouter(
    prefix="/api",
    tags=["health"],
    responses={404: {"description": "Not found"}}
)

@router.get("/health", response_model=HealthResponse)
@limiter.limit(HEALTH_RATE_LIMIT)
async def health(request: Request):
    """
    Request parameter is required for rate limiting.
    """
    logger.info("Health check endpoint called")
    settings = get_settings()
    return HealthResponse(
        status="ok",
        gateway_configured=settings.is_gateway_configured,
        database_configured=settings.is_database_configured,
        zoom_configured=bool(settings.zoom_sdk_key and settings.zoom_sdk_secret),
    )
