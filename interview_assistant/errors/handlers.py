from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )

def generic_exception_handler(request: Request, exc: Exception):
    """
    Fallback handler for anything that escaped a route.

    Args:
        request: FastAPI request instance
        exc: The unhandled exception

    Returns:
        JSONResponse with 500 status and a generic message; details only go to the log.
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred."},
    )
