"""
Description:
Module for adding CORS middleware to FastAPI application.

Arguments:
- app: FastAPI application instance to which CORS middleware will be added.

Returns:
- None, but modifies the app to allow cross-origin requests from the configured origins.

Dependencies:
- fastapi: For creating the FastAPI application and adding middleware.
- fastapi.middleware.cors: For CORS middleware functionality.
- loguru: For logging information about the middleware setup.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from interview_assistant.core.settings import get_settings

def add_cors_middleware(app: FastAPI):
    origins = get_settings().allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info(f"CORS middleware added for {len(origins)} origin(s)")
