"""
Description: 
This module defines the schema for health check responses using Pydantic.

Dependencies:
- pydantic: For data validation and settings management.
"""
from pydantic import BaseModel

class HealthResponse(BaseModel):
    """
    Schema for health check endpoint responses.

    The configuration flags let the browser show a setup hint before the first question.
    """
    status: str
    gateway_configured: bool
    database_configured: bool
    zoom_configured: bool
