"""
Description: 
This module sets up a rate limiter for the application using SlowAPI.
It initializes a Limiter instance with a key function to identify clients by their IP address and sets default limits for requests.

Answer generation is the expensive route: every request fans out to the chat-completion
gateway, so it gets its own tighter limit.

Dependencies:
- slowapi: For rate limiting functionality.
- slowapi.util: For utility functions like get_remote_address to retrieve the client's IP address.
- loguru: For logging information about the rate limiter initialization.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from loguru import logger

ANSWER_RATE_LIMIT = "20/minute"
HEALTH_RATE_LIMIT = "10/minute"
MEETING_RATE_LIMIT = "30/minute"

limiter = Limiter(key_func=get_remote_address, default_limits=["60/minute"])
logger.info("Rate limiter initialized")
