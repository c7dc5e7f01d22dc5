"""
Description:
Request parameters, timeouts and user-facing messages for the chat-completion gateway.
"""

TEMPERATURE = 0.7
MAX_TOKENS = 800
FREQUENCY_PENALTY = 0.2
PRESENCE_PENALTY = 0.4

# Seconds until the gateway must answer the request itself (status and headers).
REQUEST_TIMEOUT = 45.0
# Seconds after the gateway answered the request until the first token must arrive.
FIRST_TOKEN_TIMEOUT = 15.0
# Seconds of silence after content started before the answer is considered complete.
IDLE_STREAM_TIMEOUT = 8.0

# Status codes that move on to the next candidate model.
FALLBACK_STATUS_CODES = {429, 502}

NOT_CONFIGURED_MESSAGE = "Error: OpenRouter API key is not configured. Please add your API key to the .env file."
API_KEY_ERROR_MESSAGE = "Error: There seems to be an issue with the API key configuration. Please check your settings."
EMPTY_RESPONSE_MESSAGE = "I apologize, but I was unable to generate a response. Please try asking your question again in a moment."
BUSY_MESSAGE = "The service is currently busy. Please wait a moment and try again."
UNAVAILABLE_MESSAGE = "The service is temporarily unavailable. Please try again in a few moments."
