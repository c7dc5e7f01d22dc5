"""
Description: 
This module defines the schemas for WebSocket messages used by the live assistant channel.

# WebSocketMessage Class is the base class for all messages sent from the server.
# WebSocketClientMessage Class is the schema for events the browser sends to the server.

Dependencies:
- pydantic: For data validation and settings management.
- typing: For type annotations.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from interview_assistant.schemas.speech.recognition_event import RecognitionResult

# Base model for all websocket messages
class WebSocketMessage(BaseModel):
    type: Literal["transcript", "token", "answer", "clarify", "error", "status", "recognition"]
    content: str = ""
    options: Optional[List[str]] = None
    data: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None

# Model for events sent by the browser
class WebSocketClientMessage(BaseModel):
    type: Literal[
        "question",
        "clarification",
        "speech_results",
        "speech_error",
        "speech_end",
        "speech_start",
        "start_listening",
        "stop_listening",
        "clear",
    ]
    content: str = ""
    results: List[RecognitionResult] = Field(default_factory=list)
    result_index: int = 0
    error: Optional[str] = None
