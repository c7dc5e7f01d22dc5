"""
Description:
Schemas for speech-recognition events relayed by the browser, and the directives the
service sends back to drive recognition restarts.

Dependencies:
- pydantic: For data validation and settings management.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field


class RecognitionResult(BaseModel):
    """Best alternative of one SpeechRecognitionResult."""
    transcript: str
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    is_final: bool = False


class RecognitionDirective(BaseModel):
    action: Literal["none", "restart", "stop"]
    delay_ms: int = 0
    reason: Optional[str] = None
    message: Optional[str] = None


class TranscriptBatch(BaseModel):
    final_transcript: str = ""
    interim_transcript: str = ""
