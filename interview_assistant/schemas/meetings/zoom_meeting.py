"""
Description:
Zoom Meeting SDK join request and payload schemas.

Dependencies:
- pydantic: For data validation and settings management.
"""
from pydantic import BaseModel, Field


class ZoomJoinRequest(BaseModel):
    meeting_number: str = Field(..., min_length=1, max_length=20)
    user_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(default="", max_length=100)


class ZoomJoinPayload(BaseModel):
    meeting_number: str
    user_name: str
    password: str
    signature: str
    sdk_key: str
