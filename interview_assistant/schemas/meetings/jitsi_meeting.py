"""
Description:
Jitsi meeting request and response schemas. The response mirrors the props the
browser passes to the Jitsi React SDK.

Dependencies:
- pydantic: For data validation and settings management.
"""
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


class JitsiMeetingRequest(BaseModel):
    join_method: Literal["create", "join"] = "create"
    room_name: Optional[str] = Field(default=None, max_length=200)
    meeting_link: Optional[str] = Field(default=None, max_length=500)
    display_name: str = Field(default="", max_length=100)


class JitsiMeetingProps(BaseModel):
    domain: str
    room_name: str
    meeting_link: str
    config_overwrite: Dict[str, Any]
    interface_config_overwrite: Dict[str, Any]
    user_info: Dict[str, str]
    iframe_allow: str


class JitsiRoomResponse(BaseModel):
    room_name: str
    meeting_link: str
