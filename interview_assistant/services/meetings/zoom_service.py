"""
Description:
Zoom Meeting SDK signatures. The browser joins and leaves meetings through the Zoom
Web SDK; the SDK secret stays on the server, which signs the join token.

Dependencies:
- jwt (PyJWT): For signing the HS256 SDK token.
- loguru: For logging signature requests.
"""
import time
from typing import Callable, Optional

import jwt
from loguru import logger

from interview_assistant.core.settings import get_settings
from interview_assistant.errors.exceptions import BadRequest, ZoomNotConfigured
from interview_assistant.schemas.meetings.zoom_meeting import ZoomJoinPayload, ZoomJoinRequest

TOKEN_LIFETIME_SECONDS = 60 * 60 * 2
CLOCK_SKEW_SECONDS = 30


class ZoomService:
    def __init__(self, sdk_key: Optional[str] = None, sdk_secret: Optional[str] = None, clock: Callable[[], float] = time.time):
        settings = get_settings() if sdk_key is None or sdk_secret is None else None
        self.sdk_key = sdk_key if sdk_key is not None else settings.zoom_sdk_key
        self.sdk_secret = sdk_secret if sdk_secret is not None else settings.zoom_sdk_secret
        self._clock = clock

    @property
    def is_configured(self) -> bool:
        return bool(self.sdk_key and self.sdk_secret)

    def generate_signature(self, meeting_number: str, role: int = 0) -> str:
        """
        Sign a Meeting SDK JWT for one meeting.

        Args:
            meeting_number (str): The Zoom meeting id.
            role (int): 0 to join as attendee, 1 as host.

        Returns:
            str: The HS256 signature passed to ZoomMtg.join.

        Raises:
            ZoomNotConfigured: If the SDK key or secret is missing.
        """
        if not self.is_configured:
            raise ZoomNotConfigured()

        iat = int(round(self._clock())) - CLOCK_SKEW_SECONDS
        exp = iat + TOKEN_LIFETIME_SECONDS
        payload = {
            "sdkKey": self.sdk_key,
            "mn": meeting_number,
            "role": role,
            "iat": iat,
            "exp": exp,
            "appKey": self.sdk_key,
            "tokenExp": exp,
        }
        return jwt.encode(payload, self.sdk_secret, algorithm="HS256", headers={"typ": "JWT"})

    def build_join_payload(self, request: ZoomJoinRequest) -> ZoomJoinPayload:
        meeting_number = "".join(request.meeting_number.split()).replace("-", "")
        if not meeting_number.isdigit():
            raise BadRequest("Invalid Zoom meeting number")
        signature = self.generate_signature(meeting_number)
        logger.info(f"Signed Zoom join token for meeting {meeting_number}")
        return ZoomJoinPayload(
            meeting_number=meeting_number,
            user_name=request.user_name.strip(),
            password=request.password,
            signature=signature,
            sdk_key=self.sdk_key,
        )
