"""
Description:
Jitsi Meet configuration for the embedded meeting widget. The browser renders the
meeting with the Jitsi SDK; this service decides the room name and the props the SDK
is configured with.

Dependencies:
- loguru: For logging meeting setup.
- interview_assistant.errors.exceptions: For user-visible validation errors.
"""
import random
import re
from typing import Optional
from urllib.parse import urlparse

from loguru import logger

from interview_assistant.errors.exceptions import BadRequest, InvalidMeetingLink
from interview_assistant.schemas.meetings.jitsi_meeting import JitsiMeetingProps, JitsiMeetingRequest

JITSI_DOMAIN = "meet.jit.si"

ADJECTIVES = ["swift", "bright", "clever", "eager", "kind", "brave"]
NOUNS = ["falcon", "tiger", "eagle", "wolf", "bear", "lion"]

CONFIG_OVERWRITE = {
    "startWithAudioMuted": False,
    "startWithVideoMuted": False,
    "disableModeratorIndicator": True,
    "startScreenSharing": False,
    "enableEmailInStats": False,
    "prejoinPageEnabled": False,
    "disableDeepLinking": True,
    "toolbarButtons": [
        "camera",
        "chat",
        "closedcaptions",
        "desktop",
        "fullscreen",
        "hangup",
        "microphone",
        "participants-pane",
        "settings",
        "toggle-camera",
    ],
}

INTERFACE_CONFIG_OVERWRITE = {
    "DISABLE_JOIN_LEAVE_NOTIFICATIONS": True,
    "MOBILE_APP_PROMO": False,
    "SHOW_CHROME_EXTENSION_BANNER": False,
    "HIDE_INVITE_MORE_HEADER": True,
    "DEFAULT_BACKGROUND": "#000000",
}

IFRAME_ALLOW = "camera; microphone; display-capture; autoplay; clipboard-write"

_INVALID_ROOM_CHARS = re.compile(r"[^a-z0-9-]")


class JitsiService:
    def __init__(self, domain: str = JITSI_DOMAIN, rng: Optional[random.Random] = None):
        self.domain = domain
        self._rng = rng or random.Random()

    @staticmethod
    def sanitize_room_name(name: str) -> str:
        """Lowercase the name and replace every character outside [a-z0-9-] with '-'."""
        return _INVALID_ROOM_CHARS.sub("-", name.lower())

    def generate_random_room_name(self) -> str:
        adjective = self._rng.choice(ADJECTIVES)
        noun = self._rng.choice(NOUNS)
        number = self._rng.randrange(1000)
        return f"interview-{adjective}-{noun}-{number}"

    def parse_jitsi_link(self, link: str) -> Optional[str]:
        """Return the sanitized room of a meet.jit.si link, or None for anything else."""
        try:
            url = urlparse((link or "").strip())
        except ValueError:
            return None
        if url.scheme not in ("http", "https") or url.hostname != self.domain:
            return None
        room = url.path[1:] if url.path.startswith("/") else url.path
        return self.sanitize_room_name(room)

    def meeting_link(self, room_name: str) -> str:
        return f"https://{self.domain}/{room_name}"

    def get_meeting_props(self, room_name: str, display_name: str) -> JitsiMeetingProps:
        room = self.sanitize_room_name(room_name)
        return JitsiMeetingProps(
            domain=self.domain,
            room_name=room,
            meeting_link=self.meeting_link(room),
            config_overwrite={
                **CONFIG_OVERWRITE,
                "disableInitialGUM": False,
                "enableWelcomePage": False,
                "enableClosePage": False,
            },
            interface_config_overwrite=dict(INTERFACE_CONFIG_OVERWRITE),
            user_info={"displayName": display_name},
            iframe_allow=IFRAME_ALLOW,
        )

    def prepare_meeting(self, request: JitsiMeetingRequest) -> JitsiMeetingProps:
        """
        Resolve the room for a create/join request and build the SDK props.

        Joining requires a valid meet.jit.si link; creating uses the given room name or a
        random one.

        Raises:
            InvalidMeetingLink: If a join link is not a meet.jit.si URL.
            BadRequest: If no display name was given.
        """
        if request.join_method == "join" and request.meeting_link:
            room = self.parse_jitsi_link(request.meeting_link)
            if not room:
                raise InvalidMeetingLink()
        elif request.room_name and request.room_name.strip():
            room = request.room_name.strip()
        else:
            room = self.generate_random_room_name()

        display_name = (request.display_name or "").strip()
        if not display_name:
            raise BadRequest("Please enter your name")

        props = self.get_meeting_props(room, display_name)
        logger.info(f"Prepared Jitsi meeting in room {props.room_name}")
        return props


jitsi_service = JitsiService()
