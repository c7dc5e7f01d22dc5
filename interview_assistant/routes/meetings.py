"""
Meeting Routes

Description:
Configuration for the embedded video meetings. Jitsi meetings only need room names and
SDK props; Zoom meetings need a join signature signed with the server-side SDK secret.

Dependencies:
- fastapi: For creating the FastAPI application and defining routes.
- interview_assistant.services.meetings: For the Jitsi and Zoom helpers.
- interview_assistant.core.route_limiters: For rate limiting.
"""
from fastapi import APIRouter, Request

from interview_assistant.core.route_limiters import limiter, MEETING_RATE_LIMIT
from interview_assistant.schemas.meetings.jitsi_meeting import JitsiMeetingProps, JitsiMeetingRequest, JitsiRoomResponse
from interview_assistant.schemas.meetings.zoom_meeting import ZoomJoinPayload, ZoomJoinRequest
from interview_assistant.services.meetings.jitsi_service import jitsi_service
from interview_assistant.services.meetings.zoom_service import ZoomService

router = APIRouter(
    prefix="/api/meetings",
    tags=["meetings"],
    responses={404: {"description": "Not found"}}
)


@router.post("/jitsi", response_model=JitsiMeetingProps)
@limiter.limit(MEETING_RATE_LIMIT)
async def prepare_jitsi_meeting(request: Request, body: JitsiMeetingRequest):
    return jitsi_service.prepare_meeting(body)


@router.get("/jitsi/room", response_model=JitsiRoomResponse)
async def random_jitsi_room():
    room_name = jitsi_service.generate_random_room_name()
    return JitsiRoomResponse(room_name=room_name, meeting_link=jitsi_service.meeting_link(room_name))


@router.post("/zoom/signature", response_model=ZoomJoinPayload)
@limiter.limit(MEETING_RATE_LIMIT)
async def zoom_signature(request: Request, body: ZoomJoinRequest):
    """
    Sign a join token for the Zoom Web SDK. Returns 503 when no SDK key is configured.
    """
    return ZoomService().build_join_payload(body)
