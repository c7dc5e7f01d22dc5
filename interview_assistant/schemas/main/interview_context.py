"""
Description:
Interview context captured once per session from the setup form. It personalizes
the system prompt sent to the chat-completion gateway.

Dependencies:
- pydantic: Used for data validation and settings management.
"""
from pydantic import BaseModel, Field


class InterviewContext(BaseModel):
    resume_text: str = Field(default="", max_length=20000, description="Candidate resume pasted as plain text")
    role: str = Field(default="", max_length=200, description="Role the candidate is interviewing for")
    domain: str = Field(default="General", max_length=100, description="Knowledge domain, e.g. Frontend, Backend, DevOps")
    interview_type: str = Field(default="General", max_length=100, description="General, Technical, Behavioral or System Design")
    scheduled_time: str = Field(default="immediately", max_length=100, description="'immediately' or a free-form start time")

    @property
    def starts_immediately(self) -> bool:
        return self.scheduled_time.strip().lower() == "immediately"
