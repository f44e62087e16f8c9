from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal

from pydantic import BaseModel, Field, field_validator


class MeetingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    meeting_time: datetime
    max_participants: int = Field(default=10, ge=2, le=100)
    location_name: str | None = Field(default=None, max_length=500)
    location_address: str | None = Field(default=None, max_length=500)
    participant_user_ids: List[int] = Field(
        default_factory=list,
        description="초대할 사용자 ID (방장 제외)",
    )


class ParticipantRead(BaseModel):
    model_config = {"from_attributes": True}

    user_id: int
    role: str
    response: str


class MeetingRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    host_id: int
    title: str
    description: str | None = None
    meeting_time: datetime
    max_participants: int
    status: str
    location_name: str | None = None
    location_address: str | None = None
    participants: List[ParticipantRead] = Field(default_factory=list)

    @field_validator("meeting_time")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # DB에는 UTC 시각이 오프셋 없이 저장된다.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class InvitationResponseRequest(BaseModel):
    response: Literal["ACCEPTED", "DECLINED"]


class InviteParticipantsRequest(BaseModel):
    participant_user_ids: List[int] = Field(..., min_length=1, description="추가로 초대할 사용자 ID")


class InviteResponse(BaseModel):
    meeting_id: int
    invited: List[int] = Field(default_factory=list)
    already_invited: List[int] = Field(default_factory=list)
    failed: List[int] = Field(default_factory=list)
    message: str
