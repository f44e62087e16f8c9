from __future__ import annotations

from pydantic import BaseModel, Field


class NotifyKakaoRequest(BaseModel):
    meeting_id: int = Field(..., description="알림을 보낼 약속 ID")
    receiver_ids: list[int] | None = Field(
        default=None,
        description="수신자 ID 목록 (생략 시 약속 참여자 전체)",
    )


class KakaoNotifyFailure(BaseModel):
    user_id: int | None = None
    reason: str


class KakaoNotifyResponse(BaseModel):
    success: bool
    sent_count: int
    total_count: int
    failed_count: int
    failed: list[KakaoNotifyFailure] = Field(default_factory=list)
    message: str
