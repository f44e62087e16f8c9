from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class KakaoIdentityUpdate(BaseModel):
    access_token: str = Field(..., min_length=1, max_length=512)
    expires_in: int | None = Field(default=None, gt=0, description="토큰 만료까지 남은 초")
    kakao_user_id: str | None = Field(default=None, max_length=64)


class KakaoIdentityRead(BaseModel):
    model_config = {"from_attributes": True}

    user_id: int
    provider: str
    provider_user_id: str | None = None
    token_expires_at: datetime | None = None
    has_token: bool
