from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.crypto import encrypt_token
from app.core.statuses import IdentityProvider
from app.models.domain import UserIdentity
from app.schemas.users import KakaoIdentityRead, KakaoIdentityUpdate


def link_kakao_identity(db: Session, user_id: int, payload: KakaoIdentityUpdate) -> UserIdentity:
    identity = db.scalar(
        select(UserIdentity).where(
            UserIdentity.user_id == user_id,
            UserIdentity.provider == IdentityProvider.KAKAO.value,
        )
    )
    if not identity:
        identity = UserIdentity(user_id=user_id, provider=IdentityProvider.KAKAO.value)
        db.add(identity)

    identity.access_token_enc = encrypt_token(payload.access_token)
    identity.token_expires_at = (
        datetime.now(timezone.utc) + timedelta(seconds=payload.expires_in)
        if payload.expires_in
        else None
    )
    if payload.kakao_user_id:
        identity.provider_user_id = payload.kakao_user_id

    db.commit()
    db.refresh(identity)
    return identity


def to_identity_read(identity: UserIdentity) -> KakaoIdentityRead:
    return KakaoIdentityRead(
        user_id=identity.user_id,
        provider=identity.provider,
        provider_user_id=identity.provider_user_id,
        token_expires_at=identity.token_expires_at,
        has_token=bool(identity.access_token_enc),
    )
