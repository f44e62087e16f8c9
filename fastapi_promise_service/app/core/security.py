from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from jose import JWTError, jwt

from app.core.config import settings


@dataclass
class AccessToken:
    token: str
    expires_at: datetime
    jti: str


@dataclass
class TokenPayload:
    subject: str
    expires_at: datetime
    issued_at: datetime
    jti: str

    @property
    def user_id(self) -> int:
        return int(self.subject)


class TokenDecodeError(RuntimeError):
    pass


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> AccessToken:
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    jti = uuid4().hex
    payload: dict[str, Any] = {
        "sub": subject,
        "exp": int(expires.timestamp()),
        "iat": int(now.timestamp()),
        "jti": jti,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return AccessToken(token=token, expires_at=expires, jti=jti)


def decode_access_token(token: str) -> TokenPayload:
    """서명과 만료 시간을 검증한 뒤 필수 클레임을 추출한다."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:  # noqa: PERF203 - explicit conversion needed
        raise TokenDecodeError("토큰 검증에 실패했습니다.") from exc

    subject = payload.get("sub")
    jti = payload.get("jti")
    exp = payload.get("exp")
    iat = payload.get("iat")
    if not subject or not jti or exp is None or iat is None:
        raise TokenDecodeError("토큰 페이로드가 올바르지 않습니다.")
    if not str(subject).isdigit():
        raise TokenDecodeError("토큰 subject가 사용자 ID 형식이 아닙니다.")

    expires_at = datetime.fromtimestamp(int(exp), tz=timezone.utc)
    issued_at = datetime.fromtimestamp(int(iat), tz=timezone.utc)
    return TokenPayload(subject=str(subject), expires_at=expires_at, issued_at=issued_at, jti=str(jti))
