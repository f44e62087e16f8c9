from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.security import TokenDecodeError, decode_access_token
from app.db.session import get_db
from app.models.domain import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


@dataclass
class AuthenticatedUser:
    user: User
    token_jti: str

    @property
    def id(self) -> int:
        return self.user.id

    @property
    def name(self) -> str:
        return self.user.name


def get_current_user(token: str | None = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> AuthenticatedUser:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="인증이 필요합니다.",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise unauthorized
    try:
        payload = decode_access_token(token)
    except TokenDecodeError as exc:
        raise unauthorized from exc

    user = db.get(User, payload.user_id)
    if not user or not user.is_active:
        raise unauthorized
    return AuthenticatedUser(user=user, token_jti=payload.jti)
