from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api import deps
from app.db.session import get_db
from app.schemas.users import KakaoIdentityRead, KakaoIdentityUpdate
from app.services.user_service import link_kakao_identity, to_identity_read

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/me/kakao-identity", response_model=KakaoIdentityRead)
def update_kakao_identity(
    payload: KakaoIdentityUpdate,
    db: Session = Depends(get_db),
    current_user: deps.AuthenticatedUser = Depends(deps.get_current_user),
):
    identity = link_kakao_identity(db, current_user.id, payload)
    return to_identity_read(identity)
