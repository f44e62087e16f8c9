from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api import deps
from app.db.session import get_db
from app.schemas.notifications import KakaoNotifyResponse, NotifyKakaoRequest
from app.services.kakao_notify_service import send_kakao_notification

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/kakao", response_model=KakaoNotifyResponse)
def notify_kakao(
    payload: NotifyKakaoRequest,
    db: Session = Depends(get_db),
    current_user: deps.AuthenticatedUser = Depends(deps.get_current_user),
):
    """
    약속 참여자 각자의 '나와의 채팅'으로 약속 초대 메시지를 보낸다.
    일부 수신자 실패는 응답의 failed 목록과 건수로만 전달된다.
    """
    if payload.receiver_ids is not None and not payload.receiver_ids:
        raise HTTPException(status_code=400, detail="수신자는 1명 이상이어야 합니다.")
    try:
        return send_kakao_notification(
            db,
            inviter_id=current_user.id,
            meeting_id=payload.meeting_id,
            receiver_ids=payload.receiver_ids,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
