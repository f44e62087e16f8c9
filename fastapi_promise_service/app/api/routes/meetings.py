from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api import deps
from app.core.statuses import ParticipantStatus
from app.db.session import get_db
from app.schemas.meetings import (
    InvitationResponseRequest,
    InviteParticipantsRequest,
    InviteResponse,
    MeetingCreate,
    MeetingRead,
    ParticipantRead,
)
from app.services.meeting_service import (
    cancel_meeting,
    create_meeting,
    get_meeting,
    invite_participants,
    respond_to_invitation,
)

router = APIRouter(prefix="/meetings", tags=["meetings"])


def _ensure_meeting_exists(db: Session, meeting_id: int) -> None:
    if not get_meeting(db, meeting_id):
        raise HTTPException(status_code=404, detail="약속을 찾을 수 없습니다.")


@router.post("", response_model=MeetingRead, status_code=status.HTTP_201_CREATED)
def create_meeting_endpoint(
    payload: MeetingCreate,
    db: Session = Depends(get_db),
    current_user: deps.AuthenticatedUser = Depends(deps.get_current_user),
):
    """
    약속을 생성하고, 커밋 이후 초대된 참여자에게 카카오톡 알림을 보낸다.
    """
    try:
        meeting = create_meeting(db, payload, host_id=current_user.id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return MeetingRead.model_validate(meeting)


@router.get("/{meeting_id}", response_model=MeetingRead)
def read_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: deps.AuthenticatedUser = Depends(deps.get_current_user),
):
    meeting = get_meeting(db, meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="약속을 찾을 수 없습니다.")
    return MeetingRead.model_validate(meeting)


@router.post("/{meeting_id}/invites", response_model=InviteResponse)
def invite_participants_endpoint(
    meeting_id: int,
    payload: InviteParticipantsRequest,
    db: Session = Depends(get_db),
    current_user: deps.AuthenticatedUser = Depends(deps.get_current_user),
):
    """
    방장이 참여자를 추가로 초대한다. 새로 초대된 사용자에게만 알림이 나간다.
    """
    _ensure_meeting_exists(db, meeting_id)
    try:
        return invite_participants(db, meeting_id, payload.participant_user_ids, host_id=current_user.id)
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/{meeting_id}/respond", response_model=ParticipantRead)
def respond_to_invitation_endpoint(
    meeting_id: int,
    payload: InvitationResponseRequest,
    db: Session = Depends(get_db),
    current_user: deps.AuthenticatedUser = Depends(deps.get_current_user),
):
    _ensure_meeting_exists(db, meeting_id)
    try:
        participant = respond_to_invitation(
            db,
            meeting_id,
            current_user.id,
            ParticipantStatus(payload.response),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ParticipantRead.model_validate(participant)


@router.post("/{meeting_id}/cancel", response_model=MeetingRead)
def cancel_meeting_endpoint(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: deps.AuthenticatedUser = Depends(deps.get_current_user),
):
    _ensure_meeting_exists(db, meeting_id)
    try:
        meeting = cancel_meeting(db, meeting_id, host_id=current_user.id)
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return MeetingRead.model_validate(meeting)
