from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.statuses import (
    ACTIVE_USER_STATUS,
    MeetingStatus,
    ParticipantRole,
    ParticipantStatus,
)
from app.db.hooks import run_after_commit
from app.models.domain import Meeting, MeetingParticipant, User
from app.schemas.meetings import InviteResponse, MeetingCreate
from app.services import kakao_notify_service

logger = logging.getLogger(__name__)

CLOSED_STATUSES = {MeetingStatus.CANCELLED.value, MeetingStatus.COMPLETED.value}


def create_meeting(db: Session, payload: MeetingCreate, host_id: int) -> Meeting:
    meeting_time = payload.meeting_time
    if meeting_time.tzinfo is None:
        meeting_time = meeting_time.replace(tzinfo=timezone.utc)
    # DATETIME 컬럼에는 오프셋이 저장되지 않으므로 UTC로 맞춰 둔다.
    meeting_time = meeting_time.astimezone(timezone.utc)
    if meeting_time <= datetime.now(timezone.utc):
        raise ValueError("약속 시간은 현재 이후여야 합니다.")

    host = db.get(User, host_id)
    if not host or not host.is_active:
        raise ValueError("존재하지 않거나 비활성화된 사용자입니다.")

    invitee_ids = list(dict.fromkeys(uid for uid in payload.participant_user_ids if uid != host_id))
    if len(invitee_ids) + 1 > payload.max_participants:
        raise ValueError("최대 참여 인원을 초과했습니다.")
    _ensure_users_exist(db, invitee_ids)

    meeting = Meeting(
        host_id=host_id,
        title=payload.title.strip(),
        description=payload.description,
        meeting_time=meeting_time,
        max_participants=payload.max_participants,
        status=MeetingStatus.INVITING.value,
        location_name=payload.location_name,
        location_address=payload.location_address,
    )
    meeting.participants.append(
        MeetingParticipant(
            user_id=host_id,
            role=ParticipantRole.HOST.value,
            response=ParticipantStatus.ACCEPTED.value,
        )
    )
    for user_id in invitee_ids:
        meeting.participants.append(
            MeetingParticipant(
                user_id=user_id,
                role=ParticipantRole.PARTICIPANT.value,
                response=ParticipantStatus.INVITED.value,
            )
        )
    db.add(meeting)
    db.flush()

    # 참여자 정보가 커밋된 뒤에만 초대 알림이 나가도록 한다.
    run_after_commit(db, kakao_notify_service.announce_meeting_created, db.get_bind(), meeting.id)
    db.commit()
    db.refresh(meeting)
    return meeting


def get_meeting(db: Session, meeting_id: int) -> Meeting | None:
    return db.get(Meeting, meeting_id)


def invite_participants(
    db: Session,
    meeting_id: int,
    user_ids: list[int],
    host_id: int,
) -> InviteResponse:
    """기존 약속에 참여자를 추가한다. 새로 초대된 사용자에게만 커밋 후 알림을 보낸다."""
    logger.info("참여자 초대 시작 - 약속 ID: %s, 방장: %s, 대상: %s", meeting_id, host_id, user_ids)
    meeting = _get_open_meeting(db, meeting_id)
    if meeting.host_id != host_id:
        raise PermissionError("참여자 초대 권한이 없습니다.")

    existing = {participant.user_id for participant in meeting.participants}
    requested = list(dict.fromkeys(user_ids))
    new_ids = [uid for uid in requested if uid not in existing]
    if len(meeting.participants) + len(new_ids) > meeting.max_participants:
        raise ValueError("최대 참여 인원을 초과했습니다.")

    active_users: set[int] = set()
    if new_ids:
        active_users = set(
            db.scalars(select(User.id).where(User.id.in_(new_ids), User.status == ACTIVE_USER_STATUS))
        )

    invited: list[int] = []
    already_invited: list[int] = []
    failed: list[int] = []
    for user_id in requested:
        if user_id in existing:
            already_invited.append(user_id)
        elif user_id not in active_users:
            failed.append(user_id)
        else:
            meeting.participants.append(
                MeetingParticipant(
                    user_id=user_id,
                    role=ParticipantRole.PARTICIPANT.value,
                    response=ParticipantStatus.INVITED.value,
                )
            )
            invited.append(user_id)

    if invited:
        db.flush()
        run_after_commit(
            db,
            kakao_notify_service.announce_meeting_created,
            db.get_bind(),
            meeting.id,
            invited,
        )
    db.commit()
    logger.info(
        "참여자 초대 완료 - 약속 ID: %s, 초대: %s, 기존: %s, 실패: %s",
        meeting_id,
        invited,
        already_invited,
        failed,
    )
    return InviteResponse(
        meeting_id=meeting_id,
        invited=invited,
        already_invited=already_invited,
        failed=failed,
        message=_invite_message(invited, already_invited, failed),
    )


def respond_to_invitation(
    db: Session,
    meeting_id: int,
    user_id: int,
    response: ParticipantStatus,
) -> MeetingParticipant:
    meeting = _get_open_meeting(db, meeting_id)
    if meeting.host_id == user_id:
        raise ValueError("방장은 초대에 응답할 수 없습니다.")
    participant = db.scalar(
        select(MeetingParticipant).where(
            MeetingParticipant.meeting_id == meeting_id,
            MeetingParticipant.user_id == user_id,
        )
    )
    if not participant:
        raise ValueError("참여자 정보를 찾을 수 없습니다.")

    if participant.response == response.value:
        logger.info("이미 동일한 응답 상태입니다 - 약속 ID: %s, 사용자: %s, 응답: %s", meeting_id, user_id, response.value)
        return participant

    participant.response = response.value
    db.commit()
    db.refresh(participant)
    logger.info("초대 응답 처리 완료 - 약속 ID: %s, 사용자: %s, 응답: %s", meeting_id, user_id, response.value)
    return participant


def cancel_meeting(db: Session, meeting_id: int, host_id: int) -> Meeting:
    meeting = db.get(Meeting, meeting_id)
    if not meeting:
        raise ValueError(f"존재하지 않는 약속입니다: {meeting_id}")
    if meeting.host_id != host_id:
        raise PermissionError("약속 취소 권한이 없습니다.")
    if meeting.status == MeetingStatus.COMPLETED.value:
        raise ValueError("이미 완료된 약속은 취소할 수 없습니다.")
    if meeting.status == MeetingStatus.CANCELLED.value:
        return meeting

    meeting.status = MeetingStatus.CANCELLED.value
    db.commit()
    db.refresh(meeting)
    logger.info("약속 취소 완료 - 약속 ID: %s", meeting_id)
    return meeting


def _get_open_meeting(db: Session, meeting_id: int) -> Meeting:
    meeting = db.get(Meeting, meeting_id)
    if not meeting:
        raise ValueError(f"존재하지 않는 약속입니다: {meeting_id}")
    if meeting.status in CLOSED_STATUSES:
        raise ValueError("취소되었거나 완료된 약속입니다.")
    return meeting


def _invite_message(invited: list[int], already_invited: list[int], failed: list[int]) -> str:
    parts = []
    if invited:
        parts.append(f"초대된 사용자: {len(invited)}명")
    if already_invited:
        parts.append(f"이미 초대된 사용자: {len(already_invited)}명")
    if failed:
        parts.append(f"초대 실패한 사용자: {len(failed)}명")
    return ", ".join(parts)



def _ensure_users_exist(db: Session, user_ids: list[int]) -> None:
    if not user_ids:
        return
    existing = set(db.scalars(select(User.id).where(User.id.in_(user_ids))))
    missing = [uid for uid in user_ids if uid not in existing]
    if missing:
        raise ValueError(f"존재하지 않는 사용자가 포함되어 있습니다: {missing}")
