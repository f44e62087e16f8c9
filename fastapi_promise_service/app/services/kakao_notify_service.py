from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.crypto import decrypt_token
from app.core.statuses import IdentityProvider
from app.models.domain import Meeting, MeetingParticipant, User, UserConsent, UserIdentity
from app.schemas.notifications import KakaoNotifyFailure, KakaoNotifyResponse
from app.services.kakao_memo_dispatcher import (
    DispatchResult,
    KakaoMemoDispatcher,
    get_dispatcher,
)
from app.services.kakao_template import TemplateContent

logger = logging.getLogger(__name__)

WEEKDAYS_KO = ("월", "화", "수", "목", "금", "토", "일")
DEFAULT_INVITER_NAME = "익명"
DEFAULT_PLACE = "장소 미정"
REASON_NO_CONSENT = "카카오톡 메시지 전송에 동의하지 않았습니다."
REASON_NO_TOKEN = "카카오 로그인이 필요합니다."
REASON_TOKEN_EXPIRED = "카카오 액세스 토큰이 만료되었습니다."


@dataclass
class ParticipantTokens:
    tokens: Dict[int, str] = field(default_factory=dict)
    skipped: Dict[int, str] = field(default_factory=dict)


def send_kakao_notification(
    db: Session,
    inviter_id: int,
    meeting_id: int,
    receiver_ids: Optional[List[int]] = None,
    *,
    dispatcher: Optional[KakaoMemoDispatcher] = None,
) -> KakaoNotifyResponse:
    logger.info(
        "카카오톡 알림 전송 시작 - 발송자: %s, 약속: %s, 수신자: %s",
        inviter_id,
        meeting_id,
        len(receiver_ids) if receiver_ids else "전체",
    )
    if receiver_ids and len(receiver_ids) > settings.notify_max_receivers:
        raise ValueError(f"수신자는 {settings.notify_max_receivers}명 이하여야 합니다.")

    _validate_inviter(db, inviter_id)
    meeting = db.get(Meeting, meeting_id)
    if not meeting:
        raise ValueError(f"존재하지 않는 약속입니다: {meeting_id}")
    if not _is_member(meeting, inviter_id):
        raise ValueError("약속 참여자만 알림을 보낼 수 있습니다.")

    content = build_template_content(db, meeting, inviter_id)
    receivers = resolve_receivers(db, inviter_id, meeting_id, receiver_ids)
    if not receivers:
        return _build_response(0, 0, [])

    collected = collect_participant_tokens(db, receivers)
    failures = [
        KakaoNotifyFailure(user_id=user_id, reason=reason)
        for user_id, reason in collected.skipped.items()
    ]
    if not collected.tokens:
        logger.info("카카오 로그인 및 동의가 완료된 수신자가 없습니다 - 약속: %s", meeting_id)
        return _build_response(0, len(receivers), failures)

    result = (dispatcher or get_dispatcher()).send_to_memo(collected.tokens, content).result()
    if result.failed_count or not result.success:
        failures.append(KakaoNotifyFailure(user_id=None, reason=result.message))

    logger.info("카카오톡 알림 전송 완료 - 성공: %s/%s", result.sent_count, len(receivers))
    return _build_response(result.sent_count, len(receivers), failures)


def announce_meeting_created(
    bind: Engine | Connection,
    meeting_id: int,
    receiver_ids: Optional[List[int]] = None,
    *,
    dispatcher: Optional[KakaoMemoDispatcher] = None,
) -> Optional["Future[DispatchResult]"]:
    """약속 생성/초대 트랜잭션이 커밋된 뒤 초대된 참여자에게 알림을 보낸다.

    ``receiver_ids`` 가 없으면 방장을 제외한 참여자 전체가 대상이다.
    """
    if not settings.kakao_notification_enabled:
        logger.info("카카오 알림 비활성화 상태 (KAKAO_NOTIFICATION_ENABLED=false)")
        return None

    with Session(bind=bind) as db:
        meeting = db.get(Meeting, meeting_id)
        if not meeting:
            logger.warning("생성된 약속을 찾을 수 없습니다: %s", meeting_id)
            return None
        receivers = resolve_receivers(db, meeting.host_id, meeting.id, receiver_ids)
        if not receivers:
            logger.info("알림을 받을 초대된 사용자가 없음 - 약속 ID: %s", meeting_id)
            return None
        content = build_template_content(db, meeting, meeting.host_id)
        collected = collect_participant_tokens(db, receivers)

    if collected.skipped:
        logger.info("알림 제외 사용자 - 약속 ID: %s, 사용자: %s", meeting_id, sorted(collected.skipped))
    if not collected.tokens:
        return None

    future = (dispatcher or get_dispatcher()).send_to_memo(collected.tokens, content)
    future.add_done_callback(partial(_log_announce_result, meeting_id))
    return future


def build_template_content(db: Session, meeting: Meeting, inviter_id: int) -> TemplateContent:
    inviter = db.get(User, inviter_id)
    inviter_name = inviter.name.strip() if inviter and inviter.name else ""
    place = (meeting.location_name or "").strip()
    return TemplateContent(
        inviter=inviter_name or DEFAULT_INVITER_NAME,
        title=meeting.title,
        date=format_meeting_time(meeting.meeting_time),
        place=place or DEFAULT_PLACE,
        meeting_url=f"{settings.app_base_url.rstrip('/')}/meetings/{meeting.id}",
    )


def format_meeting_time(value: datetime) -> str:
    """예: ``08월 20일(수) 14:00``. DB에서 읽은 naive 값은 UTC로 보고 표시용 시간대로 변환한다."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone(timedelta(hours=settings.display_utc_offset_hours)))
    return f"{value:%m}월 {value:%d}일({WEEKDAYS_KO[value.weekday()]}) {value:%H:%M}"


def resolve_receivers(
    db: Session,
    inviter_id: int,
    meeting_id: int,
    receiver_ids: Optional[Iterable[int]] = None,
) -> List[int]:
    if receiver_ids:
        candidates = list(receiver_ids)
    else:
        candidates = db.scalars(
            select(MeetingParticipant.user_id)
            .where(MeetingParticipant.meeting_id == meeting_id)
            .order_by(MeetingParticipant.id)
        ).all()

    # 발송자는 수신자에서 제외
    targets = list(dict.fromkeys(uid for uid in candidates if uid != inviter_id))
    logger.info("수신자 목록 결정 완료 - 총 %s명 (발송자 제외)", len(targets))
    return targets


def collect_participant_tokens(db: Session, user_ids: List[int]) -> ParticipantTokens:
    collected = ParticipantTokens()
    if not user_ids:
        return collected

    consents = {
        consent.user_id: consent
        for consent in db.scalars(select(UserConsent).where(UserConsent.user_id.in_(user_ids)))
    }
    identities = {
        identity.user_id: identity
        for identity in db.scalars(
            select(UserIdentity).where(
                UserIdentity.user_id.in_(user_ids),
                UserIdentity.provider == IdentityProvider.KAKAO.value,
            )
        )
    }
    now = datetime.now(timezone.utc)

    for user_id in user_ids:
        consent = consents.get(user_id)
        if not consent or not consent.talk_message_consent:
            collected.skipped[user_id] = REASON_NO_CONSENT
            continue
        identity = identities.get(user_id)
        token = decrypt_token(identity.access_token_enc) if identity else None
        if not token:
            collected.skipped[user_id] = REASON_NO_TOKEN
            continue
        if _is_expired(identity.token_expires_at, now):
            collected.skipped[user_id] = REASON_TOKEN_EXPIRED
            continue
        collected.tokens[user_id] = token
    return collected


def _validate_inviter(db: Session, inviter_id: int) -> None:
    consent = db.scalar(select(UserConsent).where(UserConsent.user_id == inviter_id))
    if not consent or not consent.can_use_kakao_features:
        raise ValueError("발송자가 카카오 기능 사용에 동의하지 않았습니다.")


def _is_member(meeting: Meeting, user_id: int) -> bool:
    if meeting.host_id == user_id:
        return True
    return any(participant.user_id == user_id for participant in meeting.participants)


def _is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


def _build_response(
    sent_count: int,
    total_count: int,
    failures: List[KakaoNotifyFailure],
) -> KakaoNotifyResponse:
    if total_count == 0:
        message = "전송 대상이 없습니다"
    elif sent_count == total_count:
        message = "모든 메시지가 성공적으로 전송되었습니다"
    elif sent_count > 0:
        message = f"{sent_count}/{total_count} 메시지가 전송되었습니다"
    else:
        message = "메시지 전송에 실패했습니다"
    return KakaoNotifyResponse(
        success=sent_count > 0,
        sent_count=sent_count,
        total_count=total_count,
        failed_count=total_count - sent_count,
        failed=failures,
        message=message,
    )


def _log_announce_result(meeting_id: int, future: "Future[DispatchResult]") -> None:
    try:
        result = future.result()
    except Exception:  # noqa: BLE001
        logger.exception("약속 생성 알림 전송 실패 - 약속 ID: %s", meeting_id)
        return
    logger.info(
        "약속 생성 알림 전송 완료 - 약속 ID: %s, 성공: %s/%s",
        meeting_id,
        result.sent_count,
        result.total_count,
    )
