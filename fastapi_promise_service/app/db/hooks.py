"""커밋 이후 실행할 콜백 관리.

서비스 계층은 ``run_after_commit`` 으로 콜백을 등록하고, 세션이 실제로
커밋되었을 때만 한 번 실행된다. 롤백되면 대기 중인 콜백은 버려진다.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_CALLBACKS_KEY = "after_commit_callbacks"


def run_after_commit(session: Session, func: Callable[..., Any], *args: Any) -> None:
    session.info.setdefault(_CALLBACKS_KEY, []).append((func, args))


def pending_callbacks(session: Session) -> int:
    return len(session.info.get(_CALLBACKS_KEY, []))


@event.listens_for(Session, "after_commit")
def _run_pending_callbacks(session: Session) -> None:
    callbacks = session.info.pop(_CALLBACKS_KEY, [])
    for func, args in callbacks:
        try:
            func(*args)
        except Exception:  # noqa: BLE001
            logger.exception("커밋 후 콜백 실행 실패 (%s)", getattr(func, "__name__", func))


@event.listens_for(Session, "after_soft_rollback")
def _discard_pending_callbacks(session: Session, previous_transaction: Any) -> None:
    if previous_transaction.nested:
        return
    if session.info.pop(_CALLBACKS_KEY, None):
        logger.info("롤백으로 커밋 후 콜백을 취소했습니다.")
