from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from threading import Lock
from typing import Mapping, Optional

from app.core.config import settings
from app.services.kakao_memo_client import KakaoMemoClient
from app.services.kakao_template import TemplateContent, render_memo_template

logger = logging.getLogger(__name__)

_EXECUTOR: Optional[ThreadPoolExecutor] = None
_DISPATCHER: Optional["KakaoMemoDispatcher"] = None
_lock = Lock()
_executor_shutdown = False


@dataclass(frozen=True)
class DispatchResult:
    success: bool
    sent_count: int
    total_count: int
    message: str

    @property
    def failed_count(self) -> int:
        return self.total_count - self.sent_count

    @property
    def is_partial_success(self) -> bool:
        return self.success and 0 < self.sent_count < self.total_count

    @property
    def is_complete_failure(self) -> bool:
        return not self.success or self.sent_count == 0


class KakaoMemoDispatcher:
    """참여자별 '나와의 채팅' 전송을 묶어서 처리한다.

    수신자는 입력 순서대로 하나씩 전송하며, 한 명의 실패가 나머지 전송을
    막지 않는다. 결과는 성공/전체 건수만 집계한다.
    """

    def __init__(
        self,
        client: KakaoMemoClient,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.client = client
        self._executor = executor

    def send_to_memo(
        self,
        participant_tokens: Mapping[int, str],
        content: TemplateContent,
    ) -> "Future[DispatchResult]":
        logger.info("카카오 '나와의 채팅' 메시지 전송 시작 - 대상: %s명", len(participant_tokens))
        executor = self._executor or get_executor()
        if executor is None:
            logger.error("전송 워커 풀이 종료되어 메시지를 보내지 않습니다 - 대상: %s명", len(participant_tokens))
            future: "Future[DispatchResult]" = Future()
            future.set_result(
                DispatchResult(
                    success=False,
                    sent_count=0,
                    total_count=len(participant_tokens),
                    message="전송 실패: 전송 워커 풀이 종료되었습니다",
                )
            )
            return future
        return executor.submit(self.dispatch, participant_tokens, content)

    def dispatch(
        self,
        participant_tokens: Mapping[int, str],
        content: TemplateContent,
    ) -> DispatchResult:
        total = len(participant_tokens)
        try:
            template = render_memo_template(content)
            success_count = 0
            failure_count = 0

            for user_id, access_token in participant_tokens.items():
                try:
                    if self.client.send_memo(access_token, template, user_id):
                        success_count += 1
                    else:
                        failure_count += 1
                except Exception as exc:  # noqa: BLE001
                    logger.error("개별 메모 전송 실패 - 사용자 ID: %s, 오류: %s", user_id, exc)
                    failure_count += 1

            logger.info("카카오 메모 전송 완료 - 성공: %s, 실패: %s", success_count, failure_count)
            return DispatchResult(
                success=success_count > 0,
                sent_count=success_count,
                total_count=total,
                message=f"전송 완료 - 성공: {success_count}, 실패: {failure_count}",
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("카카오 메모 전송 중 전체 오류")
            return DispatchResult(
                success=False,
                sent_count=0,
                total_count=total,
                message=f"전송 실패: {exc}",
            )


def get_executor() -> Optional[ThreadPoolExecutor]:
    """공유 워커 풀을 필요할 때 만든다. ``shutdown_dispatcher`` 이후에는 None."""
    global _EXECUTOR
    with _lock:
        if _executor_shutdown:
            return None
        if _EXECUTOR is None:
            _EXECUTOR = ThreadPoolExecutor(
                max_workers=settings.kakao_dispatch_workers,
                thread_name_prefix="kakao-dispatch",
            )
            logger.debug("카카오 전송 워커 풀 생성 (workers=%s)", settings.kakao_dispatch_workers)
        return _EXECUTOR


def get_dispatcher() -> KakaoMemoDispatcher:
    global _DISPATCHER
    with _lock:
        if _DISPATCHER is None:
            _DISPATCHER = KakaoMemoDispatcher(KakaoMemoClient())
        return _DISPATCHER


def shutdown_dispatcher(wait: bool = True) -> None:
    global _EXECUTOR, _DISPATCHER, _executor_shutdown
    with _lock:
        executor, dispatcher = _EXECUTOR, _DISPATCHER
        _EXECUTOR = None
        _DISPATCHER = None
        _executor_shutdown = True
    if executor is not None:
        executor.shutdown(wait=wait)
    if dispatcher is not None:
        dispatcher.client.close()
    logger.info("카카오 전송 워커 풀 종료")
