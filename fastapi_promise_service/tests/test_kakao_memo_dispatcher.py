from __future__ import annotations

import pytest

from app.services import kakao_memo_dispatcher
from app.services.kakao_memo_dispatcher import DispatchResult, KakaoMemoDispatcher
from app.services.kakao_template import TemplateContent

CONTENT = TemplateContent(inviter="Alice", date="2025-08-20 14:00", place="Gangnam Station")


class FakeMemoClient:
    def __init__(self, outcomes: dict | None = None) -> None:
        self.outcomes = outcomes or {}
        self.calls: list[int] = []

    def send_memo(self, access_token, template, recipient_id=None):
        self.calls.append(recipient_id)
        outcome = self.outcomes.get(recipient_id, True)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        pass


def test_all_recipients_succeed():
    client = FakeMemoClient()
    result = KakaoMemoDispatcher(client).dispatch({1: "a", 2: "b", 3: "c"}, CONTENT)

    assert result.success is True
    assert (result.sent_count, result.total_count, result.failed_count) == (3, 3, 0)
    assert result.message == "전송 완료 - 성공: 3, 실패: 0"
    assert client.calls == [1, 2, 3]


def test_partial_success_is_still_success():
    client = FakeMemoClient({2: False})
    result = KakaoMemoDispatcher(client).dispatch({1: "a", 2: "b", 3: "c"}, CONTENT)

    assert result.success is True
    assert result.sent_count == 2
    assert result.is_partial_success is True
    assert result.message == "전송 완료 - 성공: 2, 실패: 1"


def test_all_recipients_fail():
    client = FakeMemoClient({1: False, 2: False})
    result = KakaoMemoDispatcher(client).dispatch({1: "a", 2: "b"}, CONTENT)

    assert result.success is False
    assert (result.sent_count, result.total_count) == (0, 2)
    assert result.is_complete_failure is True


def test_empty_map_reports_nothing_sent():
    client = FakeMemoClient()
    result = KakaoMemoDispatcher(client).dispatch({}, CONTENT)

    assert result == DispatchResult(
        success=False,
        sent_count=0,
        total_count=0,
        message="전송 완료 - 성공: 0, 실패: 0",
    )
    assert client.calls == []


def test_exception_from_one_recipient_does_not_stop_the_batch():
    client = FakeMemoClient({2: RuntimeError("sender exploded")})
    result = KakaoMemoDispatcher(client).dispatch({1: "a", 2: "b", 3: "c"}, CONTENT)

    assert client.calls == [1, 2, 3]
    assert result.sent_count == 2
    assert result.failed_count == 1
    assert result.success is True


def test_setup_failure_reports_whole_batch_failed(monkeypatch):
    def broken_render(content):
        raise ValueError("template broken")

    monkeypatch.setattr(kakao_memo_dispatcher, "render_memo_template", broken_render)
    client = FakeMemoClient()

    result = KakaoMemoDispatcher(client).dispatch({1: "a", 2: "b"}, CONTENT)

    assert result.success is False
    assert (result.sent_count, result.total_count) == (0, 2)
    assert result.message == "전송 실패: template broken"
    assert client.calls == []


def test_send_to_memo_returns_future(executor):
    client = FakeMemoClient({3: False})
    dispatcher = KakaoMemoDispatcher(client, executor=executor)

    future = dispatcher.send_to_memo({1: "a", 3: "c"}, CONTENT)
    result = future.result(timeout=5)

    assert result.sent_count == 1
    assert result.total_count == 2


@pytest.mark.parametrize(
    ("sent", "total", "success", "partial", "complete_failure"),
    [
        (3, 3, True, False, False),
        (1, 3, True, True, False),
        (0, 3, False, False, True),
    ],
)
def test_dispatch_result_properties(sent, total, success, partial, complete_failure):
    result = DispatchResult(success=success, sent_count=sent, total_count=total, message="")

    assert result.failed_count == total - sent
    assert result.is_partial_success is partial
    assert result.is_complete_failure is complete_failure


def test_shutdown_dispatcher_stops_new_submissions(monkeypatch):
    monkeypatch.setattr(kakao_memo_dispatcher, "_executor_shutdown", False)
    first = kakao_memo_dispatcher.get_dispatcher()
    assert kakao_memo_dispatcher.get_dispatcher() is first
    assert kakao_memo_dispatcher.get_executor() is not None

    kakao_memo_dispatcher.shutdown_dispatcher(wait=True)

    assert kakao_memo_dispatcher.get_executor() is None
    assert kakao_memo_dispatcher._EXECUTOR is None


def test_send_after_shutdown_resolves_as_complete_failure(monkeypatch):
    monkeypatch.setattr(kakao_memo_dispatcher, "_executor_shutdown", False)
    kakao_memo_dispatcher.shutdown_dispatcher(wait=True)
    client = FakeMemoClient()

    future = KakaoMemoDispatcher(client).send_to_memo({1: "a", 2: "b"}, CONTENT)

    assert future.done()
    result = future.result()
    assert result.is_complete_failure is True
    assert (result.sent_count, result.total_count) == (0, 2)
    assert client.calls == []
    assert kakao_memo_dispatcher._EXECUTOR is None
