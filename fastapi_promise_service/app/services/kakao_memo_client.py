from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.services.kakao_template import encode_template_object

logger = logging.getLogger(__name__)

KAKAO_ERROR_HINTS = {
    400: "요청 형식 오류: template_object JSON 형식을 점검하세요.",
    401: "인증 오류: 액세스 토큰이 만료되었거나 유효하지 않습니다.",
    403: "권한 오류: talk_message 스코프 동의 여부를 확인하세요.",
}
SCOPE_ERROR_MARKERS = ("insufficient_scope", "-5")


class KakaoMemoClient:
    """카카오 '나와의 채팅' 메시지 전송 클라이언트.

    요청마다 수신자 본인의 액세스 토큰을 사용하므로 별도의 수신자 지정 필드가
    필요 없다. 내부 ``httpx.Client`` 는 호출 간에 재사용된다.
    """

    def __init__(
        self,
        *,
        memo_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.memo_url = memo_url or settings.kakao_memo_url
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(
                settings.kakao_read_timeout,
                connect=settings.kakao_connect_timeout,
            ),
            verify=True,
        )

    def send_memo(
        self,
        access_token: str,
        template: Dict[str, Any],
        recipient_id: int | None = None,
    ) -> bool:
        """수신자 한 명에게 1회 전송한다. 어떤 실패도 예외로 올리지 않고 False를 반환한다."""
        try:
            template_json = encode_template_object(template)
            response = self._client.post(
                self.memo_url,
                headers={"Authorization": f"Bearer {access_token}"},
                data={"template_object": template_json},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            _log_api_error(recipient_id, exc.response.status_code, exc.response.text)
            return False
        except httpx.HTTPError as exc:  # 네트워크/타임아웃 오류
            logger.error("카카오 메모 API 호출 실패 - 사용자 ID: %s, 오류: %s", recipient_id, exc)
            return False
        except Exception:  # noqa: BLE001
            logger.exception("메모 전송 중 예외 발생 - 사용자 ID: %s", recipient_id)
            return False

        logger.debug("카카오 '나와의 채팅' 메시지 전송 성공 - 사용자 ID: %s", recipient_id)
        return True

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def _log_api_error(recipient_id: int | None, status_code: int, body: str) -> None:
    logger.error(
        "카카오 메모 API 호출 오류 - 사용자 ID: %s, 상태: %s, 응답: %s",
        recipient_id,
        status_code,
        body,
    )
    hint = KAKAO_ERROR_HINTS.get(status_code)
    # 스코프 미동의는 insufficient_scope 메시지 또는 카카오 에러 코드 -5로 내려온다.
    if status_code == 403 and not any(marker in (body or "") for marker in SCOPE_ERROR_MARKERS):
        hint = "접근 권한 오류: 카카오 API 접근이 거부되었습니다."
    if hint:
        logger.error("  %s", hint)
