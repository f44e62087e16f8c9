from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

EMPTY_TEMPLATE_OBJECT = "{}"
CLOSING_LINE = "약속 준비 완료! 😊"


@dataclass(frozen=True)
class TemplateContent:
    inviter: str
    date: str
    place: str
    title: Optional[str] = None
    meeting_url: Optional[str] = None


def render_memo_template(content: TemplateContent) -> Dict[str, Any]:
    """약속 초대 메시지를 카카오 텍스트 템플릿 형태로 구성한다.

    제목과 URL은 공백을 제거한 뒤 비어 있으면 해당 줄/필드를 생략한다.
    """
    lines = [f"🎉 {content.inviter or ''}님의 약속 초대\n\n"]
    if _has_text(content.title):
        lines.append(f"📋 {content.title}\n")
    lines.append(f"🕒 {content.date or ''}\n")
    lines.append(f"📍 {content.place or ''}\n\n")
    lines.append(CLOSING_LINE)

    template: Dict[str, Any] = {
        "object_type": "text",
        "text": "".join(lines),
    }
    if _has_text(content.meeting_url):
        template["link"] = {
            "web_url": content.meeting_url,
            "mobile_web_url": content.meeting_url,
        }
    return template


def encode_template_object(template: Dict[str, Any]) -> str:
    """template_object 폼 필드에 들어갈 JSON 문자열을 만든다.

    인코딩에 실패하면 배치 전체를 멈추지 않도록 빈 객체로 대체한다.
    """
    try:
        return json.dumps(template, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        logger.exception("template_object JSON 변환 실패")
        return EMPTY_TEMPLATE_OBJECT


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())
