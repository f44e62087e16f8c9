from __future__ import annotations

import json

from app.services.kakao_template import (
    EMPTY_TEMPLATE_OBJECT,
    TemplateContent,
    encode_template_object,
    render_memo_template,
)


def test_render_without_title_and_url_omits_optional_parts():
    content = TemplateContent(inviter="Alice", date="2025-08-20 14:00", place="Gangnam Station")

    template = render_memo_template(content)

    assert template["object_type"] == "text"
    assert template["text"] == (
        "🎉 Alice님의 약속 초대\n\n"
        "🕒 2025-08-20 14:00\n"
        "📍 Gangnam Station\n\n"
        "약속 준비 완료! 😊"
    )
    assert "📋" not in template["text"]
    assert "link" not in template


def test_render_with_title_and_url():
    content = TemplateContent(
        inviter="Alice",
        date="2025-08-20 14:00",
        place="Gangnam Station",
        title="주말 브런치",
        meeting_url="https://meet.example/abc",
    )

    template = render_memo_template(content)

    assert "📋 주말 브런치\n🕒 2025-08-20 14:00\n" in template["text"]
    assert template["link"] == {
        "web_url": "https://meet.example/abc",
        "mobile_web_url": "https://meet.example/abc",
    }


def test_render_treats_blank_title_and_url_as_absent():
    content = TemplateContent(
        inviter="Alice",
        date="2025-08-20 14:00",
        place="Gangnam Station",
        title="   ",
        meeting_url=" ",
    )

    template = render_memo_template(content)

    assert "📋" not in template["text"]
    assert "link" not in template


def test_encode_escapes_control_characters():
    template = {"object_type": "text", "text": 'say "hi"\nnext\tline\r C:\\temp'}

    encoded = encode_template_object(template)

    assert '\\"hi\\"' in encoded
    assert "C:\\\\temp" in encoded
    assert "\\n" in encoded
    assert "\\t" in encoded
    assert "\\r" in encoded
    assert json.loads(encoded) == template


def test_encode_keeps_nested_link_as_object():
    template = render_memo_template(
        TemplateContent(inviter="민수", date="d", place="p", meeting_url="https://meet.example/abc")
    )

    decoded = json.loads(encode_template_object(template))

    assert decoded["link"]["web_url"] == "https://meet.example/abc"
    assert "민수" in encode_template_object(template)


def test_encode_falls_back_to_empty_object():
    assert encode_template_object({"text": object()}) == EMPTY_TEMPLATE_OBJECT
