from __future__ import annotations

import argparse

from app.services.kakao_memo_client import KakaoMemoClient
from app.services.kakao_memo_dispatcher import KakaoMemoDispatcher
from app.services.kakao_template import (
    TemplateContent,
    encode_template_object,
    render_memo_template,
)


def main() -> None:
    parser = argparse.ArgumentParser(description="카카오 '나와의 채팅' 연동 점검 스크립트")
    parser.add_argument("--token", action="append", default=[], help="카카오 액세스 토큰 (여러 번 지정 가능)")
    parser.add_argument("--inviter", default="테스트사용자", help="초대자 이름")
    parser.add_argument("--title", default="카카오톡 연동 테스트", help="약속 제목")
    parser.add_argument("--date", default="08월 20일(수) 14:00", help="약속 일시 문자열")
    parser.add_argument("--place", default="강남역", help="약속 장소")
    parser.add_argument("--url", default=None, help="약속 상세 URL")
    parser.add_argument("--dry-run", action="store_true", help="전송 없이 template_object만 출력")
    args = parser.parse_args()

    content = TemplateContent(
        inviter=args.inviter,
        title=args.title,
        date=args.date,
        place=args.place,
        meeting_url=args.url,
    )
    if args.dry_run or not args.token:
        print(encode_template_object(render_memo_template(content)))
        return

    client = KakaoMemoClient()
    try:
        tokens = {index: token for index, token in enumerate(args.token, start=1)}
        result = KakaoMemoDispatcher(client).dispatch(tokens, content)
    finally:
        client.close()
    print("전송 결과:", result.message)
    print("성공:", result.sent_count, "/", result.total_count, "부분 성공:", result.is_partial_success)


if __name__ == "__main__":
    main()
