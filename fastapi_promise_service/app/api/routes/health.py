from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/ping")
async def ping() -> dict[str, str]:
    return {
        "status": "ok",
        "kakao_notification": "enabled" if settings.kakao_notification_enabled else "disabled",
    }
