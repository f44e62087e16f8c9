from fastapi import APIRouter

from . import health, meetings, notifications, users

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(meetings.router)
api_router.include_router(notifications.router)
api_router.include_router(users.router)
