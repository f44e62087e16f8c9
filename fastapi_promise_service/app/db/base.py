# Alembic autogenerate 가 모든 테이블을 인식하도록 도메인 모델까지 함께 로드한다.
from app.models import Base, domain  # noqa: F401

__all__ = ["Base"]
