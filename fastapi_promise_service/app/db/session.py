from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.db import hooks  # noqa: F401 - after_commit 리스너 등록


# 엔진 생성
engine = create_engine(
    settings.sqlalchemy_database_url,
    pool_pre_ping=True,               # 연결이 죽었는지 자동 체크
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
)

# 세션 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# 의존성 주입 함수
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
