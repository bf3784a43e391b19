from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from snapshare.core.config import settings


def create_engine_for(url: str) -> AsyncEngine:
    """
    URL 스킴에 맞는 옵션으로 비동기 엔진을 생성
    - MySQL: utf8mb4 강제, 커넥션 재활용
    """
    if url.startswith("mysql"):
        return create_async_engine(
            url,
            echo=settings.DB_ECHO,
            connect_args={
                "charset": "utf8mb4",
                "init_command": "SET NAMES utf8mb4 COLLATE utf8mb4_unicode_ci",
            },
            pool_recycle=1800,
            pool_pre_ping=True,
        )
    return create_async_engine(url, echo=settings.DB_ECHO)


# 비동기 엔진 및 세션 팩토리 생성
async_engine = create_engine_for(settings.DATABASE_URL)
async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# ORM 베이스
Base = declarative_base()


def utcnow() -> datetime:
    """timezone 정보 없는 UTC 현재 시각 (DateTime 컬럼 기본값)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def init_db(engine: AsyncEngine = async_engine) -> None:
    """
    애플리케이션 시작 시 호출하여 메타데이터 기반 테이블을 생성
    """
    # 모델 import로 메타데이터 등록
    from snapshare.models import (  # noqa: F401
        user, post, comment, post_vote, comment_vote, post_analytics
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 종속성: 요청마다 새로운 DB 세션을 생성 후 반환
    """
    async with async_session_factory() as session:
        yield session
