import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.repositories.exceptions import DatabaseCommitError, QueryExecutionError
from snapshare.utils.exceptions import ApiError

logger = logging.getLogger(__name__)


# ==================== 베이스 Repository ====================
class BaseRepository:
    """Repository 베이스 클래스"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def flush(self) -> None:
        """보류 중인 변경 사항을 DB로 전송 (커밋하지 않음)"""
        await self.session.flush()


# ==================== 트랜잭션 경계 ====================
@asynccontextmanager
async def atomic(session: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """
    하나의 요청 작업을 단일 트랜잭션으로 묶는 컨텍스트 매니저
    - 블록이 정상 종료되면 커밋
    - ApiError(도메인 예외)는 롤백 후 그대로 전달
    - 블록 안의 SQLAlchemyError는 롤백 후 QueryExecutionError로 변환
    - 커밋 실패는 롤백 후 DatabaseCommitError로 변환
    (두 예외 모두 TransactionError의 하위 클래스)
    """
    try:
        yield session
        await session.flush()
    except ApiError:
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error("%s 트랜잭션 실패, 롤백: %s", operation, e)
        await session.rollback()
        raise QueryExecutionError(f"{operation} 처리 중 오류가 발생했습니다.") from e

    try:
        await session.commit()
        logger.debug("%s 커밋 완료", operation)
    except SQLAlchemyError as e:
        logger.error("%s 커밋 실패, 롤백: %s", operation, e)
        await session.rollback()
        raise DatabaseCommitError(f"{operation} 저장 중 오류가 발생했습니다.") from e
