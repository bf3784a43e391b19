"""atomic() 트랜잭션 경계 테스트"""

import pytest
from sqlalchemy import func, select, text

from snapshare.jwt.session_store import SessionStore
from snapshare.models.user import User
from snapshare.repositories.base_repository import atomic
from snapshare.repositories.exceptions import QueryExecutionError
from snapshare.services.auth_service import AuthService
from snapshare.utils.exceptions import ConflictError, NotFoundError, TransactionError


async def _user_count(session_factory):
    async with session_factory() as session:
        return await session.scalar(select(func.count(User.id)))


@pytest.mark.asyncio
async def test_commits_on_success(db, session_factory):
    async with atomic(db, "테스트"):
        db.add(User(email="ok@example.com", password="x"))

    assert await _user_count(session_factory) == 1


@pytest.mark.asyncio
async def test_domain_error_rolls_back_and_propagates(db, session_factory):
    with pytest.raises(NotFoundError):
        async with atomic(db, "테스트"):
            db.add(User(email="gone@example.com", password="x"))
            await db.flush()
            raise NotFoundError("missing")

    assert await _user_count(session_factory) == 0


@pytest.mark.asyncio
async def test_sql_error_becomes_transaction_error(db, session_factory):
    with pytest.raises(TransactionError) as exc_info:
        async with atomic(db, "테스트"):
            db.add(User(email="first@example.com", password="x"))
            await db.flush()
            await db.execute(text("SELECT * FROM no_such_table"))

    assert isinstance(exc_info.value, QueryExecutionError)
    assert await _user_count(session_factory) == 0


@pytest.mark.asyncio
async def test_unique_violation_during_register_is_conflict(db, monkeypatch):
    service = AuthService(db, SessionStore())
    await service.register("race@example.com", "pw")

    async def never_exists(email):
        return False

    # 중복 검사를 통과한 동시 가입 상황을 흉내낸다
    monkeypatch.setattr(service.user_repo, "exists_by_email", never_exists)

    with pytest.raises(ConflictError):
        await service.register("race@example.com", "pw")
