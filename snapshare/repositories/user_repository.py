from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.models.user import User
from snapshare.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    """
    사용자 관련 데이터 액세스 담당 Repository 클래스
    - User 엔티티 조회, 생성, 삭제 기능 제공
    """
    def __init__(self, session: AsyncSession):
        """
        session: 비동기 SQLAlchemy 세션
        """
        super().__init__(session)

    async def find_by_email(self, email: str) -> Optional[User]:
        """
        주어진 이메일과 일치하는 User 객체 반환
        """
        query = select(User).where(User.email == email)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        """
        주어진 id의 User 객체 반환
        """
        return await self.session.get(User, user_id)

    async def exists_by_email(self, email: str) -> bool:
        """
        주어진 이메일로 가입된 사용자가 있는지 확인
        """
        query = select(User.id).where(User.email == email)
        result = await self.session.execute(query)
        return result.first() is not None

    async def create_user(self, user: User) -> None:
        """
        새 User 엔티티를 세션에 추가
        """
        self.session.add(user)

    async def delete_by_id(self, user_id: int) -> None:
        """
        User 행 삭제 (연관 데이터는 호출자가 먼저 정리해야 함)
        """
        await self.session.execute(delete(User).where(User.id == user_id))
