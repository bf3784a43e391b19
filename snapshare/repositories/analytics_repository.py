from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.models.post_analytics import PostAnalytics
from snapshare.repositories.base_repository import BaseRepository


class AnalyticsRepository(BaseRepository):
    """
    포스트 집계(PostAnalytics) 데이터 액세스 객체
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def find_by_post(self, post_id: int) -> Optional[PostAnalytics]:
        query = select(PostAnalytics).where(PostAnalytics.post_id == post_id)
        result = await self.session.execute(query)
        return result.scalars().first()

    def add(self, analytics: PostAnalytics) -> None:
        self.session.add(analytics)

    async def delete_by_posts(self, post_ids: Sequence[int]) -> None:
        if not post_ids:
            return
        await self.session.execute(
            delete(PostAnalytics).where(PostAnalytics.post_id.in_(post_ids))
        )
