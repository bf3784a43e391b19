from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.models.comment import Comment
from snapshare.repositories.base_repository import BaseRepository


class CommentRepository(BaseRepository):
    """
    댓글 데이터 액세스 객체
    - Comment 엔티티 조회/생성/삭제 및 댓글 수 집계
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    def add(self, comment: Comment) -> None:
        self.session.add(comment)

    async def get_by_id(self, comment_id: int) -> Optional[Comment]:
        return await self.session.get(Comment, comment_id)

    async def lock_by_id(self, comment_id: int) -> bool:
        """
        Comment 행에 쓰기 잠금을 걸고 존재 여부 반환
        """
        query = select(Comment.id).where(Comment.id == comment_id).with_for_update()
        result = await self.session.execute(query)
        return result.first() is not None

    async def get_with_author(self, comment_id: int) -> Optional[Comment]:
        """작성자 정보를 포함하여 다시 로딩한 Comment 반환"""
        query = (
            select(Comment)
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.unique().scalars().first()

    async def count_by_post(self, post_id: int) -> int:
        """포스트에 남아있는 댓글 수 (COUNT 집계)"""
        query = select(func.count(Comment.id)).where(Comment.post_id == post_id)
        result = await self.session.execute(query)
        return int(result.scalar_one())

    async def list_ids_by_posts(self, post_ids: Sequence[int]) -> List[int]:
        if not post_ids:
            return []
        query = select(Comment.id).where(Comment.post_id.in_(post_ids))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_id_post_pairs_by_user(self, user_id: int) -> List[Tuple[int, int]]:
        """사용자가 작성한 댓글의 (comment_id, post_id) 목록"""
        query = select(Comment.id, Comment.post_id).where(Comment.user_id == user_id)
        result = await self.session.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def delete_by_id(self, comment_id: int) -> None:
        await self.session.execute(delete(Comment).where(Comment.id == comment_id))

    async def delete_by_ids(self, comment_ids: Sequence[int]) -> None:
        if not comment_ids:
            return
        await self.session.execute(delete(Comment).where(Comment.id.in_(comment_ids)))

    async def update_vote_counts(self, comment_id: int, upvotes: int, downvotes: int) -> None:
        """댓글의 캐시된 투표 수를 집계 결과로 덮어씀"""
        comment = await self.session.get(Comment, comment_id)
        if comment is not None:
            comment.upvotes = upvotes
            comment.downvotes = downvotes
