from typing import List, Optional, Sequence, Type, Union

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.models.comment_vote import CommentVote
from snapshare.models.post_vote import PostVote
from snapshare.models.vote_type import VoteType
from snapshare.repositories.base_repository import BaseRepository

VoteModel = Union[PostVote, CommentVote]


class VoteRepository(BaseRepository):
    """
    투표 테이블 공통 데이터 액세스 객체
    - 포스트 투표와 댓글 투표는 대상 컬럼만 다르고 동작은 동일
    - 투표 여부는 항상 '행의 존재'로 판단 (vote 값의 참/거짓으로 판단하지 않음)
    """

    def __init__(self, session: AsyncSession, model: Type[VoteModel], target_field: str):
        super().__init__(session)
        self.model = model
        self.target_field = target_field

    @classmethod
    def for_posts(cls, session: AsyncSession) -> "VoteRepository":
        return cls(session, PostVote, "post_id")

    @classmethod
    def for_comments(cls, session: AsyncSession) -> "VoteRepository":
        return cls(session, CommentVote, "comment_id")

    @property
    def _target_column(self):
        return getattr(self.model, self.target_field)

    async def find(self, user_id: int, target_id: int) -> Optional[VoteModel]:
        """(user_id, target_id) 쌍의 투표 행 조회, 없으면 None"""
        query = select(self.model).where(
            self.model.user_id == user_id,
            self._target_column == target_id,
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    def add(self, user_id: int, target_id: int, vote: VoteType) -> VoteModel:
        row = self.model(user_id=user_id, vote=vote, **{self.target_field: target_id})
        self.session.add(row)
        return row

    async def remove(self, row: VoteModel) -> None:
        await self.session.delete(row)

    async def count(self, target_id: int) -> tuple[int, int]:
        """
        대상의 (추천 수, 비추천 수)를 투표 테이블에서 직접 집계
        """
        query = select(
            func.coalesce(func.sum(case((self.model.vote == VoteType.UP, 1), else_=0)), 0),
            func.coalesce(func.sum(case((self.model.vote == VoteType.DOWN, 1), else_=0)), 0),
        ).where(self._target_column == target_id)
        result = await self.session.execute(query)
        upvotes, downvotes = result.one()
        return int(upvotes), int(downvotes)

    async def list_target_ids_by_user(self, user_id: int) -> List[int]:
        """사용자가 투표한 대상 id 목록"""
        query = select(self._target_column).where(self.model.user_id == user_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def delete_by_targets(self, target_ids: Sequence[int]) -> None:
        if not target_ids:
            return
        await self.session.execute(
            delete(self.model).where(self._target_column.in_(target_ids))
        )

    async def delete_by_user(self, user_id: int) -> None:
        await self.session.execute(
            delete(self.model).where(self.model.user_id == user_id)
        )
