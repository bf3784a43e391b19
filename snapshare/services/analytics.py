"""
집계(analytics) 재계산 헬퍼

캐시된 카운터(post_analytics, comments.upvotes/downvotes)는 항상 원본 테이블
(post_votes, comment_votes, comments)에 대한 집계 쿼리 결과로 덮어쓴다.
증감 연산을 누적하지 않으므로 이전에 어긋난 값도 다음 갱신 때 바로잡힌다.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.models.post_analytics import PostAnalytics
from snapshare.repositories.analytics_repository import AnalyticsRepository
from snapshare.repositories.comment_repository import CommentRepository
from snapshare.repositories.vote_repository import VoteRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteCounts:
    """대상(포스트/댓글)의 투표 집계 결과"""
    upvotes: int
    downvotes: int

    def as_dict(self) -> dict:
        return {"upvotes": self.upvotes, "downvotes": self.downvotes}


class AnalyticsService:
    """
    집계 재계산 서비스
    - 호출자가 연 트랜잭션 안에서 동작하며 커밋하지 않음
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.analytics_repo = AnalyticsRepository(db)
        self.comment_repo = CommentRepository(db)
        self.post_votes = VoteRepository.for_posts(db)
        self.comment_votes = VoteRepository.for_comments(db)

    async def ensure_post_analytics(self, post_id: int) -> PostAnalytics:
        """
        포스트의 집계 행을 반환하고, 없으면 현재 집계 값으로 초기화하여 생성
        """
        analytics = await self.analytics_repo.find_by_post(post_id)
        if analytics is None:
            upvotes, downvotes = await self.post_votes.count(post_id)
            analytics = PostAnalytics(
                post_id=post_id,
                upvotes=upvotes,
                downvotes=downvotes,
                comments_count=await self.comment_repo.count_by_post(post_id),
            )
            self.analytics_repo.add(analytics)
            logger.info("post_id=%s 집계 행이 없어 새로 생성", post_id)
        return analytics

    async def refresh_post_votes(self, post_id: int) -> VoteCounts:
        """포스트 투표 수를 집계 쿼리로 다시 계산하여 저장"""
        upvotes, downvotes = await self.post_votes.count(post_id)
        analytics = await self.ensure_post_analytics(post_id)
        analytics.upvotes = upvotes
        analytics.downvotes = downvotes
        await self.db.flush()
        return VoteCounts(upvotes, downvotes)

    async def refresh_comment_votes(self, comment_id: int) -> VoteCounts:
        """댓글 투표 수를 집계 쿼리로 다시 계산하여 comments 테이블에 저장"""
        upvotes, downvotes = await self.comment_votes.count(comment_id)
        await self.comment_repo.update_vote_counts(comment_id, upvotes, downvotes)
        await self.db.flush()
        return VoteCounts(upvotes, downvotes)

    async def refresh_comments_count(self, post_id: int) -> int:
        """남아있는 댓글 수를 COUNT로 다시 계산하여 저장 (감소 연산 아님)"""
        remaining = await self.comment_repo.count_by_post(post_id)
        analytics = await self.ensure_post_analytics(post_id)
        analytics.comments_count = remaining
        await self.db.flush()
        return remaining

    async def refresh_post(self, post_id: int) -> None:
        """포스트의 투표 수와 댓글 수를 모두 재계산"""
        await self.refresh_post_votes(post_id)
        await self.refresh_comments_count(post_id)
