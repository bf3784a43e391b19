import logging
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.models.vote_type import VoteType
from snapshare.repositories.base_repository import atomic
from snapshare.repositories.comment_repository import CommentRepository
from snapshare.repositories.post_repository import PostRepository
from snapshare.repositories.vote_repository import VoteRepository
from snapshare.services.analytics import AnalyticsService, VoteCounts
from snapshare.utils.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


class VoteAction(str, Enum):
    """투표 요청이 투표 행에 적용된 결과"""
    ADDED = "added"
    REMOVED = "removed"
    SWITCHED = "switched"


def parse_vote(intent: str) -> VoteType:
    """
    'up' / 'down' 문자열을 VoteType으로 변환
    Raises:
        BadRequestError: 허용되지 않은 값일 때
    """
    try:
        return VoteType(intent)
    except ValueError:
        raise BadRequestError("유효하지 않은 투표 유형입니다. ('up' 또는 'down')")


class VoteService:
    """
    투표 엔진
    - 포스트/댓글 투표에 동일한 상태 전이(추가 / 취소 / 전환)를 적용
    - 적용 후 집계 쿼리로 카운터를 다시 계산하여 저장하고 반환
    - 투표 행 변경과 카운터 갱신은 하나의 트랜잭션으로 커밋
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.post_repo = PostRepository(db)
        self.comment_repo = CommentRepository(db)
        self.post_votes = VoteRepository.for_posts(db)
        self.comment_votes = VoteRepository.for_comments(db)
        self.analytics = AnalyticsService(db)

    async def _apply(
        self,
        votes: VoteRepository,
        user_id: int,
        target_id: int,
        vote: VoteType,
    ) -> VoteAction:
        """
        기존 투표 행 존재 여부에 따라 상태 전이 적용
        1) 행 없음 → 새 행 추가
        2) 같은 방향 → 행 삭제 (투표 취소)
        3) 반대 방향 → 행의 값을 변경
        """
        existing = await votes.find(user_id, target_id)
        if existing is None:
            votes.add(user_id, target_id, vote)
            action = VoteAction.ADDED
        elif existing.vote == vote:
            await votes.remove(existing)
            action = VoteAction.REMOVED
        else:
            existing.vote = vote
            action = VoteAction.SWITCHED
        await self.db.flush()
        return action

    async def vote_post(self, user_id: int, post_id: int, intent: str) -> VoteCounts:
        """
        포스트 투표 처리 후 최신 추천/비추천 수 반환
        Raises:
            BadRequestError: 투표 유형 오류
            NotFoundError: 포스트가 없을 때
            TransactionError: DB 처리 실패 (전체 롤백)
        """
        vote = parse_vote(intent)
        async with atomic(self.db, "포스트 투표"):
            if not await self.post_repo.lock_by_id(post_id):
                raise NotFoundError(f"포스트 ID {post_id}를 찾을 수 없습니다.")
            action = await self._apply(self.post_votes, user_id, post_id, vote)
            counts = await self.analytics.refresh_post_votes(post_id)

        logger.info(
            "포스트 투표: user_id=%s post_id=%s vote=%s action=%s counts=%s",
            user_id, post_id, vote.value, action.value, counts.as_dict(),
        )
        return counts

    async def vote_comment(self, user_id: int, comment_id: int, intent: str) -> VoteCounts:
        """
        댓글 투표 처리 후 최신 추천/비추천 수 반환
        """
        vote = parse_vote(intent)
        async with atomic(self.db, "댓글 투표"):
            if not await self.comment_repo.lock_by_id(comment_id):
                raise NotFoundError(f"댓글 ID {comment_id}를 찾을 수 없습니다.")
            action = await self._apply(self.comment_votes, user_id, comment_id, vote)
            counts = await self.analytics.refresh_comment_votes(comment_id)

        logger.info(
            "댓글 투표: user_id=%s comment_id=%s vote=%s action=%s counts=%s",
            user_id, comment_id, vote.value, action.value, counts.as_dict(),
        )
        return counts
