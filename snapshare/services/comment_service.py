import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.models.comment import Comment
from snapshare.repositories.analytics_repository import AnalyticsRepository
from snapshare.repositories.base_repository import atomic
from snapshare.repositories.comment_repository import CommentRepository
from snapshare.repositories.post_repository import PostRepository
from snapshare.repositories.vote_repository import VoteRepository
from snapshare.services.analytics import AnalyticsService
from snapshare.utils.exceptions import BadRequestError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


class CommentService:
    """
    댓글 작성/삭제 서비스
    - 포스트의 comments_count 집계를 같은 트랜잭션에서 함께 갱신
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.post_repo = PostRepository(db)
        self.comment_repo = CommentRepository(db)
        self.analytics_repo = AnalyticsRepository(db)
        self.comment_votes = VoteRepository.for_comments(db)
        self.analytics = AnalyticsService(db)

    async def create_comment(self, post_id: int, user_id: int, text: Optional[str]) -> Comment:
        """
        댓글 작성
        - 집계 행이 있으면 comments_count + 1, 없으면 새로 생성
        - 작성자 정보를 포함한 Comment 반환
        Raises:
            BadRequestError: 내용이 비어있을 때
            NotFoundError: 포스트가 없을 때
        """
        text = (text or "").strip()
        if not text:
            raise BadRequestError("댓글 내용을 입력해 주세요.")

        async with atomic(self.db, "댓글 작성"):
            # 같은 포스트의 댓글 수 갱신을 직렬화
            if not await self.post_repo.lock_by_id(post_id):
                raise NotFoundError(f"포스트 ID {post_id}를 찾을 수 없습니다.")

            comment = Comment(post_id=post_id, user_id=user_id, text=text)
            self.comment_repo.add(comment)
            await self.comment_repo.flush()

            analytics = await self.analytics_repo.find_by_post(post_id)
            if analytics is not None:
                analytics.comments_count += 1
            else:
                # 방금 추가한 댓글까지 포함하여 집계된 값으로 생성됨
                await self.analytics.ensure_post_analytics(post_id)
            await self.comment_repo.flush()

        logger.info(
            "댓글 작성: comment_id=%s post_id=%s user_id=%s", comment.id, post_id, user_id
        )
        return await self.comment_repo.get_with_author(comment.id)

    async def delete_comment(self, comment_id: int, user_id: int) -> int:
        """
        댓글 삭제 (작성자 본인만)
        - 댓글의 투표 → 댓글 순으로 삭제 후 남은 댓글 수를 COUNT로 다시 저장
        - 갱신된 comments_count 반환
        """
        async with atomic(self.db, "댓글 삭제"):
            comment = await self.comment_repo.get_by_id(comment_id)
            if comment is None:
                raise NotFoundError(f"댓글 ID {comment_id}를 찾을 수 없습니다.")
            if comment.user_id != user_id:
                raise UnauthorizedError("본인이 작성한 댓글만 삭제할 수 있습니다.")
            post_id = comment.post_id

            await self.post_repo.lock_by_id(post_id)
            await self.comment_votes.delete_by_targets([comment_id])
            await self.comment_repo.delete_by_id(comment_id)
            remaining = await self.analytics.refresh_comments_count(post_id)

        logger.info(
            "댓글 삭제: comment_id=%s post_id=%s (남은 댓글 %d)", comment_id, post_id, remaining
        )
        return remaining
