import logging
from typing import Iterable, List, Optional, Union

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.models.post import Post
from snapshare.models.post_analytics import PostAnalytics
from snapshare.repositories.analytics_repository import AnalyticsRepository
from snapshare.repositories.base_repository import atomic
from snapshare.repositories.comment_repository import CommentRepository
from snapshare.repositories.post_repository import PostRepository
from snapshare.repositories.vote_repository import VoteRepository
from snapshare.services.storage_service import ImageStorage
from snapshare.utils.exceptions import (
    ApiError, BadRequestError, NotFoundError, UnauthorizedError
)
from snapshare.utils.tags import encode_tags, normalize_tags

logger = logging.getLogger(__name__)

TagsInput = Optional[Union[str, Iterable[str]]]


def _require_text(value: Optional[str], label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise BadRequestError(f"{label}을(를) 입력해 주세요.")
    return cleaned


def _require_tags(tags: TagsInput) -> List[str]:
    cleaned = normalize_tags(tags)
    if not cleaned:
        raise BadRequestError("태그를 하나 이상 입력해 주세요.")
    return cleaned


class PostService:
    """
    포스트 관련 비즈니스 로직 서비스
    - 조회/검색, 생성(포스트 + 집계 행), 수정, 삭제(연관 데이터 포함)
    """

    def __init__(self, db: AsyncSession, storage: Optional[ImageStorage] = None):
        self.db = db
        self.storage = storage
        self.post_repo = PostRepository(db)
        self.comment_repo = CommentRepository(db)
        self.analytics_repo = AnalyticsRepository(db)
        self.post_votes = VoteRepository.for_posts(db)
        self.comment_votes = VoteRepository.for_comments(db)

    # ==================== 조회 ====================
    async def list_posts(self) -> List[Post]:
        return await self.post_repo.list_all()

    async def list_posts_by_user(self, user_id: int) -> List[Post]:
        return await self.post_repo.list_by_user(user_id)

    async def get_post(self, post_id: int) -> Post:
        """
        댓글(작성자 포함)까지 로딩한 포스트 반환
        Raises:
            NotFoundError: 포스트가 없을 때
        """
        post = await self.post_repo.get_detail(post_id)
        if post is None:
            raise NotFoundError(f"포스트 ID {post_id}를 찾을 수 없습니다.")
        return post

    async def search_posts(
        self,
        term: Optional[str] = None,
        tags: TagsInput = None,
    ) -> List[Post]:
        """
        제목/설명 검색어 OR 태그 검색 (합집합)
        - 검색 조건이 모두 비어있으면 전체 목록
        """
        term = (term or "").strip() or None
        tag_terms = [tag.lower() for tag in normalize_tags(tags)]
        posts = await self.post_repo.search(term, tag_terms)
        logger.info("포스트 검색: term=%r tags=%s → %d건", term, tag_terms, len(posts))
        return posts

    # ==================== 생성 ====================
    async def create_post(
        self,
        user_id: int,
        title: Optional[str],
        description: Optional[str],
        tags: TagsInput,
        image: Optional[UploadFile] = None,
    ) -> Post:
        """
        포스트와 집계 행(0으로 초기화)을 하나의 트랜잭션으로 생성
        - 이미지는 트랜잭션 전에 저장하고, 트랜잭션이 실패하면 삭제
        Raises:
            BadRequestError: 필수값 누락 또는 업로드 제약 위반
            TransactionError: DB 처리 실패 (전체 롤백)
        """
        # 1) 입력 검증
        title = _require_text(title, "제목")
        description = _require_text(description, "설명")
        tag_list = _require_tags(tags)

        # 2) 이미지 저장
        img_path = None
        if image is not None and image.filename:
            if self.storage is None:
                raise BadRequestError("이미지 저장소가 설정되지 않았습니다.")
            img_path = await self.storage.store(image)

        # 3) 포스트 + 집계 행 저장
        post = Post(
            user_id=user_id,
            title=title,
            description=description,
            tags=encode_tags(tag_list),
            img_path=img_path,
        )
        try:
            async with atomic(self.db, "포스트 생성"):
                self.post_repo.add(post)
                await self.post_repo.flush()
                self.analytics_repo.add(
                    PostAnalytics(post_id=post.id, upvotes=0, downvotes=0, comments_count=0)
                )
                await self.post_repo.flush()
        except ApiError:
            if img_path and self.storage is not None:
                self.storage.delete(img_path)
            raise

        logger.info("포스트 생성: post_id=%s user_id=%s", post.id, user_id)
        return await self.post_repo.refresh_with_relations(post.id)

    # ==================== 수정 ====================
    async def update_post(
        self,
        post_id: int,
        user_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: TagsInput = None,
    ) -> Post:
        """
        작성자 본인만 제목/설명/태그를 수정 (전달된 필드만, 빈 값은 허용하지 않음)
        """
        async with atomic(self.db, "포스트 수정"):
            post = await self.post_repo.get_by_id(post_id)
            if post is None:
                raise NotFoundError(f"포스트 ID {post_id}를 찾을 수 없습니다.")
            if post.user_id != user_id:
                raise UnauthorizedError("본인이 작성한 포스트만 수정할 수 있습니다.")

            if title is not None:
                post.title = _require_text(title, "제목")
            if description is not None:
                post.description = _require_text(description, "설명")
            if tags is not None:
                post.tags = encode_tags(_require_tags(tags))
            await self.post_repo.flush()

        logger.info("포스트 수정: post_id=%s", post_id)
        return await self.post_repo.refresh_with_relations(post_id)

    # ==================== 삭제 ====================
    async def delete_post(self, post_id: int, user_id: int) -> None:
        """
        포스트와 연관 데이터를 의존 순서대로 삭제
        1) 댓글의 투표 → 2) 댓글 → 3) 포스트 투표 → 4) 집계 행 → 5) 포스트
        - 이미지 파일은 커밋 후 best-effort로 삭제
        """
        async with atomic(self.db, "포스트 삭제"):
            post = await self.post_repo.get_by_id(post_id)
            if post is None:
                raise NotFoundError(f"포스트 ID {post_id}를 찾을 수 없습니다.")
            if post.user_id != user_id:
                raise UnauthorizedError("본인이 작성한 포스트만 삭제할 수 있습니다.")
            img_path = post.img_path

            comment_ids = await self.comment_repo.list_ids_by_posts([post_id])
            await self.comment_votes.delete_by_targets(comment_ids)
            await self.comment_repo.delete_by_ids(comment_ids)
            await self.post_votes.delete_by_targets([post_id])
            await self.analytics_repo.delete_by_posts([post_id])
            await self.post_repo.delete_by_ids([post_id])

        logger.info(
            "포스트 삭제: post_id=%s (댓글 %d건 포함)", post_id, len(comment_ids)
        )
        if img_path and self.storage is not None:
            self.storage.delete(img_path)
