import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from snapshare.models.post import Post
from snapshare.repositories.base_repository import BaseRepository
from snapshare.repositories.exceptions import QueryExecutionError
from snapshare.utils.tags import encoded_fragment, tags_contain_any

logger = logging.getLogger(__name__)


def _like_pattern(term: str) -> str:
    """대소문자 무시 부분 일치용 LIKE 패턴 (와일드카드 문자는 이스케이프)"""
    escaped = (
        term.lower()
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


def _matches(post: Post, term: Optional[str], tag_terms: Sequence[str]) -> bool:
    """검색 결과 행이 검색어 또는 태그 값과 실제로 일치하는지"""
    if term:
        lowered = term.lower()
        if lowered in (post.title or "").lower() or lowered in (post.description or "").lower():
            return True
    return tags_contain_any(post.tags, tag_terms)


# ==================== 쿼리 빌더 클래스 ====================
class PostQueryBuilder:
    """Post 엔티티 쿼리 빌더"""

    @staticmethod
    def base_query():
        """작성자/집계 정보를 포함한 기본 쿼리 (최신순)"""
        return select(Post).order_by(Post.created.desc(), Post.id.desc())

    @staticmethod
    def build_detail_query(post_id: int):
        """댓글과 댓글 작성자까지 포함한 단건 조회 쿼리"""
        return (
            select(Post)
            .options(selectinload(Post.comments))
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )

    @staticmethod
    def build_search_query(term: Optional[str], tags: Sequence[str]):
        """
        검색 쿼리
        - 제목/설명에 검색어 포함 OR 태그에 검색 태그 중 하나라도 포함 (합집합)
        - 태그 조건은 저장된 JSON 문자열에 대한 1차 필터 (정확한 비교는 PostRepository.search)
        - 조건이 하나도 없으면 전체 조회
        """
        conditions = []
        if term:
            pattern = _like_pattern(term)
            conditions.append(func.lower(Post.title).like(pattern, escape="\\"))
            conditions.append(func.lower(Post.description).like(pattern, escape="\\"))
        for tag in tags:
            if tag:
                conditions.append(
                    func.lower(Post.tags).like(_like_pattern(encoded_fragment(tag)), escape="\\")
                )

        query = PostQueryBuilder.base_query()
        if conditions:
            query = query.where(or_(*conditions))
        return query


# ==================== 메인 Repository 클래스 ====================
class PostRepository(BaseRepository):
    """
    비동기 포스트 데이터 액세스 객체
    - Post 엔티티의 저장, 조회, 삭제 담당
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def _fetch_all(self, query, label: str) -> List[Post]:
        try:
            result = await self.session.execute(query)
            posts = list(result.unique().scalars().all())
            logger.debug(f"{label}: found={len(posts)}")
            return posts
        except SQLAlchemyError as e:
            logger.error(f"{label} 실패: {e}")
            raise QueryExecutionError(f"{label} 중 오류: {e}")

    def add(self, post: Post) -> None:
        """Post 엔티티를 세션에 추가"""
        self.session.add(post)

    async def get_by_id(self, post_id: int) -> Optional[Post]:
        """id로 Post 조회"""
        return await self.session.get(Post, post_id)

    async def lock_by_id(self, post_id: int) -> bool:
        """
        Post 행에 쓰기 잠금(SELECT ... FOR UPDATE)을 걸고 존재 여부 반환
        - 같은 포스트에 대한 동시 투표를 직렬화하기 위해 사용
        """
        query = select(Post.id).where(Post.id == post_id).with_for_update()
        result = await self.session.execute(query)
        return result.first() is not None

    async def get_detail(self, post_id: int) -> Optional[Post]:
        """댓글 목록까지 로딩한 Post 조회"""
        result = await self.session.execute(PostQueryBuilder.build_detail_query(post_id))
        return result.unique().scalars().first()

    async def refresh_with_relations(self, post_id: int) -> Optional[Post]:
        """
        커밋 이후 응답 생성을 위해 작성자/집계 관계를 다시 로딩
        """
        query = (
            select(Post)
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.unique().scalars().first()

    async def list_all(self) -> List[Post]:
        """전체 포스트 목록 (최신순)"""
        return await self._fetch_all(PostQueryBuilder.base_query(), "전체 포스트 조회")

    async def list_by_user(self, user_id: int) -> List[Post]:
        """특정 사용자의 포스트 목록"""
        query = PostQueryBuilder.base_query().where(Post.user_id == user_id)
        return await self._fetch_all(query, f"사용자 포스트 조회(user_id={user_id})")

    async def search(self, term: Optional[str], tags: Sequence[str]) -> List[Post]:
        """
        검색어/태그 합집합 검색
        - SQL LIKE는 JSON의 대괄호/따옴표/쉼표에도 걸리므로 태그 값 기준으로 다시 거름
        """
        query = PostQueryBuilder.build_search_query(term, tags)
        posts = await self._fetch_all(query, "포스트 검색")
        tag_terms = [tag for tag in tags if tag]
        if not tag_terms:
            return posts
        return [post for post in posts if _matches(post, term, tag_terms)]

    async def list_ids_by_user(self, user_id: int) -> List[int]:
        result = await self.session.execute(select(Post.id).where(Post.user_id == user_id))
        return list(result.scalars().all())

    async def list_image_paths_by_user(self, user_id: int) -> List[str]:
        """사용자가 작성한 포스트들의 이미지 경로 (없는 값 제외)"""
        query = select(Post.img_path).where(
            Post.user_id == user_id,
            Post.img_path.is_not(None),
        )
        result = await self.session.execute(query)
        return [path for path in result.scalars().all() if path]

    async def delete_by_ids(self, post_ids: Sequence[int]) -> None:
        if not post_ids:
            return
        await self.session.execute(delete(Post).where(Post.id.in_(post_ids)))
