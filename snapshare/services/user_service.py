import logging
from typing import Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.jwt.session_store import SessionStore, session_store
from snapshare.models.user import User
from snapshare.repositories.analytics_repository import AnalyticsRepository
from snapshare.repositories.base_repository import atomic
from snapshare.repositories.comment_repository import CommentRepository
from snapshare.repositories.post_repository import PostRepository
from snapshare.repositories.user_repository import UserRepository
from snapshare.repositories.vote_repository import VoteRepository
from snapshare.services.analytics import AnalyticsService
from snapshare.services.auth_service import verify_password
from snapshare.services.storage_service import ImageStorage
from snapshare.utils.exceptions import (
    ApiError, BadRequestError, NotFoundError, UnauthorizedError
)

logger = logging.getLogger(__name__)


class UserService:
    """
    사용자 프로필 조회/수정 및 회원 탈퇴 서비스
    """

    def __init__(
        self,
        db: AsyncSession,
        storage: Optional[ImageStorage] = None,
        store: SessionStore = session_store,
    ):
        self.db = db
        self.storage = storage
        self.store = store
        self.user_repo = UserRepository(db)
        self.post_repo = PostRepository(db)
        self.comment_repo = CommentRepository(db)
        self.analytics_repo = AnalyticsRepository(db)
        self.post_votes = VoteRepository.for_posts(db)
        self.comment_votes = VoteRepository.for_comments(db)
        self.analytics = AnalyticsService(db)

    async def get_user(self, user_id: int) -> User:
        user = await self.user_repo.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"사용자 ID {user_id}를 찾을 수 없습니다.")
        return user

    async def update_user(
        self,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        image: Optional[UploadFile] = None,
        remove_image: bool = False,
    ) -> Tuple[User, bool]:
        """
        프로필 수정
        - 전달된 필드를 현재 값과 비교하여 모두 같으면 저장하지 않음
        - (User, 변경 여부) 반환
        - 이미지가 교체/삭제되면 이전 파일은 커밋 후 best-effort로 삭제
        """
        user = await self.get_user(user_id)

        # 1) 변경 사항 수집
        changes = {}
        if first_name is not None and first_name != user.first_name:
            changes["first_name"] = first_name
        if last_name is not None and last_name != user.last_name:
            changes["last_name"] = last_name

        new_img_path = None
        if image is not None and image.filename:
            if self.storage is None:
                raise BadRequestError("이미지 저장소가 설정되지 않았습니다.")
            new_img_path = await self.storage.store(image)
            changes["img_path"] = new_img_path
        elif remove_image and user.img_path:
            changes["img_path"] = None

        if not changes:
            logger.info("프로필 변경 사항 없음: user_id=%s", user_id)
            return user, False

        # 2) 저장
        old_img_path = user.img_path
        try:
            async with atomic(self.db, "프로필 수정"):
                for field, value in changes.items():
                    setattr(user, field, value)
                await self.user_repo.flush()
        except ApiError:
            if new_img_path and self.storage is not None:
                self.storage.delete(new_img_path)
            raise

        # 3) 이전 이미지 정리
        if "img_path" in changes and old_img_path and self.storage is not None:
            self.storage.delete(old_img_path)

        logger.info("프로필 수정: user_id=%s fields=%s", user_id, sorted(changes))
        return user, True

    async def delete_user(self, user_id: int, password: str) -> None:
        """
        회원 탈퇴
        - 비밀번호를 다시 확인한 뒤 사용자와 소유 데이터를 하나의 트랜잭션으로 삭제
        - 삭제된 투표/댓글이 걸려있던 다른 포스트/댓글의 집계는 같은 트랜잭션에서 재계산
        - 이미지 파일 삭제와 세션 제거는 커밋 이후 수행
        Raises:
            UnauthorizedError: 비밀번호 불일치
            NotFoundError: 사용자가 없을 때
            TransactionError: DB 처리 실패 (전체 롤백)
        """
        user = await self.get_user(user_id)
        if not password or not verify_password(password, user.password):
            logger.warning("회원 탈퇴 실패 (비밀번호 불일치): user_id=%s", user_id)
            raise UnauthorizedError("비밀번호가 올바르지 않습니다.")

        async with atomic(self.db, "회원 탈퇴"):
            # 1) 삭제 대상 수집
            owned_post_ids = await self.post_repo.list_ids_by_user(user_id)
            image_paths = await self.post_repo.list_image_paths_by_user(user_id)
            if user.img_path:
                image_paths.append(user.img_path)

            comments_on_owned = await self.comment_repo.list_ids_by_posts(owned_post_ids)
            own_comment_pairs = await self.comment_repo.list_id_post_pairs_by_user(user_id)
            doomed_comment_ids = sorted(
                set(comments_on_owned) | {cid for cid, _ in own_comment_pairs}
            )

            # 2) 집계를 다시 계산해야 하는 다른 사용자의 포스트/댓글
            owned = set(owned_post_ids)
            doomed = set(doomed_comment_ids)
            posts_to_refresh = {pid for _, pid in own_comment_pairs if pid not in owned}
            posts_to_refresh |= {
                pid for pid in await self.post_votes.list_target_ids_by_user(user_id)
                if pid not in owned
            }
            comments_to_refresh = {
                cid for cid in await self.comment_votes.list_target_ids_by_user(user_id)
                if cid not in doomed
            }

            # 3) 의존 순서대로 삭제
            await self.comment_votes.delete_by_targets(doomed_comment_ids)
            await self.comment_votes.delete_by_user(user_id)
            await self.comment_repo.delete_by_ids(doomed_comment_ids)
            await self.post_votes.delete_by_targets(owned_post_ids)
            await self.post_votes.delete_by_user(user_id)
            await self.analytics_repo.delete_by_posts(owned_post_ids)
            await self.post_repo.delete_by_ids(owned_post_ids)
            await self.user_repo.delete_by_id(user_id)

            # 4) 집계 재계산
            for post_id in sorted(posts_to_refresh):
                await self.analytics.refresh_post(post_id)
            for comment_id in sorted(comments_to_refresh):
                await self.analytics.refresh_comment_votes(comment_id)

        logger.info(
            "회원 탈퇴: user_id=%s posts=%d comments=%d",
            user_id, len(owned_post_ids), len(doomed_comment_ids),
        )

        # 5) 커밋 이후 정리 (실패해도 탈퇴는 유지)
        self.store.revoke_user(user_id)
        if self.storage is not None:
            removed = self.storage.delete_many(image_paths)
            if removed != len(image_paths):
                logger.warning(
                    "일부 이미지 삭제 실패: user_id=%s (%d/%d)",
                    user_id, removed, len(image_paths),
                )
