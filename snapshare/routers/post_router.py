import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.core.database import get_db_session
from snapshare.dependencies import get_current_user, get_image_storage
from snapshare.models.post import Post
from snapshare.models.user import User
from snapshare.schemas.auth_schema import MessageResponse
from snapshare.schemas.comment_schema import CommentCreateRequest, CommentResponse
from snapshare.schemas.post_schema import (
    PostDetailResponse,
    PostResponse,
    PostSearchRequest,
    PostUpdateRequest,
)
from snapshare.schemas.user_schema import UserResponse
from snapshare.schemas.vote_schema import VoteRequest, VoteResponse
from snapshare.services.comment_service import CommentService
from snapshare.services.post_service import PostService
from snapshare.services.storage_service import ImageStorage
from snapshare.services.vote_service import VoteService
from snapshare.utils.tags import decode_tags

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/posts",
    tags=["Post"],
)


def to_post_response(post: Post) -> PostResponse:
    """
    Post 모델 인스턴스를 PostResponse 스키마로 변환
    - 집계 행이 없으면 0으로 표시
    """
    analytics = post.analytics
    return PostResponse(
        id=post.id,
        user_id=post.user_id,
        title=post.title,
        description=post.description,
        tags=decode_tags(post.tags),
        img_path=post.img_path,
        created=post.created,
        updated=post.updated,
        upvotes=analytics.upvotes if analytics else 0,
        downvotes=analytics.downvotes if analytics else 0,
        comments_count=analytics.comments_count if analytics else 0,
        author=UserResponse.model_validate(post.author),
    )


def to_post_detail_response(post: Post) -> PostDetailResponse:
    """
    댓글 목록을 포함한 상세 응답으로 변환
    """
    return PostDetailResponse(
        **to_post_response(post).model_dump(),
        comments=[CommentResponse.model_validate(c) for c in post.comments],
    )

@router.get(
    "",
    response_model=List[PostResponse],
)
async def list_posts(
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    """전체 포스트 목록 (최신순)"""
    posts = await PostService(db).list_posts()
    return [to_post_response(p) for p in posts]

@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_post(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[List[str]] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
) -> PostResponse:
    """
    새 포스트 작성 (multipart/form-data)
    - tags는 여러 번 전달하거나 쉼표로 구분하여 전달
    """
    post = await PostService(db, storage).create_post(
        user_id=current_user.id,
        title=title,
        description=description,
        tags=tags,
        image=image,
    )
    return to_post_response(post)

@router.post(
    "/search",
    response_model=List[PostResponse],
)
async def search_posts(
    req: PostSearchRequest,
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    """
    제목/설명 검색어 OR 태그 검색
    """
    posts = await PostService(db).search_posts(term=req.term, tags=req.tags)
    return [to_post_response(p) for p in posts]

@router.get(
    "/user/{user_id}",
    response_model=List[PostResponse],
)
async def list_posts_by_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    posts = await PostService(db).list_posts_by_user(user_id)
    return [to_post_response(p) for p in posts]

@router.get(
    "/{post_id}",
    response_model=PostDetailResponse,
)
async def get_post(
    post_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> PostDetailResponse:
    """
    포스트 상세 조회 (댓글 포함)
    """
    post = await PostService(db).get_post(post_id)
    return to_post_detail_response(post)

@router.put(
    "/{post_id}",
    response_model=PostResponse,
)
async def update_post(
    post_id: int,
    req: PostUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    """
    포스트 수정 (작성자 본인만)
    """
    post = await PostService(db).update_post(
        post_id,
        current_user.id,
        title=req.title,
        description=req.description,
        tags=req.tags,
    )
    return to_post_response(post)

@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
)
async def delete_post(
    post_id: int,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
) -> MessageResponse:
    """
    포스트 삭제 (작성자 본인만)
    - 댓글, 투표, 집계 정보를 함께 삭제
    """
    await PostService(db, storage).delete_post(post_id, current_user.id)
    return MessageResponse(message="포스트가 삭제되었습니다.")

@router.post(
    "/{post_id}/vote",
    response_model=VoteResponse,
)
async def vote_post(
    post_id: int,
    req: VoteRequest,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
) -> VoteResponse:
    """
    포스트 추천/비추천
    - 같은 방향으로 다시 요청하면 취소, 반대 방향이면 전환
    """
    counts = await VoteService(db).vote_post(current_user.id, post_id, req.vote)
    return VoteResponse(**counts.as_dict())

@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    req: CommentCreateRequest,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
) -> CommentResponse:
    """
    포스트에 댓글 작성
    """
    comment = await CommentService(db).create_comment(post_id, current_user.id, req.text)
    return CommentResponse.model_validate(comment)
