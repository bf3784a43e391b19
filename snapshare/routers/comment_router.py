from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.core.database import get_db_session
from snapshare.dependencies import get_current_user
from snapshare.models.user import User
from snapshare.schemas.comment_schema import CommentDeleteResponse
from snapshare.schemas.vote_schema import VoteRequest, VoteResponse
from snapshare.services.comment_service import CommentService
from snapshare.services.vote_service import VoteService

router = APIRouter(
    prefix="/comments",
    tags=["Comment"],
)

@router.post(
    "/{comment_id}/vote",
    response_model=VoteResponse,
)
async def vote_comment(
    comment_id: int,
    req: VoteRequest,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
) -> VoteResponse:
    """
    댓글 추천/비추천
    - 같은 방향으로 다시 요청하면 취소, 반대 방향이면 전환
    """
    counts = await VoteService(db).vote_comment(current_user.id, comment_id, req.vote)
    return VoteResponse(**counts.as_dict())

@router.delete(
    "/{comment_id}",
    response_model=CommentDeleteResponse,
)
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
) -> CommentDeleteResponse:
    """
    댓글 삭제 (작성자 본인만)
    """
    remaining = await CommentService(db).delete_comment(comment_id, current_user.id)
    return CommentDeleteResponse(message="댓글이 삭제되었습니다.", comments_count=remaining)
