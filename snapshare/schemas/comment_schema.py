from datetime import datetime

from pydantic import BaseModel, Field

from snapshare.schemas.user_schema import UserResponse

# ─── 댓글 관련 요청/응답 스키마 정의 ─────────────────────────────────────

class CommentCreateRequest(BaseModel):
    """
    댓글 작성 요청 모델
    """
    text: str = Field(
        ..., description="댓글 내용"
    )

    model_config = {
        "json_schema_extra": {
            "example": {"text": "멋진 사진이네요!"}
        }
    }


class CommentResponse(BaseModel):
    """
    댓글 응답 모델 (작성자 정보, 투표 수 포함)
    """
    id: int = Field(
        ..., description="댓글 ID"
    )
    post_id: int = Field(
        ..., description="대상 포스트 ID"
    )
    user_id: int = Field(
        ..., description="작성자 ID"
    )
    text: str = Field(
        ..., description="댓글 내용"
    )
    upvotes: int = Field(
        0, description="추천 수"
    )
    downvotes: int = Field(
        0, description="비추천 수"
    )
    created: datetime = Field(
        ..., description="작성 시각"
    )
    author: UserResponse = Field(
        ..., description="작성자 정보"
    )

    model_config = {
        "from_attributes": True,
    }


class CommentDeleteResponse(BaseModel):
    """
    댓글 삭제 결과 모델
    """
    message: str = Field(
        ..., description="응답 메시지"
    )
    comments_count: int = Field(
        ..., description="삭제 후 포스트의 댓글 수"
    )
