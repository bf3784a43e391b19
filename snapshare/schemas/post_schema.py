from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from snapshare.schemas.comment_schema import CommentResponse
from snapshare.schemas.user_schema import UserResponse

# ─── 포스트 관련 요청/응답 스키마 정의 ───────────────────────────────────

class PostSearchRequest(BaseModel):
    """
    포스트 검색 요청 모델
    - term: 제목/설명에서 찾을 검색어
    - tags: 태그 검색어 목록 (또는 쉼표로 구분된 문자열)
    - 두 조건은 OR로 결합되며, 모두 비어있으면 전체 목록
    """
    term: Optional[str] = Field(
        None, description="제목/설명 검색어"
    )
    tags: Optional[Union[List[str], str]] = Field(
        None, description="태그 검색어"
    )

    model_config = {
        "json_schema_extra": {
            "example": {"term": "sunset", "tags": ["beach", "travel"]}
        }
    }


class PostUpdateRequest(BaseModel):
    """
    포스트 수정 요청 모델 (전달된 필드만 수정)
    """
    title: Optional[str] = Field(
        None, description="수정할 제목"
    )
    description: Optional[str] = Field(
        None, description="수정할 설명"
    )
    tags: Optional[Union[List[str], str]] = Field(
        None, description="수정할 태그 목록"
    )


class PostResponse(BaseModel):
    """
    포스트 응답 모델
    - 집계 정보(추천/비추천/댓글 수)를 평탄화하여 포함
    """
    id: int = Field(
        ..., description="포스트 ID"
    )
    user_id: int = Field(
        ..., description="작성자 ID"
    )
    title: str = Field(
        ..., description="제목"
    )
    description: str = Field(
        ..., description="설명"
    )
    tags: List[str] = Field(
        default_factory=list, description="태그 목록"
    )
    img_path: Optional[str] = Field(
        None, description="이미지 URL"
    )
    created: datetime = Field(
        ..., description="작성 시각"
    )
    updated: datetime = Field(
        ..., description="마지막 수정 시각"
    )
    upvotes: int = Field(
        0, description="추천 수"
    )
    downvotes: int = Field(
        0, description="비추천 수"
    )
    comments_count: int = Field(
        0, description="댓글 수"
    )
    author: UserResponse = Field(
        ..., description="작성자 정보"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 1,
                "user_id": 42,
                "title": "노을",
                "description": "해변의 노을 사진",
                "tags": ["beach", "sunset"],
                "img_path": "/images/3f2a9c0d.jpg",
                "created": "2025-05-10T20:00:00",
                "updated": "2025-05-10T20:00:00",
                "upvotes": 3,
                "downvotes": 0,
                "comments_count": 1,
                "author": {
                    "id": 42,
                    "email": "test@example.com",
                    "first_name": "Gildong",
                    "last_name": "Hong",
                    "img_path": None,
                },
            }
        }
    }


class PostDetailResponse(PostResponse):
    """
    포스트 상세 응답 모델 (댓글 목록 포함)
    """
    comments: List[CommentResponse] = Field(
        default_factory=list, description="댓글 목록 (작성순)"
    )
