from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic import ConfigDict

# ─── 사용자 관련 응답 스키마 정의 ───────────────────────────────────────

class UserResponse(BaseModel):
    """
    사용자 공개 정보 모델 (비밀번호 해시 제외)
    - 포스트/댓글의 작성자 정보로도 사용
    """
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(
        ..., description="사용자 ID"
    )
    email: str = Field(
        ..., description="이메일 주소"
    )
    first_name: Optional[str] = Field(
        None, description="이름"
    )
    last_name: Optional[str] = Field(
        None, description="성"
    )
    img_path: Optional[str] = Field(
        None, description="프로필 이미지 URL"
    )


class UserProfileResponse(UserResponse):
    """
    사용자 프로필 조회 응답 모델
    """
    created: Optional[datetime] = Field(
        None, description="가입 시각"
    )


class UserUpdateResponse(BaseModel):
    """
    프로필 수정 결과 모델
    - changed가 False이면 변경 사항이 없어 저장하지 않은 경우
    """
    message: str = Field(
        ..., description="응답 메시지"
    )
    changed: bool = Field(
        ..., description="실제로 저장된 변경이 있었는지 여부"
    )
    user: UserProfileResponse = Field(
        ..., description="수정 후 사용자 정보"
    )
