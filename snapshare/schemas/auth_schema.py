from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field
from pydantic import ConfigDict

from snapshare.schemas.user_schema import UserResponse

# ─── 인증 관련 요청/응답 스키마 정의 ─────────────────────────────────────

class RegisterRequest(BaseModel):
    """
    회원가입 요청 모델
    - 이메일, 비밀번호 필수 / 이름은 선택
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "email":      "test@example.com",
                "password":   "securepassword",
                "first_name": "Gildong",
                "last_name":  "Hong",
            }
        },
    )

    email:      EmailStr      = Field(..., description="이메일 주소")
    password:   str           = Field(..., min_length=1, description="비밀번호")
    first_name: Optional[str] = Field(None, max_length=100, description="이름")
    last_name:  Optional[str] = Field(None, max_length=100, description="성")


class LoginRequest(BaseModel):
    """
    로그인 요청 모델
    - 이메일과 비밀번호를 사용하여 인증 수행
    """
    model_config = ConfigDict(extra="ignore")
    email:    EmailStr = Field(..., description="로그인용 이메일 주소")
    password: str      = Field(..., min_length=1, description="비밀번호")


class AccountDeleteRequest(BaseModel):
    """
    회원 탈퇴 요청 모델 (비밀번호 재확인)
    """
    model_config = ConfigDict(extra="ignore")
    password: str = Field(..., min_length=1, description="현재 비밀번호")


class TokenResponse(BaseModel):
    """
    로그인 응답 모델
    - 세션 토큰, 토큰 타입, 만료 시각, 로그인한 사용자 정보 포함
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "message": "로그인 성공",
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "expires_at": "2025-05-11T20:00:00Z",
                "user": {
                    "id": 1,
                    "email": "test@example.com",
                    "first_name": "Gildong",
                    "last_name": "Hong",
                    "img_path": None,
                },
            }
        },
    )

    message:      str          = Field(..., description="응답 메시지")
    access_token: str          = Field(..., description="세션 토큰")
    token_type:   str          = Field(default="bearer", description="토큰 타입 (기본 bearer)")
    expires_at:   datetime     = Field(..., description="세션 만료 시각 (UTC)")
    user:         UserResponse = Field(..., description="로그인한 사용자")


class SessionResponse(BaseModel):
    """
    현재 세션 상태 응답 모델
    """
    is_authenticated: bool                   = Field(..., description="로그인 여부")
    user:             Optional[UserResponse] = Field(None, description="로그인한 사용자")


class MessageResponse(BaseModel):
    """
    단순 메시지 응답 모델
    - API 처리 결과를 간단한 메시지로 반환할 때 사용
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"message": "Operation successful"}
        },
    )

    message: str = Field(..., description="응답 메시지")
