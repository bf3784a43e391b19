import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from snapshare.core.config import settings
from snapshare.core.database import get_db_session
from snapshare.dependencies import (
    extract_token, get_auth_service, get_current_user,
    get_current_user_optional, get_image_storage, get_session_store,
)
from snapshare.jwt.session_store import SessionStore
from snapshare.models.user import User
from snapshare.schemas.auth_schema import (
    AccountDeleteRequest, LoginRequest, MessageResponse,
    RegisterRequest, SessionResponse, TokenResponse,
)
from snapshare.schemas.user_schema import UserResponse
from snapshare.services.auth_service import AuthService
from snapshare.services.storage_service import ImageStorage
from snapshare.services.user_service import UserService

# 로거 설정
logger = logging.getLogger(__name__)

# 세션 쿠키 설정
class CookieConfig:
    NAME = settings.SESSION_COOKIE_NAME
    PATH = "/"
    SAMESITE = "lax"
    SECURE = settings.SESSION_COOKIE_SECURE
    HTTPONLY = True
    MAX_AGE = 60 * settings.SESSION_EXPIRES_MINUTES

    @classmethod
    def set_cookie(cls, response: Response, token: str) -> None:
        """
        응답에 세션 토큰 쿠키를 설정
        """
        response.set_cookie(
            key=cls.NAME,
            value=token,
            httponly=cls.HTTPONLY,
            secure=cls.SECURE,
            samesite=cls.SAMESITE,
            max_age=cls.MAX_AGE,
            path=cls.PATH,
        )

    @classmethod
    def clear_cookie(cls, response: Response) -> None:
        response.delete_cookie(cls.NAME, path=cls.PATH)

# 라우터 인스턴스
router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """
    이메일/비밀번호 회원가입
    - 이미 가입된 이메일이면 409
    """
    user = await auth_service.register(
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
    )
    return UserResponse.model_validate(user)

@router.post("/login", response_model=TokenResponse)
async def login(
    req: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """
    이메일 로그인 처리 후 세션 토큰 쿠키를 설정
    """
    result = await auth_service.login(req.email, req.password)
    CookieConfig.set_cookie(response, result["access_token"])
    return TokenResponse(
        message="로그인 성공",
        access_token=result["access_token"],
        token_type=result["token_type"],
        expires_at=result["expires_at"],
        user=UserResponse.model_validate(result["user"]),
    )

@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    token: Optional[str] = Depends(extract_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    세션 저장소에서 세션을 제거하고 쿠키를 삭제
    - 로그인된 세션이 없으면 400
    """
    auth_service.logout(token)
    CookieConfig.clear_cookie(response)
    return MessageResponse(message="로그아웃 성공")

@router.get("/session", response_model=SessionResponse)
async def get_session(
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> SessionResponse:
    """
    현재 요청의 로그인 상태 반환
    """
    if current_user is None:
        return SessionResponse(is_authenticated=False)
    return SessionResponse(
        is_authenticated=True,
        user=UserResponse.model_validate(current_user),
    )

@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    req: AccountDeleteRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: ImageStorage = Depends(get_image_storage),
    store: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    """
    회원 탈퇴
    1) 비밀번호 재확인
    2) 사용자 및 소유 데이터(포스트, 댓글, 투표) 삭제
    3) 세션 제거 및 쿠키 삭제
    """
    await UserService(db, storage, store).delete_user(current_user.id, req.password)
    CookieConfig.clear_cookie(response)
    return MessageResponse(message="회원 탈퇴가 완료되었습니다.")
