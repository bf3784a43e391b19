import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.core.config import get_settings, Settings
from snapshare.core.database import get_db_session
from snapshare.jwt.session_store import SessionStore, session_store
from snapshare.models.user import User
from snapshare.services.auth_service import AuthService
from snapshare.services.storage_service import ImageStorage
from snapshare.utils.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_session_store() -> SessionStore:
    """
    세션 저장소 의존성 주입 함수 (서버 메모리 전역 저장소)
    """
    return session_store


def get_image_storage(settings: Settings = Depends(get_settings)) -> ImageStorage:
    """
    ImageStorage 의존성 주입 함수
    - settings.env의 IMAGE_DIR, IMAGE_BASE_URL, 업로드 제약 조건 사용
    """
    return ImageStorage(
        image_dir=settings.IMAGE_DIR,
        base_url=settings.IMAGE_BASE_URL,
        config=settings.upload_config,
    )


def get_auth_service(
    db: AsyncSession = Depends(get_db_session),
    store: SessionStore = Depends(get_session_store),
) -> AuthService:
    return AuthService(db, store)


async def extract_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """
    요청에서 세션 토큰 추출
    1) Authorization 헤더의 Bearer 토큰 우선 사용
    2) 헤더에 없으면 세션 쿠키 사용
    3) 둘 다 없으면 None
    """
    try:
        return await oauth2_scheme(request)
    except HTTPException:
        return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_user(
    token: Optional[str] = Depends(extract_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    현재 요청의 사용자를 가져오는 종속성 함수
    - 토큰 서명/만료 검증 후 세션 저장소에 세션이 살아있는지 확인
    Raises:
        UnauthorizedError: 토큰이 없거나 유효하지 않을 때, 세션이 만료/로그아웃되었을 때
    """
    if not token:
        raise UnauthorizedError("로그인이 필요합니다.")
    return await auth_service.get_current_user(token)


async def get_current_user_optional(
    token: Optional[str] = Depends(extract_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    """
    선택적 사용자 조회 함수
    - 토큰이 없거나 세션이 유효하지 않으면 None 반환
    """
    if not token:
        return None
    try:
        return await auth_service.get_current_user(token)
    except UnauthorizedError:
        return None
