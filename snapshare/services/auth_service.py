import logging
from datetime import timedelta
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.core.config import settings
from snapshare.jwt.session_store import SessionData, SessionStore, session_store
from snapshare.models.user import User
from snapshare.repositories.base_repository import atomic
from snapshare.repositories.user_repository import UserRepository
from snapshare.utils.exceptions import (
    BadRequestError, ConflictError, TransactionError, UnauthorizedError
)

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    """bcrypt(솔트 포함) 해시 생성"""
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """해시 검증 (passlib의 상수 시간 비교 사용)"""
    return pwd_context.verify(password, hashed)


class AuthService:
    """
    인증 관련 서비스 클래스
    - 회원가입, 로그인, 로그아웃,
    - 세션 토큰 검증 및 현재 사용자 조회 기능 제공
    """
    def __init__(self, db: AsyncSession, store: SessionStore = session_store):
        self.db = db
        self.user_repo = UserRepository(db)
        self.store = store

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        # 1) 필수값 확인
        if not password:
            raise BadRequestError("비밀번호를 입력해 주세요.")

        # 2) 이메일 중복 체크
        if await self.user_repo.exists_by_email(email):
            raise ConflictError("이미 존재하는 이메일입니다.")

        # 3) User 생성/저장
        user = User(
            email=email,
            password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
        )
        try:
            async with atomic(self.db, "회원가입"):
                await self.user_repo.create_user(user)
                await self.user_repo.flush()
        except TransactionError as e:
            # 동시에 같은 이메일로 가입한 경우 (unique 제약 위반)
            if isinstance(e.__cause__, IntegrityError):
                raise ConflictError("이미 존재하는 이메일입니다.")
            raise

        logger.info("회원가입 완료: user_id=%s", user.id)
        return user

    async def login(self, email: str, password: str) -> dict:
        """
        이메일/비밀번호 로그인
        - 세션 저장소에 세션을 만들고, 세션 키(jti)를 담은 서명 토큰을 발급
        """
        user = await self.user_repo.find_by_email(email)
        if user is None:
            # 존재하지 않는 이메일도 해시 검증과 비슷한 시간이 걸리도록 처리
            pwd_context.dummy_verify()
            raise UnauthorizedError("이메일 또는 비밀번호가 올바르지 않습니다.")
        if not verify_password(password, user.password):
            logger.warning("로그인 실패 (비밀번호 불일치): user_id=%s", user.id)
            raise UnauthorizedError("이메일 또는 비밀번호가 올바르지 않습니다.")

        ttl = timedelta(minutes=settings.SESSION_EXPIRES_MINUTES)
        jti, session = self.store.create(user.id, user.email, ttl)
        payload = {
            "sub": str(user.id),
            "jti": jti,
            "exp": session.expires_at,
            "type": "access",
        }
        access_token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

        logger.info("로그인 성공: user_id=%s", user.id)
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_at": session.expires_at,
            "user": user,
        }

    def resolve_session(self, token: str) -> tuple[str, SessionData]:
        """
        토큰 서명/만료를 검증하고 세션 저장소에서 (세션 키, 세션 데이터)를 찾아 반환
        Raises:
            UnauthorizedError: 토큰이 유효하지 않거나 세션이 만료/로그아웃된 경우
        """
        try:
            payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
        except JWTError:
            logger.warning("유효하지 않은 세션 토큰")
            raise UnauthorizedError("토큰 인증 실패")

        jti = payload.get("jti")
        if not jti or payload.get("type") != "access":
            raise UnauthorizedError("유효하지 않은 토큰입니다.")

        session = self.store.get(jti)
        if session is None or str(session.user_id) != payload.get("sub"):
            raise UnauthorizedError("세션이 만료되었거나 로그아웃되었습니다.")
        return jti, session

    def logout(self, token: Optional[str]) -> None:
        """
        로그아웃 (세션 저장소에서 세션 제거)
        Raises:
            BadRequestError: 로그인된 세션이 없을 때
        """
        if not token:
            raise BadRequestError("현재 로그인된 사용자가 없습니다.")
        try:
            jti, session = self.resolve_session(token)
        except UnauthorizedError:
            raise BadRequestError("현재 로그인된 사용자가 없습니다.")
        self.store.revoke(jti)
        logger.info("로그아웃: user_id=%s", session.user_id)

    async def get_current_user(self, token: str) -> User:
        """
        현재 로그인 사용자를 토큰으로 찾아 반환
        Raises:
            UnauthorizedError: 토큰 인증 실패 또는 만료/로그아웃된 세션일 때
        """
        jti, session = self.resolve_session(token)
        user = await self.user_repo.find_by_id(session.user_id)
        if user is None:
            self.store.revoke(jti)
            raise UnauthorizedError("세션의 사용자를 찾을 수 없습니다.")
        return user
