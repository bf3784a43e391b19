"""
세션 저장소 모듈

서버 메모리 기반으로 로그인 세션을 관리
- 로그인 시 세션 키(jti)를 발급하여 만료 시각과 함께 저장
- 인증 처리 시 JWT 서명 검증 후 세션 키가 저장소에 살아있는지 확인
- 로그아웃/회원 탈퇴 시 세션을 제거하여 토큰을 무효화

나중에 운영 환경에서는 단일 서버 메모리 대신 Redis 등 외부저장소로 바꿔야함
"""

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple


@dataclass(frozen=True)
class SessionData:
    """세션에 저장되는 사용자 정보"""
    user_id: int
    email: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    세션 키 → SessionData 저장소 (명시적 만료 시각 포함)
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._sessions: Dict[str, SessionData] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def create(self, user_id: int, email: str, ttl: timedelta) -> Tuple[str, SessionData]:
        """
        새 세션을 발급하고 (세션 키, 세션 데이터)를 반환
        - 발급 시점에 만료된 세션을 함께 정리
        """
        now = self._clock()
        key = secrets.token_urlsafe(32)
        data = SessionData(user_id=user_id, email=email, expires_at=now + ttl)
        with self._lock:
            self._remove_expired(now)
            self._sessions[key] = data
        return key, data

    def get(self, key: str) -> Optional[SessionData]:
        """
        유효한 세션이면 SessionData, 없거나 만료되었으면 None
        - 만료된 세션은 조회 시점에 제거
        """
        with self._lock:
            data = self._sessions.get(key)
            if data is None:
                return None
            if data.expires_at <= self._clock():
                del self._sessions[key]
                return None
            return data

    def revoke(self, key: str) -> bool:
        """세션 제거, 제거된 세션이 있었으면 True"""
        with self._lock:
            return self._sessions.pop(key, None) is not None

    def revoke_user(self, user_id: int) -> int:
        """해당 사용자의 모든 세션 제거 후 제거 개수 반환"""
        with self._lock:
            keys = [k for k, v in self._sessions.items() if v.user_id == user_id]
            for key in keys:
                del self._sessions[key]
            return len(keys)

    def purge_expired(self) -> int:
        """만료된 세션을 일괄 제거하고 제거 개수 반환"""
        now = self._clock()
        with self._lock:
            return self._remove_expired(now)

    def _remove_expired(self, now: datetime) -> int:
        # 호출 측에서 _lock을 잡은 상태여야 함
        expired = [k for k, v in self._sessions.items() if v.expires_at <= now]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# 서버 메모리에 저장되는 전역 세션 저장소
session_store = SessionStore()
