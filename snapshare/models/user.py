from sqlalchemy import Column, Integer, String, DateTime, func
from snapshare.core.database import Base, utcnow


class User(Base):
    """
    서비스 사용자(User) 모델
    - 로그인 정보(이메일, 비밀번호 해시)와 프로필 정보를 저장
    - 삭제 시 소유한 포스트, 댓글, 투표가 함께 삭제됨 (UserService.delete_user)
    """
    __tablename__ = "users"

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="사용자 고유 ID"
    )
    email: str = Column(
        String(120),
        unique=True,
        nullable=False,
        doc="사용자 이메일(로그인 ID)"
    )
    password: str = Column(
        String(255),
        nullable=False,
        doc="해시 처리된 비밀번호"
    )
    first_name: str = Column(
        String(100),
        nullable=True,
        doc="이름"
    )
    last_name: str = Column(
        String(100),
        nullable=True,
        doc="성"
    )
    img_path: str = Column(
        String(255),
        nullable=True,
        doc="프로필 이미지 공개 URL"
    )
    created: DateTime = Column(
        DateTime,
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="가입 시각"
    )
    updated: DateTime = Column(
        DateTime,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
        doc="마지막 수정 시각"
    )
