from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from snapshare.core.database import Base, utcnow


class Post(Base):
    """
    이미지 포스트 모델
    - 제목, 설명, 태그(JSON 문자열 리스트), 이미지 경로를 저장
    - 작성자, 분석 정보(1:1), 댓글(1:N) 관계 정의
    """
    __tablename__ = "posts"

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="포스트 고유 ID"
    )
    user_id: int = Column(
        Integer,
        ForeignKey(
            "users.id",
            ondelete="CASCADE"  # 작성자 삭제 시 포스트도 삭제
        ),
        nullable=False,
        index=True,
        doc="작성자(User) ID"
    )
    title: str = Column(
        String(255),
        nullable=False,
        doc="포스트 제목"
    )
    description: str = Column(
        Text,
        nullable=False,
        doc="포스트 설명"
    )
    tags: str = Column(
        Text,
        nullable=False,
        default="[]",
        doc="태그 리스트 (JSON)"
    )
    img_path: str = Column(
        String(255),
        nullable=True,
        doc="포스트 이미지 공개 URL"
    )
    created: DateTime = Column(
        DateTime,
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="작성 시각"
    )
    updated: DateTime = Column(
        DateTime,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
        doc="마지막 수정 시각"
    )

    # User와의 관계 (Many-to-One)
    author = relationship(
        "User",
        lazy="joined",  # 기본 조회 시 조인으로 작성자 정보 미리 로딩
        doc="작성자(User) 관계"
    )

    # 분석 정보 관계 (One-to-One)
    analytics = relationship(
        "PostAnalytics",
        back_populates="post",
        uselist=False,
        lazy="joined",
        passive_deletes=True,
        doc="투표/댓글 집계 정보"
    )

    # 댓글 관계 (One-to-Many), 상세 조회 시에만 selectinload로 로딩
    comments = relationship(
        "Comment",
        back_populates="post",
        order_by="Comment.created",
        passive_deletes=True,
        doc="포스트에 달린 댓글 목록"
    )
