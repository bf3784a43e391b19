from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from snapshare.core.database import Base, utcnow


class Comment(Base):
    """
    댓글 모델
    - upvotes/downvotes는 comment_votes 집계 결과의 캐시
    """
    __tablename__ = "comments"

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="댓글 고유 ID"
    )
    post_id: int = Column(
        Integer,
        ForeignKey(
            "posts.id",
            ondelete="CASCADE"  # 포스트 삭제 시 댓글도 삭제
        ),
        nullable=False,
        index=True,
        doc="대상 포스트 ID"
    )
    user_id: int = Column(
        Integer,
        ForeignKey(
            "users.id",
            ondelete="CASCADE"  # 작성자 삭제 시 댓글도 삭제
        ),
        nullable=False,
        index=True,
        doc="작성자(User) ID"
    )
    text: str = Column(
        Text,
        nullable=False,
        doc="댓글 내용"
    )
    upvotes: int = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="추천 수 (캐시)"
    )
    downvotes: int = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="비추천 수 (캐시)"
    )
    created: DateTime = Column(
        DateTime,
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="작성 시각"
    )

    author = relationship(
        "User",
        lazy="joined",
        doc="작성자(User) 관계"
    )

    post = relationship(
        "Post",
        back_populates="comments",
        doc="대상 Post 객체"
    )
