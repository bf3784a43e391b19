from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship
from snapshare.core.database import Base


class PostAnalytics(Base):
    """
    포스트 집계(PostAnalytics) 모델
    - 투표 수 / 댓글 수의 캐시 값
    - 원본 데이터는 post_votes, comments 테이블이며 이 값은 언제든 재계산 가능
    """
    __tablename__ = "post_analytics"

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="집계 기록 고유 ID"
    )
    post_id: int = Column(
        Integer,
        ForeignKey(
            "posts.id",
            ondelete="CASCADE"
        ),
        unique=True,
        nullable=False,
        doc="대상 포스트 ID"
    )
    upvotes: int = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="추천 수"
    )
    downvotes: int = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="비추천 수"
    )
    comments_count: int = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="댓글 수"
    )

    # Post ↔ PostAnalytics (1:1)
    post = relationship(
        "Post",
        back_populates="analytics",
        doc="대상 Post 객체"
    )
