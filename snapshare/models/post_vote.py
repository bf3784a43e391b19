from sqlalchemy import Column, Integer, Enum, ForeignKey, UniqueConstraint
from snapshare.core.database import Base
from snapshare.models.vote_type import VoteType


class PostVote(Base):
    """
    포스트 투표(PostVote) 모델
    - (user_id, post_id) 쌍당 최대 1개의 행
    - 행이 없으면 투표하지 않은 상태
    """
    __tablename__ = "post_votes"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_post_votes_user_post"),
    )

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="투표 기록 고유 ID"
    )
    user_id: int = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="투표한 사용자(User) ID"
    )
    post_id: int = Column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="투표 대상 포스트 ID"
    )
    vote: VoteType = Column(
        Enum(VoteType, name="vote_type", values_callable=lambda e: [v.value for v in e]),
        nullable=False,
        doc="투표 방향 (up / down)"
    )
