from sqlalchemy import Column, Integer, Enum, ForeignKey, UniqueConstraint
from snapshare.core.database import Base
from snapshare.models.vote_type import VoteType


class CommentVote(Base):
    """
    댓글 투표(CommentVote) 모델
    - (user_id, comment_id) 쌍당 최대 1개의 행
    """
    __tablename__ = "comment_votes"
    __table_args__ = (
        UniqueConstraint("user_id", "comment_id", name="uq_comment_votes_user_comment"),
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
    comment_id: int = Column(
        Integer,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="투표 대상 댓글 ID"
    )
    vote: VoteType = Column(
        Enum(VoteType, name="vote_type", values_callable=lambda e: [v.value for v in e]),
        nullable=False,
        doc="투표 방향 (up / down)"
    )
