"""포스트/댓글 투표 로직 테스트 (추가, 전환, 취소)"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from snapshare.models.comment import Comment
from snapshare.models.post import Post
from snapshare.models.post_analytics import PostAnalytics
from snapshare.models.post_vote import PostVote
from snapshare.models.vote_type import VoteType
from snapshare.repositories.vote_repository import VoteRepository
from snapshare.services.comment_service import CommentService
from snapshare.services.vote_service import VoteService, parse_vote
from snapshare.utils.exceptions import BadRequestError, NotFoundError, TransactionError


async def _stored_counts(session_factory, post_id):
    """별도 세션으로 집계 카운터 조회"""
    async with session_factory() as session:
        result = await session.execute(
            select(PostAnalytics.upvotes, PostAnalytics.downvotes)
            .where(PostAnalytics.post_id == post_id)
        )
        return tuple(result.one())


def test_parse_vote():
    assert parse_vote("up") is VoteType.UP
    assert parse_vote("down") is VoteType.DOWN
    with pytest.raises(BadRequestError):
        parse_vote("sideways")


class TestPostVotes:
    """VoteService.vote_post 테스트"""

    @pytest.mark.asyncio
    async def test_first_upvote(self, db, session_factory, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)

        counts = await VoteService(db).vote_post(user.id, post.id, "up")

        assert counts.as_dict() == {"upvotes": 1, "downvotes": 0}
        row = await VoteRepository.for_posts(db).find(user.id, post.id)
        assert row.vote == VoteType.UP
        assert await _stored_counts(session_factory, post.id) == (1, 0)

    @pytest.mark.asyncio
    async def test_same_vote_twice_removes_row(self, db, session_factory, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        service = VoteService(db)

        await service.vote_post(user.id, post.id, "down")
        counts = await service.vote_post(user.id, post.id, "down")

        assert counts.as_dict() == {"upvotes": 0, "downvotes": 0}
        assert await VoteRepository.for_posts(db).find(user.id, post.id) is None
        assert await _stored_counts(session_factory, post.id) == (0, 0)

    @pytest.mark.asyncio
    async def test_opposite_vote_switches_row(self, db, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        service = VoteService(db)

        await service.vote_post(user.id, post.id, "up")
        counts = await service.vote_post(user.id, post.id, "down")

        assert counts.as_dict() == {"upvotes": 0, "downvotes": 1}
        total = await db.scalar(select(func.count(PostVote.id)).where(PostVote.post_id == post.id))
        assert total == 1
        row = await VoteRepository.for_posts(db).find(user.id, post.id)
        assert row.vote == VoteType.DOWN

    @pytest.mark.asyncio
    async def test_counters_match_aggregate_after_sequence(
        self, db, session_factory, make_user, make_post
    ):
        alice = await make_user()
        bob = await make_user()
        carol = await make_user()
        post = await make_post(alice.id)
        service = VoteService(db)

        for user_id, intent in [
            (alice.id, "up"), (bob.id, "down"), (carol.id, "up"),
            (bob.id, "up"), (carol.id, "up"), (alice.id, "down"),
        ]:
            await service.vote_post(user_id, post.id, intent)

        up, down = await VoteRepository.for_posts(db).count(post.id)
        assert (up, down) == (1, 1)
        assert await _stored_counts(session_factory, post.id) == (up, down)

    @pytest.mark.asyncio
    async def test_missing_post(self, db, make_user):
        user = await make_user()

        with pytest.raises(NotFoundError):
            await VoteService(db).vote_post(user.id, 9999, "up")

    @pytest.mark.asyncio
    async def test_invalid_intent_changes_nothing(self, db, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)

        with pytest.raises(BadRequestError):
            await VoteService(db).vote_post(user.id, post.id, "meh")
        assert await VoteRepository.for_posts(db).find(user.id, post.id) is None

    @pytest.mark.asyncio
    async def test_missing_analytics_row_is_created(self, db, session_factory, make_user):
        user = await make_user()
        post = Post(user_id=user.id, title="t", description="d", tags='["x"]')
        db.add(post)
        await db.commit()

        counts = await VoteService(db).vote_post(user.id, post.id, "up")

        assert counts.upvotes == 1
        assert await _stored_counts(session_factory, post.id) == (1, 0)

    @pytest.mark.asyncio
    async def test_failed_recount_rolls_back_vote_row(
        self, db, session_factory, make_user, make_post, monkeypatch
    ):
        user = await make_user()
        post = await make_post(user.id)
        user_id, post_id = user.id, post.id
        service = VoteService(db)

        async def fail(target_id):
            raise SQLAlchemyError("deadlock detected")

        monkeypatch.setattr(service.analytics, "refresh_post_votes", fail)

        with pytest.raises(TransactionError):
            await service.vote_post(user_id, post_id, "up")

        async with session_factory() as session:
            rows = await session.scalar(
                select(func.count(PostVote.id)).where(PostVote.post_id == post_id)
            )
        assert rows == 0
        assert await _stored_counts(session_factory, post_id) == (0, 0)


class TestCommentVotes:
    """VoteService.vote_comment 테스트"""

    @pytest.mark.asyncio
    async def test_comment_vote_updates_comment_counters(
        self, db, session_factory, make_user, make_post
    ):
        alice = await make_user()
        bob = await make_user()
        post = await make_post(alice.id)
        comment = await CommentService(db).create_comment(post.id, alice.id, "nice")
        service = VoteService(db)

        await service.vote_comment(alice.id, comment.id, "up")
        counts = await service.vote_comment(bob.id, comment.id, "down")

        assert counts.as_dict() == {"upvotes": 1, "downvotes": 1}
        async with session_factory() as session:
            stored = await session.get(Comment, comment.id)
            assert (stored.upvotes, stored.downvotes) == (1, 1)

    @pytest.mark.asyncio
    async def test_comment_vote_toggle_and_switch(self, db, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        comment = await CommentService(db).create_comment(post.id, user.id, "hi")
        service = VoteService(db)

        assert (await service.vote_comment(user.id, comment.id, "up")).as_dict() == {
            "upvotes": 1, "downvotes": 0,
        }
        assert (await service.vote_comment(user.id, comment.id, "down")).as_dict() == {
            "upvotes": 0, "downvotes": 1,
        }
        assert (await service.vote_comment(user.id, comment.id, "down")).as_dict() == {
            "upvotes": 0, "downvotes": 0,
        }
        assert await VoteRepository.for_comments(db).find(user.id, comment.id) is None

    @pytest.mark.asyncio
    async def test_missing_comment(self, db, make_user):
        user = await make_user()

        with pytest.raises(NotFoundError):
            await VoteService(db).vote_comment(user.id, 12345, "up")

    @pytest.mark.asyncio
    async def test_post_and_comment_votes_are_independent(self, db, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        comment = await CommentService(db).create_comment(post.id, user.id, "hi")
        service = VoteService(db)

        await service.vote_comment(user.id, comment.id, "up")
        counts = await service.vote_post(user.id, post.id, "down")

        assert counts.as_dict() == {"upvotes": 0, "downvotes": 1}
