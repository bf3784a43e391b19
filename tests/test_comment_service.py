"""댓글 작성/삭제 및 comments_count 갱신 테스트"""

import pytest
from sqlalchemy import delete, func, select

from snapshare.models.comment import Comment
from snapshare.models.comment_vote import CommentVote
from snapshare.models.post import Post
from snapshare.models.post_analytics import PostAnalytics
from snapshare.services.comment_service import CommentService
from snapshare.services.vote_service import VoteService
from snapshare.utils.exceptions import BadRequestError, NotFoundError, UnauthorizedError


async def _comments_count(session_factory, post_id):
    async with session_factory() as session:
        return await session.scalar(
            select(PostAnalytics.comments_count).where(PostAnalytics.post_id == post_id)
        )


class TestCreateComment:
    """CommentService.create_comment 테스트"""

    @pytest.mark.asyncio
    async def test_returns_comment_with_author(self, db, session_factory, make_user, make_post):
        alice = await make_user(first_name="Alice", last_name="Kim")
        post = await make_post(alice.id)

        comment = await CommentService(db).create_comment(post.id, alice.id, "  hello ")

        assert comment.text == "hello"
        assert comment.author.email == alice.email
        assert comment.author.first_name == "Alice"
        assert (comment.upvotes, comment.downvotes) == (0, 0)
        assert await _comments_count(session_factory, post.id) == 1

    @pytest.mark.asyncio
    async def test_increments_existing_analytics(self, db, session_factory, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        service = CommentService(db)

        for text in ("one", "two", "three"):
            await service.create_comment(post.id, user.id, text)

        assert await _comments_count(session_factory, post.id) == 3

    @pytest.mark.asyncio
    async def test_creates_missing_analytics_row(self, db, session_factory, make_user):
        user = await make_user()
        post = Post(user_id=user.id, title="t", description="d", tags='["x"]')
        db.add(post)
        await db.commit()

        await CommentService(db).create_comment(post.id, user.id, "first")

        async with session_factory() as session:
            analytics = await session.scalar(
                select(PostAnalytics).where(PostAnalytics.post_id == post.id)
            )
        assert (analytics.comments_count, analytics.upvotes, analytics.downvotes) == (1, 0, 0)

    @pytest.mark.asyncio
    async def test_empty_text(self, db, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)

        with pytest.raises(BadRequestError):
            await CommentService(db).create_comment(post.id, user.id, "   ")

    @pytest.mark.asyncio
    async def test_missing_post(self, db, make_user):
        user = await make_user()
        user_id = user.id

        with pytest.raises(NotFoundError):
            await CommentService(db).create_comment(31337, user_id, "hello?")
        count = await db.scalar(select(func.count(Comment.id)))
        assert count == 0


class TestDeleteComment:
    """CommentService.delete_comment 테스트"""

    @pytest.mark.asyncio
    async def test_deleting_last_comment_sets_count_to_zero(
        self, db, session_factory, make_user, make_post
    ):
        user = await make_user()
        post = await make_post(user.id)
        comment = await CommentService(db).create_comment(post.id, user.id, "only")

        remaining = await CommentService(db).delete_comment(comment.id, user.id)

        assert remaining == 0
        assert await _comments_count(session_factory, post.id) == 0

    @pytest.mark.asyncio
    async def test_count_is_recomputed_not_decremented(
        self, db, session_factory, make_user, make_post
    ):
        user = await make_user()
        post = await make_post(user.id)
        service = CommentService(db)
        first = await service.create_comment(post.id, user.id, "a")
        await service.create_comment(post.id, user.id, "b")
        # 캐시 값을 일부러 어긋나게 만든다
        analytics = await db.scalar(select(PostAnalytics).where(PostAnalytics.post_id == post.id))
        analytics.comments_count = 10
        await db.commit()

        remaining = await service.delete_comment(first.id, user.id)

        assert remaining == 1
        assert await _comments_count(session_factory, post.id) == 1

    @pytest.mark.asyncio
    async def test_removes_comment_votes(self, db, make_user, make_post):
        alice = await make_user()
        bob = await make_user()
        post = await make_post(alice.id)
        comment = await CommentService(db).create_comment(post.id, alice.id, "vote me")
        await VoteService(db).vote_comment(bob.id, comment.id, "up")
        comment_id = comment.id

        await CommentService(db).delete_comment(comment_id, alice.id)

        assert await db.get(Comment, comment_id) is None
        votes = await db.scalar(
            select(func.count(CommentVote.id)).where(CommentVote.comment_id == comment_id)
        )
        assert votes == 0

    @pytest.mark.asyncio
    async def test_only_author_can_delete(self, db, make_user, make_post):
        alice = await make_user()
        bob = await make_user()
        post = await make_post(alice.id)
        comment = await CommentService(db).create_comment(post.id, alice.id, "mine")
        comment_id, bob_id = comment.id, bob.id

        with pytest.raises(UnauthorizedError):
            await CommentService(db).delete_comment(comment_id, bob_id)
        assert await db.scalar(select(func.count(Comment.id))) == 1

    @pytest.mark.asyncio
    async def test_missing_comment(self, db, make_user):
        user = await make_user()
        user_id = user.id

        with pytest.raises(NotFoundError):
            await CommentService(db).delete_comment(404, user_id)

    @pytest.mark.asyncio
    async def test_already_deleted_comment(self, db, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        comment = await CommentService(db).create_comment(post.id, user.id, "bye")
        comment_id, user_id = comment.id, user.id
        await db.execute(delete(Comment).where(Comment.id == comment_id))
        await db.commit()

        with pytest.raises(NotFoundError):
            await CommentService(db).delete_comment(comment_id, user_id)
