"""Create users, posts, comments, votes and post_analytics tables

Revision ID: 3c1f0a7d2b9e
Revises:
Create Date: 2025-06-02 10:41:08.512330

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a7d2b9e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

VOTE_TYPE = sa.Enum('up', 'down', name='vote_type')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(120), nullable=False, unique=True),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('img_path', sa.String(255), nullable=True),
        sa.Column('created', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        # 태그 리스트는 JSON 문자열로 저장
        sa.Column('tags', sa.Text, nullable=False),
        sa.Column('img_path', sa.String(255), nullable=True),
        sa.Column('created', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_posts_user_id', 'posts', ['user_id'])

    op.create_table(
        'post_analytics',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('post_id', sa.Integer, nullable=False, unique=True),
        sa.Column('upvotes', sa.Integer, nullable=False, server_default='0'),
        sa.Column('downvotes', sa.Integer, nullable=False, server_default='0'),
        sa.Column('comments_count', sa.Integer, nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
    )

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('post_id', sa.Integer, nullable=False),
        sa.Column('user_id', sa.Integer, nullable=False),
        sa.Column('text', sa.Text, nullable=False),
        sa.Column('upvotes', sa.Integer, nullable=False, server_default='0'),
        sa.Column('downvotes', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])

    op.create_table(
        'post_votes',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, nullable=False),
        sa.Column('post_id', sa.Integer, nullable=False),
        sa.Column('vote', VOTE_TYPE, nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'post_id', name='uq_post_votes_user_post'),
    )
    op.create_index('ix_post_votes_post_id', 'post_votes', ['post_id'])

    op.create_table(
        'comment_votes',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, nullable=False),
        sa.Column('comment_id', sa.Integer, nullable=False),
        sa.Column('vote', VOTE_TYPE, nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['comment_id'], ['comments.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'comment_id', name='uq_comment_votes_user_comment'),
    )
    op.create_index('ix_comment_votes_comment_id', 'comment_votes', ['comment_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('comment_votes')
    op.drop_table('post_votes')
    op.drop_table('comments')
    op.drop_table('post_analytics')
    op.drop_table('posts')
    op.drop_table('users')
