"""initial schema

Revision ID: 4c1e7a2d9b30
Revises:
Create Date: 2026-10-19 10:12:41.208163

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4c1e7a2d9b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# likes and shares share one enum type; create it once up front
content_type = postgresql.ENUM('post', 'article', 'comment', 'video', name='content_type', create_type=False)


def _counter_columns():
    return [
        sa.Column('like_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('shared_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('view_count', sa.Integer(), server_default='0', nullable=False),
    ]


def _counter_checks(table: str):
    return [
        sa.CheckConstraint('like_count >= 0', name=f'ck_{table}_like_count'),
        sa.CheckConstraint('shared_count >= 0', name=f'ck_{table}_shared_count'),
    ]


def _ledger_table(name: str, constraint: str, index: str) -> None:
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_ip', sa.String(length=45), nullable=False),
        sa.Column('user_agent', sa.String(length=255), nullable=False),
        sa.Column('content_type', content_type, nullable=False),
        sa.Column('content_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_ip', 'user_agent', 'content_type', 'content_id', name=constraint),
    )
    op.create_index(index, name, ['content_type', 'content_id'], unique=False)


def upgrade() -> None:
    """Upgrade schema."""
    content_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        *_counter_columns(),
        *_counter_checks('posts'),
    )
    op.create_index('idx_posts_created', 'posts', [sa.text('created_at DESC')], unique=False)

    op.create_table(
        'articles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('excerpt', sa.Text(), nullable=True),
        sa.Column('author', sa.String(length=100), nullable=False),
        sa.Column('status', sa.Enum('draft', 'published', name='article_status'), nullable=False),
        sa.Column('tags', sa.String(length=255), nullable=True),
        sa.Column('featured', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        *_counter_columns(),
        *_counter_checks('articles'),
    )
    op.create_index('idx_articles_status_published', 'articles', ['status', 'published_at'], unique=False)

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author', sa.String(length=100), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        *_counter_columns(),
        *_counter_checks('comments'),
    )
    op.create_index('ix_comments_post_id', 'comments', ['post_id'], unique=False)

    op.create_table(
        'videos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('author', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        *_counter_columns(),
        *_counter_checks('videos'),
    )

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_date', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('meeting_link', sa.String(length=500), nullable=True),
        sa.Column('max_participants', sa.Integer(), nullable=True),
        sa.Column('status', sa.Enum('draft', 'published', 'cancelled', name='event_status'), nullable=False),
        sa.Column('priority', sa.Enum('low', 'normal', 'high', name='event_priority'), nullable=False),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        sa.Column('view_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_events_event_date', 'events', ['event_date'], unique=False)

    _ledger_table('likes', 'uq_likes_identity_content', 'idx_likes_content')
    _ledger_table('shares', 'uq_shares_identity_content', 'idx_shares_content')

    op.create_table(
        'statistics',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_statistics_entity', 'statistics', ['entity_type', 'entity_id', 'created_at'], unique=False)
    op.create_index('idx_statistics_created', 'statistics', ['created_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_statistics_created', table_name='statistics')
    op.drop_index('idx_statistics_entity', table_name='statistics')
    op.drop_table('statistics')
    op.drop_index('idx_shares_content', table_name='shares')
    op.drop_table('shares')
    op.drop_index('idx_likes_content', table_name='likes')
    op.drop_table('likes')
    op.drop_index('ix_events_event_date', table_name='events')
    op.drop_table('events')
    op.drop_table('videos')
    op.drop_index('ix_comments_post_id', table_name='comments')
    op.drop_table('comments')
    op.drop_index('idx_articles_status_published', table_name='articles')
    op.drop_table('articles')
    op.drop_index('idx_posts_created', table_name='posts')
    op.drop_table('posts')

    bind = op.get_bind()
    for enum_name in ('event_priority', 'event_status', 'article_status'):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
    content_type.drop(bind, checkfirst=True)
