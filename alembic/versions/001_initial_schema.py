"""Initial schema: users, subscriptions, subscription_tokens, idempotency, newsletter_issues, issue_delivery_queue

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables with indexes and constraints."""

    # Get the database dialect to handle PostgreSQL vs SQLite differences
    bind = op.get_bind()
    is_postgresql = bind.dialect.name == 'postgresql'

    if is_postgresql:
        uuid_type = postgresql.UUID(as_uuid=True)
        json_type = postgresql.JSONB()
    else:
        uuid_type = sa.String(36)  # Store UUIDs as strings in SQLite
        json_type = sa.JSON()

    op.create_table(
        'users',
        sa.Column('user_id', uuid_type, primary_key=True),
        sa.Column('username', sa.Text(), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', uuid_type, primary_key=True),
        sa.Column('email', sa.Text(), nullable=False, unique=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('subscribed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
    )
    op.create_index('idx_subscriptions_status', 'subscriptions', ['status'])

    op.create_table(
        'subscription_tokens',
        sa.Column('subscription_token', sa.Text(), primary_key=True),
        sa.Column('subscriber_id', uuid_type, nullable=False),
        sa.ForeignKeyConstraint(['subscriber_id'], ['subscriptions.id'], ondelete='CASCADE'),
    )

    # Response columns stay NULL while the row is a placeholder
    op.create_table(
        'idempotency',
        sa.Column('user_id', uuid_type, nullable=False),
        sa.Column('idempotency_key', sa.Text(), nullable=False),
        sa.Column('response_status_code', sa.SmallInteger(), nullable=True),
        sa.Column('response_headers', json_type, nullable=True),
        sa.Column('response_body', sa.LargeBinary(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('user_id', 'idempotency_key'),
    )
    op.create_index('idx_idempotency_created_at', 'idempotency', ['created_at'])

    op.create_table(
        'newsletter_issues',
        sa.Column('newsletter_issue_id', uuid_type, primary_key=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('text_content', sa.Text(), nullable=False),
        sa.Column('html_content', sa.Text(), nullable=False),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'issue_delivery_queue',
        sa.Column('newsletter_issue_id', uuid_type, nullable=False),
        sa.Column('subscriber_email', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('newsletter_issue_id', 'subscriber_email'),
        sa.ForeignKeyConstraint(
            ['newsletter_issue_id'], ['newsletter_issues.newsletter_issue_id']
        ),
    )


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_table('issue_delivery_queue')
    op.drop_table('newsletter_issues')

    op.drop_index('idx_idempotency_created_at', table_name='idempotency')
    op.drop_table('idempotency')

    op.drop_table('subscription_tokens')
    op.drop_index('idx_subscriptions_status', table_name='subscriptions')
    op.drop_table('subscriptions')

    op.drop_table('users')
