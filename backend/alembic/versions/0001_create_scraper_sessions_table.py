"""Create scraper_sessions table for stored browser sessions

Revision ID: 0001
Revises: 
Create Date: 2026-10-17 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'scraper_sessions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('site', sa.String(length=50), nullable=False, server_default='linkedin'),
        sa.Column('cookies', sa.JSON(), nullable=False),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('platform', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),

        # Primary key
        sa.PrimaryKeyConstraint('id'),

        # One live session per owner and site
        sa.UniqueConstraint('user_id', 'site', name='uq_scraper_session_user_site'),
    )

    op.create_index('idx_scraper_session_expires_at', 'scraper_sessions', ['expires_at'])


def downgrade() -> None:
    op.drop_index('idx_scraper_session_expires_at', table_name='scraper_sessions')
    op.drop_table('scraper_sessions')
