"""Initial migration

Revision ID: initial_migration
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'initial_migration'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create events table
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('title', sa.String(255), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(50), nullable=False, index=True),
        sa.Column('country', sa.String(100), nullable=False, index=True),
        sa.Column('city', sa.String(100), nullable=False, index=True),
        sa.Column('venue', sa.String(255), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('creator_id', sa.String(64), nullable=True),
        sa.Column('enhanced_location', sa.JSON(none_as_null=True), nullable=True),
        sa.Column('location_enriched_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), onupdate=sa.func.now(), nullable=True),
    )
    op.create_index('ix_events_coordinates', 'events', ['latitude', 'longitude'])


def downgrade() -> None:
    op.drop_index('ix_events_coordinates', table_name='events')
    op.drop_table('events')
