"""Create products table.

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
    """Create the products table."""
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('market_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(30), nullable=False, server_default='draft', index=True),
        sa.Column('category_id', sa.Integer(), nullable=True, index=True),
        sa.Column('badge_ids', postgresql.ARRAY(sa.Integer()), nullable=False, server_default='{}'),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('image_path', sa.String(255), nullable=True),
        sa.Column('image_source_type', sa.String(20), nullable=False, server_default='url'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('verified_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column('last_price_update', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_link_check', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_unique_constraint('uq_products_slug', 'products', ['slug'])

    # Storefront listings filter on status and sort by publish date
    op.create_index('ix_products_status_published_at', 'products', ['status', 'published_at'])


def downgrade() -> None:
    """Drop the products table."""
    op.drop_index('ix_products_status_published_at', table_name='products')
    op.drop_table('products')
