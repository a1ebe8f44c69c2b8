"""Storage entries: one serialized JSON collection per key

Revision ID: 20261019_storage
Revises:
Create Date: 2026-10-19

Every collection (products, users, sellers, suppliers, inventory, purchases)
is stored as a single JSON array in the value column of its row.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_storage'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('storage_entries',
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade():
    op.drop_table('storage_entries')
