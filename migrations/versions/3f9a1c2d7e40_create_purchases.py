"""create_purchases

Revision ID: 3f9a1c2d7e40
Revises:
Create Date: 2026-10-19 09:12:44.120553+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f9a1c2d7e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    approval_json = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')
    op.create_table('purchases',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('uploader_name', sa.String(length=200), nullable=False),
    sa.Column('vendor_name', sa.String(length=200), nullable=False),
    sa.Column('purpose', sa.String(length=30), nullable=False),
    sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
    sa.Column('bill_type', sa.String(length=20), nullable=False),
    sa.Column('hub', sa.String(length=20), nullable=False),
    sa.Column('payment_sequence', sa.String(length=30), nullable=False),
    sa.Column('payment_date', sa.Date(), nullable=False),
    sa.Column('file_url', sa.Text(), nullable=True),
    sa.Column('file_name', sa.String(length=255), nullable=True),
    sa.Column('status', sa.String(length=30), nullable=False),
    sa.Column('director_approval', approval_json, nullable=True),
    sa.Column('finance_approval', approval_json, nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.CheckConstraint(
        "status IN ('pending', 'director_approved', 'finance_approved', 'rejected')",
        name='chk_purchase_status'),
    sa.CheckConstraint('amount >= 0', name='chk_purchase_amount_non_negative'),
    sa.CheckConstraint(
        '(file_url IS NULL AND file_name IS NULL) '
        'OR (file_url IS NOT NULL AND file_name IS NOT NULL)',
        name='chk_purchase_file_pair'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_purchases_created_at', 'purchases', ['created_at'], unique=False)
    op.create_index('idx_purchases_status', 'purchases', ['status'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_purchases_status', table_name='purchases')
    op.drop_index('idx_purchases_created_at', table_name='purchases')
    op.drop_table('purchases')
