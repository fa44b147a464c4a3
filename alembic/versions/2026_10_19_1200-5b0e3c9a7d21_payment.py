"""payment

Revision ID: 5b0e3c9a7d21
Revises:
Create Date: 2026-10-19 12:00:41.508213

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b0e3c9a7d21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'payment',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('amount', sa.Numeric(19, 2), nullable=False),
        sa.Column('currency', sa.String(), nullable=False),
        sa.Column('debtor_iban', sa.String(), nullable=False),
        sa.Column('creditor_iban', sa.String(), nullable=False),
        sa.Column('details', sa.String(), nullable=True),
        sa.Column('creditor_bank_bic', sa.String(), nullable=True),
        sa.Column('cancelled', sa.Boolean(), nullable=False),
        sa.Column('cancellation_fee_amount', sa.Numeric(19, 2), nullable=True),
        sa.Column('cancellation_fee_currency', sa.String(), nullable=True),
        sa.Column('cancellation_time', sa.DateTime(), nullable=True),
        sa.Column('notification_status', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payment_type'), 'payment', ['type'], unique=False)
    op.create_index(op.f('ix_payment_amount'), 'payment', ['amount'], unique=False)
    op.create_index(op.f('ix_payment_cancelled'), 'payment', ['cancelled'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_payment_cancelled'), table_name='payment')
    op.drop_index(op.f('ix_payment_amount'), table_name='payment')
    op.drop_index(op.f('ix_payment_type'), table_name='payment')
    op.drop_table('payment')
