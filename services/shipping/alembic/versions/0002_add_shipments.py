"""add_shipments

Revision ID: 0002_add_shipments
Revises: 0001_init

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_add_shipments'
down_revision = '0001_init'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'shipments',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_id', sa.Integer, sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('carrier', sa.String(20), nullable=False),
        sa.Column('service_level', sa.String(100), nullable=False),
        sa.Column('package_type', sa.String(50), nullable=False),
        sa.Column('weight_lb', sa.Numeric(10, 2), nullable=False),
        sa.Column('length_in', sa.Numeric(10, 2), nullable=False),
        sa.Column('width_in', sa.Numeric(10, 2), nullable=False),
        sa.Column('height_in', sa.Numeric(10, 2), nullable=False),
        sa.Column('rate_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('rate_currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('status', sa.String(30), nullable=False, server_default='pending'),
        # Label fields stay empty until the label is purchased
        sa.Column('tracking_number', sa.String(50), nullable=True),
        sa.Column('label_url', sa.String(500), nullable=True),
        sa.Column('shipped_date', sa.DateTime, nullable=True),
        sa.Column('delivered_date', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_shipments_order_id', 'shipments', ['order_id'])


def downgrade() -> None:
    op.drop_index('ix_shipments_order_id', table_name='shipments')
    op.drop_table('shipments')
