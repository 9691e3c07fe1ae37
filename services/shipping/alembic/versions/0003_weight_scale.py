from alembic import op
import sqlalchemy as sa

revision = '0003_weight_scale'
down_revision = '0002_add_shipments'
branch_labels = None
depends_on = None

# (table, column) pairs holding pounds
WEIGHT_COLUMNS = (
    ('orders', 'total_weight_lb'),
    ('order_items', 'weight_lb'),
    ('shipments', 'weight_lb'),
)

def upgrade():
    for table, column in WEIGHT_COLUMNS:
        op.alter_column(
            table,
            column,
            existing_type=sa.Numeric(10, 2),
            type_=sa.Numeric(10, 3),
            existing_nullable=False
        )


def downgrade():
    for table, column in WEIGHT_COLUMNS:
        op.alter_column(
            table,
            column,
            existing_type=sa.Numeric(10, 3),
            type_=sa.Numeric(10, 2),
            existing_nullable=False
        )
