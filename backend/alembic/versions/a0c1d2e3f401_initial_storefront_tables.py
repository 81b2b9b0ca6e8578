"""initial storefront tables

Revision ID: a0c1d2e3f401
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a0c1d2e3f401'
down_revision = None
branch_labels = None
depends_on = None

ORDER_STATUSES = ('draft', 'pending', 'confirmed', 'in_production', 'shipped', 'delivered', 'cancelled')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('role', sa.Enum('customer', 'admin', name='user_role'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'discount_codes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(64), nullable=False, comment='Always stored uppercase'),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('discount_type', sa.Enum('percentage', 'fixed_amount', name='discount_type'), nullable=False),
        sa.Column('discount_value', sa.Numeric(12, 2), nullable=False, comment='Percent or EUR'),
        sa.Column('minimum_order_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('maximum_discount_amount', sa.Numeric(12, 2), nullable=True, comment='Cap for percentage codes'),
        sa.Column('usage_limit', sa.Integer(), nullable=True, comment='NULL = unlimited'),
        sa.Column('used_count', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('valid_from', sa.DateTime(), nullable=True),
        sa.Column('valid_until', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_discount_codes_code', 'discount_codes', ['code'], unique=True)
    op.create_index('ix_discount_codes_is_active', 'discount_codes', ['is_active'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_number', sa.String(40), nullable=False),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='order_status'), nullable=False),
        sa.Column('customer_info', sa.JSON(), nullable=False, comment='name / email / phone / company'),
        sa.Column('customer_email', sa.String(255), nullable=False),
        sa.Column('shipping_address', sa.JSON(), nullable=False),
        sa.Column('pricing_policy', sa.String(32), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('subtotal', sa.Numeric(16, 6), nullable=False),
        sa.Column('discount_amount', sa.Numeric(16, 6), nullable=False),
        sa.Column('shipping', sa.Numeric(16, 6), nullable=False),
        sa.Column('tax', sa.Numeric(16, 6), nullable=False),
        sa.Column('total', sa.Numeric(16, 6), nullable=False),
        sa.Column('original_total', sa.Numeric(16, 6), nullable=False, comment='Total before discount'),
        sa.Column('discount_code', sa.String(64), nullable=True),
        sa.Column('discount_code_id', sa.Integer(), nullable=True),
        sa.Column('discount_type', sa.String(20), nullable=True),
        sa.Column('payment_intent_id', sa.String(255), nullable=True),
        sa.Column('stripe_payment_status', sa.String(40), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['discount_code_id'], ['discount_codes.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_customer_email', 'orders', ['customer_email'])
    op.create_index('ix_orders_payment_intent_id', 'orders', ['payment_intent_id'], unique=True)
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(100), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('design_file_id', sa.String(255), nullable=True, comment='Custom print uploads'),
        sa.Column('variants', sa.JSON(), nullable=True, comment='size / color'),
        sa.Column('customizations', sa.JSON(), nullable=True),
        sa.Column('image', sa.String(1024), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(16, 6), nullable=False),
        sa.Column('total_price', sa.Numeric(16, 6), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    # Append-only redemption ledger
    op.create_table(
        'discount_code_usage',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('discount_code_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('customer_email', sa.String(255), nullable=True),
        sa.Column('discount_amount', sa.Numeric(16, 6), nullable=False),
        sa.Column('order_amount', sa.Numeric(16, 6), nullable=False, comment='Subtotal at time of use'),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.String(512), nullable=True),
        sa.Column('used_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['discount_code_id'], ['discount_codes.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_discount_code_usage_discount_code_id', 'discount_code_usage', ['discount_code_id'])
    op.create_index('ix_discount_code_usage_order_id', 'discount_code_usage', ['order_id'])
    op.create_index('ix_discount_code_usage_customer_email', 'discount_code_usage', ['customer_email'])
    op.create_index('ix_discount_code_usage_used_at', 'discount_code_usage', ['used_at'])

    # Webhook idempotency
    op.create_table(
        'processed_stripe_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.String(255), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('payment_intent_id', sa.String(255), nullable=True),
        sa.Column('processed_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id'),
    )
    op.create_index('ix_processed_stripe_events_payment_intent_id', 'processed_stripe_events', ['payment_intent_id'])


def downgrade() -> None:
    op.drop_index('ix_processed_stripe_events_payment_intent_id', 'processed_stripe_events')
    op.drop_table('processed_stripe_events')
    op.drop_index('ix_discount_code_usage_used_at', 'discount_code_usage')
    op.drop_index('ix_discount_code_usage_customer_email', 'discount_code_usage')
    op.drop_index('ix_discount_code_usage_order_id', 'discount_code_usage')
    op.drop_index('ix_discount_code_usage_discount_code_id', 'discount_code_usage')
    op.drop_table('discount_code_usage')
    op.drop_index('ix_order_items_order_id', 'order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_created_at', 'orders')
    op.drop_index('ix_orders_payment_intent_id', 'orders')
    op.drop_index('ix_orders_customer_email', 'orders')
    op.drop_index('ix_orders_status', 'orders')
    op.drop_index('ix_orders_order_number', 'orders')
    op.drop_table('orders')
    op.drop_index('ix_discount_codes_is_active', 'discount_codes')
    op.drop_index('ix_discount_codes_code', 'discount_codes')
    op.drop_table('discount_codes')
    op.drop_index('ix_users_email', 'users')
    op.drop_table('users')
