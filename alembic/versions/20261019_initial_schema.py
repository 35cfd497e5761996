"""initial_schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect
from fastapi_users_db_sqlalchemy.generics import GUID


# revision identifiers, used by Alembic.
revision: str = '20261019_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = ('pending', 'processing', 'shipped', 'delivered', 'cancelled')
COURIER_SERVICES = ('FedEx', 'DHL', 'UPS', 'Blue Dart', 'Delhivery', 'India Post', 'Other')
SHIPMENT_STATUSES = ('Pending', 'Dispatched', 'In Transit', 'Delivered', 'Cancelled')


def table_exists(table_name):
    """Check if a table exists in the database"""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade():
    # 1. Users (fastapi-users base columns + profile)
    if not table_exists('users'):
        op.create_table(
            'users',
            sa.Column('id', GUID(), primary_key=True),
            sa.Column('email', sa.String(length=320), nullable=False),
            sa.Column('hashed_password', sa.String(length=1024), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('is_superuser', sa.Boolean(), nullable=False),
            sa.Column('is_verified', sa.Boolean(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('phone', sa.String(), nullable=True),
            sa.Column('role', sa.String(), nullable=False, server_default='user'),
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # 2. Customers
    if not table_exists('customers'):
        op.create_table(
            'customers',
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('user_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=True),
            sa.Column('phone', sa.String(), nullable=False),
            sa.Column('password_hash', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.UniqueConstraint('user_id', 'email', name='uq_customer_user_email'),
            sa.UniqueConstraint('user_id', 'phone', name='uq_customer_user_phone'),
        )
        op.create_index('idx_customers_user', 'customers', ['user_id'])

    # 3. Customer addresses
    if not table_exists('customer_addresses'):
        op.create_table(
            'customer_addresses',
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('customer_id', sa.String(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
            sa.Column('address_name', sa.String(), nullable=False),
            sa.Column('city', sa.String(), nullable=False),
            sa.Column('pin_code', sa.String(), nullable=False),
            sa.Column('state', sa.String(), nullable=False),
            sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('full_address', sa.String(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.UniqueConstraint(
                'customer_id', 'address_name', 'city', 'pin_code', 'state',
                name='uq_customer_address_identity',
            ),
        )
        op.create_index('idx_customer_addresses_customer', 'customer_addresses', ['customer_id'])

    # 4. Orders
    if not table_exists('orders'):
        op.create_table(
            'orders',
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('customer_id', sa.String(), sa.ForeignKey('customers.id'), nullable=False),
            sa.Column('user_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
            sa.Column('order_number', sa.String(), nullable=False),
            sa.Column('product_information', sa.String(), nullable=False),
            sa.Column('product_description', sa.Text(), nullable=True),
            sa.Column('quantity', sa.Integer(), nullable=False),
            sa.Column('number_of_boxes', sa.Integer(), nullable=False),
            sa.Column('order_date', sa.String(), nullable=False),
            sa.Column('weight', sa.Float(), nullable=False),
            sa.Column('order_value', sa.Float(), nullable=False),
            sa.Column('length', sa.Float(), nullable=False),
            sa.Column('width', sa.Float(), nullable=False),
            sa.Column('height', sa.Float(), nullable=False),
            sa.Column('order_status', sa.Enum(*ORDER_STATUSES, name='order_status'), nullable=False),
            sa.Column('special_instructions', sa.Text(), nullable=False, server_default=''),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('idx_orders_user', 'orders', ['user_id'])
        op.create_index('idx_orders_user_customer', 'orders', ['user_id', 'customer_id'])

    # 5. Shipments
    if not table_exists('shipments'):
        op.create_table(
            'shipments',
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('order_id', sa.String(), sa.ForeignKey('orders.id'), nullable=False),
            sa.Column('customer_id', sa.String(), sa.ForeignKey('customers.id'), nullable=False),
            sa.Column('user_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
            sa.Column(
                'shipping_address_id', sa.String(),
                sa.ForeignKey('customer_addresses.id', ondelete='SET NULL'), nullable=True,
            ),
            sa.Column('shipping_address_details', sa.JSON(), nullable=True),
            sa.Column('courier_service', sa.Enum(*COURIER_SERVICES, name='courier_service'), nullable=False),
            sa.Column('shipping_cost', sa.Float(), nullable=False),
            sa.Column('number_of_boxes', sa.Integer(), nullable=False),
            sa.Column('tracking_number', sa.String(), nullable=False, unique=True),
            sa.Column('tracking_link', sa.String(), nullable=True),
            sa.Column('images', sa.JSON(), nullable=False),
            sa.Column('videos', sa.JSON(), nullable=False),
            sa.Column('dispatch_person_name', sa.String(), nullable=False),
            sa.Column('receiver_name', sa.String(), nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('status', sa.Enum(*SHIPMENT_STATUSES, name='shipment_status'), nullable=False),
            sa.Column('dispatched_at', sa.DateTime(), nullable=True),
            sa.Column('delivered_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('idx_shipments_user', 'shipments', ['user_id'])
        op.create_index('idx_shipments_order', 'shipments', ['user_id', 'order_id'])


def downgrade():
    for table in ('shipments', 'orders', 'customer_addresses', 'customers', 'users'):
        if table_exists(table):
            op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in ('shipment_status', 'courier_service', 'order_status'):
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)
