"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create restaurants table
    op.create_table(
        'restaurants',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('timezone', sa.String(50), nullable=False, server_default='UTC'),
        sa.Column('address', sa.Text()),
        sa.Column('phone', sa.String(20)),
        sa.Column('email', sa.String(255)),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id')),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('refresh_token', sa.String(500)),
        sa.Column('full_name', sa.String(255)),
        sa.Column('phone', sa.String(20)),
        sa.Column('role', sa.String(50), nullable=False, server_default='customer'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('last_login', sa.DateTime(timezone=True)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create restaurant_settings table
    op.create_table(
        'restaurant_settings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id'), unique=True, nullable=False),
        sa.Column('allows_cancellation', sa.Boolean()),
        sa.Column('allow_free_cancel', sa.Boolean()),
        sa.Column('cancel_before_hours', sa.Integer()),
        sa.Column('min_booking_hours', sa.Integer()),
        sa.Column('advance_booking_days', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('max_party_size', sa.Integer(), nullable=False, server_default='20'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create business_hours table
    op.create_table(
        'business_hours',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('open_time', sa.Time(), nullable=False),
        sa.Column('close_time', sa.Time(), nullable=False),
        sa.Column('is_open', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint('restaurant_id', 'weekday', name='uq_business_hours_weekday'),
        sa.CheckConstraint('weekday BETWEEN 0 AND 6', name='ck_business_hours_weekday'),
    )

    # Create dining_tables table
    op.create_table(
        'dining_tables',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('table_number', sa.Integer(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(50)),
        sa.Column('slot_increment_minutes', sa.Integer()),
        sa.Column('min_booking_duration', sa.Integer(), nullable=False, server_default='90'),
        sa.Column('max_booking_duration', sa.Integer(), nullable=False, server_default='180'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('restaurant_id', 'table_number', name='uq_dining_tables_number'),
    )

    # Create menu_items table
    op.create_table(
        'menu_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(100)),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('is_available', sa.Boolean(), server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('table_id', sa.Uuid(), sa.ForeignKey('dining_tables.id'), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('created_by_id', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('customer_phone', sa.String(20), nullable=False),
        sa.Column('customer_email', sa.String(255)),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('special_requests', sa.Text()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('pre_order', sa.JSON()),
        sa.Column('total_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('cancellation_reason', sa.Text()),
        sa.Column('staff_notes', sa.Text()),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('confirmed_at', sa.DateTime(timezone=True)),
        sa.Column('cancelled_at', sa.DateTime(timezone=True)),
        sa.CheckConstraint('party_size > 0', name='ck_reservations_party_size'),
        sa.CheckConstraint('duration_minutes > 0', name='ck_reservations_duration'),
    )

    # Create table_day_guards table
    op.create_table(
        'table_day_guards',
        sa.Column('table_id', sa.Uuid(), sa.ForeignKey('dining_tables.id'), primary_key=True),
        sa.Column('reservation_date', sa.Date(), primary_key=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id')),
        sa.Column('actor_id', sa.Uuid()),
        sa.Column('actor_type', sa.String(50)),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('resource_type', sa.String(50)),
        sa.Column('resource_id', sa.Uuid()),
        sa.Column('data_json', sa.JSON()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_reservations_table_id', 'reservations', ['table_id'])
    op.create_index('ix_reservations_reservation_date', 'reservations', ['reservation_date'])
    op.create_index('ix_reservations_restaurant_status', 'reservations', ['restaurant_id', 'status'])
    op.create_index('ix_reservations_customer_id', 'reservations', ['customer_id'])
    op.create_index('ix_menu_items_restaurant_id', 'menu_items', ['restaurant_id'])
    op.create_index('ix_audit_logs_resource_id', 'audit_logs', ['resource_id'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('table_day_guards')
    op.drop_table('reservations')
    op.drop_table('menu_items')
    op.drop_table('dining_tables')
    op.drop_table('business_hours')
    op.drop_table('restaurant_settings')
    op.drop_table('users')
    op.drop_table('restaurants')
