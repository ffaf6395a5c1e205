"""initial booking tables

Revision ID: 4c1f0a9d2b7e
Revises:
Create Date: 2026-10-19 09:12:44.501233

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4c1f0a9d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Users
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', sa.Enum('ADMIN', 'MANAGER', 'USER', name='platformrole'), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.text('true')),
        sa.Column('google_access_token_encrypted', sa.LargeBinary, nullable=True),
        sa.Column('google_refresh_token_encrypted', sa.LargeBinary, nullable=True),
        sa.Column('google_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_role', 'users', ['role'])

    # 2. Facilities and their weekly rules
    op.create_table(
        'facilities',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('sport', sa.String(100), nullable=True),
        sa.Column('manager_id', sa.Integer, sa.ForeignKey('users.id'), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_facilities_manager_id', 'facilities', ['manager_id'])

    op.create_table(
        'facility_schedules',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('facility_id', sa.Integer, sa.ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_type', sa.String(10), nullable=False),
        sa.Column('open_time', sa.String(8), nullable=False),
        sa.Column('close_time', sa.String(8), nullable=False),
        sa.UniqueConstraint('facility_id', 'day_type', name='uq_facility_schedule_day_type'),
        sa.CheckConstraint('open_time < close_time', name='ck_facility_schedule_open_before_close')
    )

    op.create_table(
        'facility_pricings',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('facility_id', sa.Integer, sa.ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_type', sa.String(10), nullable=False),
        sa.Column('start_hour', sa.String(8), nullable=False),
        sa.Column('end_hour', sa.String(8), nullable=False),
        sa.Column('price_per_hour', sa.Float, nullable=False)
    )
    op.create_index('idx_facility_pricings_lookup', 'facility_pricings', ['facility_id', 'day_type', 'start_hour'])

    # 3. Reservations
    op.create_table(
        'facility_reservations',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('facility_id', sa.Integer, sa.ForeignKey('facilities.id'), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('total_price', sa.Float, nullable=False, server_default='0'),
        sa.Column('google_calendar_event_id', sa.String, nullable=True),
        sa.Column('sync_status', sa.String, nullable=True, server_default='pending'),
        sa.Column('sync_attempts', sa.Integer, nullable=True, server_default='0'),
        sa.Column('last_sync_error', sa.Text, nullable=True),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('end_time > start_time', name='ck_facility_reservations_positive_interval')
    )
    op.create_index('idx_facility_reservations_facility_start', 'facility_reservations', ['facility_id', 'start_time'])
    op.create_index('idx_facility_reservations_user', 'facility_reservations', ['user_id'])

    # No two active reservations of one facility may overlap, whatever the application does
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist;")
    op.execute(
        """
        ALTER TABLE facility_reservations
        ADD CONSTRAINT ex_facility_reservations_no_overlap
        EXCLUDE USING gist (
            facility_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        ) WHERE (status <> 'cancelled');
        """
    )

    # 4. Payments
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('reservation_id', sa.Integer, sa.ForeignKey('facility_reservations.id'), nullable=False, unique=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
        sa.Column('payment_method', sa.String(20), nullable=True),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True)
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('payments')
    op.execute("ALTER TABLE facility_reservations DROP CONSTRAINT IF EXISTS ex_facility_reservations_no_overlap;")
    op.drop_index('idx_facility_reservations_user', table_name='facility_reservations')
    op.drop_index('idx_facility_reservations_facility_start', table_name='facility_reservations')
    op.drop_table('facility_reservations')
    op.drop_index('idx_facility_pricings_lookup', table_name='facility_pricings')
    op.drop_table('facility_pricings')
    op.drop_table('facility_schedules')
    op.drop_index('ix_facilities_manager_id', table_name='facilities')
    op.drop_table('facilities')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.execute("DROP TYPE IF EXISTS platformrole;")
