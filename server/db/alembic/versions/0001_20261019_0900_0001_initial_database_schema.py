"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    # Create routes table
    op.create_table('routes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('origin', sa.String(length=128), nullable=False),
        sa.Column('destination', sa.String(length=128), nullable=False),
        sa.Column('distance_km', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('distance_km >= 0', name='ck_route_distance_non_negative'),
        sa.CheckConstraint('length(origin) > 0', name='ck_route_origin_not_empty'),
        sa.CheckConstraint('length(destination) > 0', name='ck_route_destination_not_empty'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('origin', 'destination', name='uq_route_origin_destination')
    )
    op.create_index(op.f('ix_routes_origin'), 'routes', ['origin'], unique=False)
    op.create_index(op.f('ix_routes_destination'), 'routes', ['destination'], unique=False)

    # Create trips table
    op.create_table('trips',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('route_id', sa.Uuid(), nullable=False),
        sa.Column('departure_time', sa.String(length=5), nullable=False),
        sa.Column('arrival_time', sa.String(length=5), nullable=False),
        sa.Column('days_of_week', sa.String(length=32), nullable=False),
        sa.Column('base_price_amount', sa.Integer(), nullable=False),
        sa.Column('price_currency', sa.String(length=3), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('capacity > 0', name='ck_trip_capacity_positive'),
        sa.CheckConstraint('base_price_amount >= 0', name='ck_trip_price_amount_non_negative'),
        sa.CheckConstraint('length(price_currency) = 3', name='ck_trip_price_currency_length'),
        sa.ForeignKeyConstraint(['route_id'], ['routes.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_trips_route_id'), 'trips', ['route_id'], unique=False)

    # Create departures table (seat inventory)
    op.create_table('departures',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('trip_id', sa.Uuid(), nullable=False),
        sa.Column('departure_date', sa.Date(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('available_seats', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        *_timestamps(),
        sa.CheckConstraint('capacity > 0', name='ck_departure_capacity_positive'),
        sa.CheckConstraint('available_seats >= 0', name='ck_departure_available_seats_non_negative'),
        sa.CheckConstraint('available_seats <= capacity', name='ck_departure_available_seats_lte_capacity'),
        sa.CheckConstraint('version >= 0', name='ck_departure_version_non_negative'),
        sa.CheckConstraint("status IN ('active', 'cancelled', 'closed')", name='ck_departure_status_valid'),
        sa.ForeignKeyConstraint(['trip_id'], ['trips.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('trip_id', 'departure_date', name='uq_departure_trip_date')
    )
    op.create_index(op.f('ix_departures_trip_id'), 'departures', ['trip_id'], unique=False)
    op.create_index(op.f('ix_departures_departure_date'), 'departures', ['departure_date'], unique=False)
    op.create_index(op.f('ix_departures_status'), 'departures', ['status'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('departure_id', sa.Uuid(), nullable=False),
        sa.Column('booking_ref', sa.String(length=6), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('seats', sa.Integer(), nullable=False),
        sa.Column('total_price_amount', sa.Integer(), nullable=False),
        sa.Column('price_currency', sa.String(length=3), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=False),
        sa.Column('contact_phone', sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('seats > 0', name='ck_booking_seats_positive'),
        sa.CheckConstraint('total_price_amount >= 0', name='ck_booking_total_price_non_negative'),
        sa.CheckConstraint('length(booking_ref) = 6', name='ck_booking_ref_length'),
        sa.CheckConstraint("status IN ('confirmed', 'cancelled')", name='ck_booking_status_valid'),
        sa.ForeignKeyConstraint(['departure_id'], ['departures.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_departure_id'), 'bookings', ['departure_id'], unique=False)
    op.create_index(op.f('ix_bookings_booking_ref'), 'bookings', ['booking_ref'], unique=True)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
    op.create_index(op.f('ix_bookings_contact_email'), 'bookings', ['contact_email'], unique=False)

    # Create passengers table
    op.create_table('passengers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('length(first_name) > 0', name='ck_passenger_first_name_not_empty'),
        sa.CheckConstraint('length(last_name) > 0', name='ck_passenger_last_name_not_empty'),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_passengers_booking_id'), 'passengers', ['booking_id'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('passengers')
    op.drop_table('bookings')
    op.drop_table('departures')
    op.drop_table('trips')
    op.drop_table('routes')
