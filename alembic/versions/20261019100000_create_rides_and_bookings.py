"""Create rides and bookings tables.

Revision ID: 20261019100000
Revises: 20261019000000
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261019100000"
down_revision: Union[str, None] = "20261019000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("driver_id", sa.Integer(), nullable=False),
        sa.Column("origin", sa.String(length=255), nullable=False),
        sa.Column("destination", sa.String(length=255), nullable=False),
        sa.Column("departure_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_seats", sa.Integer(), nullable=False),
        sa.Column("available_seats", sa.Integer(), nullable=False),
        sa.Column("price_per_seat", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="SCHEDULED"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint("available_seats >= 0", name="ck_rides_available_seats_non_negative"),
        sa.CheckConstraint("available_seats <= total_seats", name="ck_rides_available_le_total"),
        sa.ForeignKeyConstraint(["driver_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_rides_driver_id"), "rides", ["driver_id"], unique=False)
    op.create_index(op.f("ix_rides_origin"), "rides", ["origin"], unique=False)
    op.create_index(op.f("ix_rides_destination"), "rides", ["destination"], unique=False)
    op.create_index(op.f("ix_rides_departure_time"), "rides", ["departure_time"], unique=False)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ride_id", sa.Integer(), nullable=False),
        sa.Column("passenger_id", sa.Integer(), nullable=False),
        sa.Column("seats", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="CONFIRMED"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["ride_id"], ["rides.id"]),
        sa.ForeignKeyConstraint(["passenger_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bookings_ride_id"), "bookings", ["ride_id"], unique=False)
    op.create_index(op.f("ix_bookings_passenger_id"), "bookings", ["passenger_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_bookings_passenger_id"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_ride_id"), table_name="bookings")
    op.drop_table("bookings")
    op.drop_index(op.f("ix_rides_departure_time"), table_name="rides")
    op.drop_index(op.f("ix_rides_destination"), table_name="rides")
    op.drop_index(op.f("ix_rides_origin"), table_name="rides")
    op.drop_index(op.f("ix_rides_driver_id"), table_name="rides")
    op.drop_table("rides")
