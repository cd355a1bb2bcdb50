"""Initial schema: vehicles, drivers and trips.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("model", sa.String(120), nullable=False, server_default=""),
        sa.Column("license_plate", sa.String(32), unique=True, nullable=False),
        sa.Column(
            "vehicle_type",
            sa.Enum("TRUCK", "VAN", "BIKE", name="vehicletype"),
            nullable=False,
            server_default="TRUCK",
        ),
        sa.Column("max_capacity", sa.Float, nullable=False, server_default="0"),
        sa.Column("odometer", sa.Float, nullable=False, server_default="0"),
        sa.Column("initial_odometer", sa.Float, nullable=False, server_default="0"),
        sa.Column("acquisition_cost", sa.Float, nullable=False, server_default="0"),
        sa.Column("region", sa.String(64), nullable=False, server_default="Default"),
        sa.Column(
            "status",
            sa.Enum(
                "AVAILABLE", "ON_TRIP", "IN_SHOP", "RETIRED", name="vehiclestatus"
            ),
            nullable=False,
            server_default="AVAILABLE",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_vehicles_status", "vehicles", ["status"])

    # ── drivers ───────────────────────────────────────────────────────
    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("license_number", sa.String(32), unique=True, nullable=False),
        sa.Column("license_expiry", sa.Date, nullable=False),
        sa.Column("license_category", sa.String(8), nullable=False, server_default="C"),
        sa.Column("safety_score", sa.Float, nullable=False, server_default="100"),
        sa.Column("complaints", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "status",
            sa.Enum(
                "AVAILABLE", "ON_DUTY", "OFF_DUTY", "SUSPENDED", name="driverstatus"
            ),
            nullable=False,
            server_default="AVAILABLE",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_drivers_status", "drivers", ["status"])

    # ── trips ─────────────────────────────────────────────────────────
    op.create_table(
        "trips",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "vehicle_id",
            sa.Integer,
            sa.ForeignKey("vehicles.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "driver_id",
            sa.Integer,
            sa.ForeignKey("drivers.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("origin", sa.String(255), nullable=False),
        sa.Column("destination", sa.String(255), nullable=False),
        sa.Column("cargo_weight", sa.Float, nullable=False, server_default="0"),
        sa.Column("estimated_fuel_cost", sa.Float, nullable=False, server_default="0"),
        sa.Column("actual_fuel_cost", sa.Float, nullable=True),
        sa.Column("distance", sa.Float, nullable=False, server_default="0"),
        sa.Column("revenue", sa.Float, nullable=False, server_default="0"),
        sa.Column(
            "status",
            sa.Enum(
                "DRAFT", "DISPATCHED", "COMPLETED", "CANCELLED", name="tripstatus"
            ),
            nullable=False,
            server_default="DRAFT",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_trips_status", "trips", ["status"])
    op.create_index("idx_trips_vehicle", "trips", ["vehicle_id"])
    op.create_index("idx_trips_driver", "trips", ["driver_id"])
    # At most one DISPATCHED trip per vehicle and per driver
    op.create_index(
        "uq_trips_dispatched_vehicle",
        "trips",
        ["vehicle_id"],
        unique=True,
        postgresql_where=sa.text("status = 'DISPATCHED'"),
    )
    op.create_index(
        "uq_trips_dispatched_driver",
        "trips",
        ["driver_id"],
        unique=True,
        postgresql_where=sa.text("status = 'DISPATCHED'"),
    )


def downgrade() -> None:
    op.drop_table("trips")
    op.drop_table("drivers")
    op.drop_table("vehicles")
    op.execute("DROP TYPE IF EXISTS tripstatus")
    op.execute("DROP TYPE IF EXISTS driverstatus")
    op.execute("DROP TYPE IF EXISTS vehiclestatus")
    op.execute("DROP TYPE IF EXISTS vehicletype")
