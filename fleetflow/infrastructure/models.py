"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``vehicles`` -- fleet vehicles with capacity, odometer and status
* ``drivers``  -- drivers with licence data and status
* ``trips``    -- one vehicle + one driver between an origin and destination

Indexes
-------
* **B-Tree** on ``status`` columns and the trip foreign keys for the
  filters used by the API and the consistency audit.
* **Partial unique** indexes on ``trips.vehicle_id`` / ``trips.driver_id``
  restricted to DISPATCHED rows: the database itself refuses a second
  active trip for the same vehicle or driver.
"""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)

from .database import Base
from fleetflow.domain.enums import (
    DriverStatus,
    TripStatus,
    VehicleStatus,
    VehicleType,
)

_DISPATCHED_ONLY = text("status = 'DISPATCHED'")


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    model = Column(String(120), nullable=False, default="")
    license_plate = Column(String(32), unique=True, nullable=False)
    vehicle_type = Column(Enum(VehicleType), default=VehicleType.TRUCK, nullable=False)
    max_capacity = Column(Float, nullable=False, default=0.0)
    odometer = Column(Float, nullable=False, default=0.0)
    initial_odometer = Column(Float, nullable=False, default=0.0)
    acquisition_cost = Column(Float, nullable=False, default=0.0)
    region = Column(String(64), nullable=False, default="Default")
    status = Column(
        Enum(VehicleStatus), default=VehicleStatus.AVAILABLE, nullable=False
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_vehicles_status", "status"),)


class DriverModel(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    license_number = Column(String(32), unique=True, nullable=False)
    license_expiry = Column(Date, nullable=False)
    license_category = Column(String(8), nullable=False, default="C")
    safety_score = Column(Float, nullable=False, default=100.0)
    complaints = Column(Integer, nullable=False, default=0)
    status = Column(
        Enum(DriverStatus), default=DriverStatus.AVAILABLE, nullable=False
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_drivers_status", "status"),)


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(
        Integer, ForeignKey("vehicles.id", ondelete="RESTRICT"), nullable=False
    )
    driver_id = Column(
        Integer, ForeignKey("drivers.id", ondelete="RESTRICT"), nullable=False
    )

    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    cargo_weight = Column(Float, nullable=False, default=0.0)
    estimated_fuel_cost = Column(Float, nullable=False, default=0.0)
    actual_fuel_cost = Column(Float, nullable=True)
    distance = Column(Float, nullable=False, default=0.0)
    revenue = Column(Float, nullable=False, default=0.0)

    status = Column(Enum(TripStatus), default=TripStatus.DRAFT, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_trips_status", "status"),
        Index("idx_trips_vehicle", "vehicle_id"),
        Index("idx_trips_driver", "driver_id"),
        Index(
            "uq_trips_dispatched_vehicle",
            "vehicle_id",
            unique=True,
            postgresql_where=_DISPATCHED_ONLY,
            sqlite_where=_DISPATCHED_ONLY,
        ),
        Index(
            "uq_trips_dispatched_driver",
            "driver_id",
            unique=True,
            postgresql_where=_DISPATCHED_ONLY,
            sqlite_where=_DISPATCHED_ONLY,
        ),
    )
