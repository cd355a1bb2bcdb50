"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and hands out
immutable domain snapshots, never ORM rows.  Together the vehicle and
driver repositories form the Resource Registry: typed accessors with no
business validation.

Status writes are conditional (``... WHERE status = :expected``) and
return whether a row matched; they are not transactional on their own
and must run inside a coordinator unit.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DriverModel, TripModel, VehicleModel
from fleetflow.domain.entities import Driver, Trip, Vehicle
from fleetflow.domain.enums import (
    ACTIVE_TRIP_STATUSES,
    DriverStatus,
    TripStatus,
    VehicleStatus,
    VehicleType,
)
from fleetflow.domain.errors import DuplicateError, NotFoundError


# ── Row -> snapshot ───────────────────────────────────────────────────


def vehicle_snapshot(row: VehicleModel) -> Vehicle:
    return Vehicle(
        id=row.id,
        max_capacity=row.max_capacity,
        odometer=row.odometer,
        status=VehicleStatus(row.status),
        name=row.name,
        model=row.model,
        license_plate=row.license_plate,
        vehicle_type=VehicleType(row.vehicle_type),
        initial_odometer=row.initial_odometer,
        acquisition_cost=row.acquisition_cost,
        region=row.region,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def driver_snapshot(row: DriverModel) -> Driver:
    return Driver(
        id=row.id,
        license_expiry=row.license_expiry,
        status=DriverStatus(row.status),
        name=row.name,
        license_number=row.license_number,
        license_category=row.license_category,
        safety_score=row.safety_score,
        complaints=row.complaints,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def trip_snapshot(row: TripModel) -> Trip:
    return Trip(
        id=row.id,
        vehicle_id=row.vehicle_id,
        driver_id=row.driver_id,
        origin=row.origin,
        destination=row.destination,
        cargo_weight=row.cargo_weight,
        estimated_fuel_cost=row.estimated_fuel_cost,
        actual_fuel_cost=row.actual_fuel_cost,
        distance=row.distance,
        revenue=row.revenue,
        status=TripStatus(row.status),
        created_at=row.created_at,
        completed_at=row.completed_at,
        updated_at=row.updated_at,
    )


# ── Resource Registry ─────────────────────────────────────────────────


class VehicleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, vehicle_id: int, for_update: bool = False) -> VehicleModel:
        query = select(VehicleModel).where(VehicleModel.id == vehicle_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(
            query.execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Vehicle", vehicle_id)
        return row

    async def get(self, vehicle_id: int, for_update: bool = False) -> Vehicle:
        return vehicle_snapshot(await self._row(vehicle_id, for_update))

    async def get_by_plate(self, license_plate: str) -> Optional[Vehicle]:
        result = await self.session.execute(
            select(VehicleModel).where(VehicleModel.license_plate == license_plate)
        )
        row = result.scalar_one_or_none()
        return vehicle_snapshot(row) if row else None

    async def find(
        self,
        *,
        status: Optional[VehicleStatus] = None,
        vehicle_type: Optional[VehicleType] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[Vehicle], int]:
        conditions = []
        if status:
            conditions.append(VehicleModel.status == status)
        if vehicle_type:
            conditions.append(VehicleModel.vehicle_type == vehicle_type)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    VehicleModel.name.ilike(pattern),
                    VehicleModel.model.ilike(pattern),
                    VehicleModel.license_plate.ilike(pattern),
                )
            )

        total = await self.session.execute(
            select(func.count()).select_from(VehicleModel).where(*conditions)
        )
        result = await self.session.execute(
            select(VehicleModel)
            .where(*conditions)
            .order_by(VehicleModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = result.scalars().all()
        return [vehicle_snapshot(r) for r in rows], total.scalar() or 0

    async def list_by_status(self, status: VehicleStatus) -> list[Vehicle]:
        result = await self.session.execute(
            select(VehicleModel).where(VehicleModel.status == status)
        )
        return [vehicle_snapshot(r) for r in result.scalars().all()]

    async def add(self, **fields: Any) -> Vehicle:
        row = VehicleModel(**fields)
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # The plate is the only unique column.
            raise DuplicateError(
                "License plate already registered",
                {"license_plate": fields.get("license_plate")},
            ) from exc
        await self.session.refresh(row)
        return vehicle_snapshot(row)

    async def update_fields(self, vehicle_id: int, fields: dict[str, Any]) -> Vehicle:
        row = await self._row(vehicle_id)
        for key, value in fields.items():
            setattr(row, key, value)
        await self.session.flush()
        await self.session.refresh(row)
        return vehicle_snapshot(row)

    async def delete(self, vehicle_id: int) -> None:
        await self.session.execute(
            delete(VehicleModel).where(VehicleModel.id == vehicle_id)
        )

    async def set_status(
        self,
        vehicle_id: int,
        status: VehicleStatus,
        *,
        expected: VehicleStatus,
        odometer: Optional[float] = None,
    ) -> bool:
        """Compare-and-swap the status.  Returns False if no row matched."""
        values: dict[str, Any] = {"status": status}
        if odometer is not None:
            values["odometer"] = odometer
        result = await self.session.execute(
            update(VehicleModel)
            .where(VehicleModel.id == vehicle_id, VehicleModel.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class DriverRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, driver_id: int, for_update: bool = False) -> DriverModel:
        query = select(DriverModel).where(DriverModel.id == driver_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(
            query.execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Driver", driver_id)
        return row

    async def get(self, driver_id: int, for_update: bool = False) -> Driver:
        return driver_snapshot(await self._row(driver_id, for_update))

    async def get_by_license_number(self, license_number: str) -> Optional[Driver]:
        result = await self.session.execute(
            select(DriverModel).where(DriverModel.license_number == license_number)
        )
        row = result.scalar_one_or_none()
        return driver_snapshot(row) if row else None

    async def find(
        self,
        *,
        status: Optional[DriverStatus] = None,
        search: Optional[str] = None,
    ) -> list[Driver]:
        query = select(DriverModel).order_by(DriverModel.id.desc())
        if status:
            query = query.where(DriverModel.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    DriverModel.name.ilike(pattern),
                    DriverModel.license_number.ilike(pattern),
                )
            )
        result = await self.session.execute(query)
        return [driver_snapshot(r) for r in result.scalars().all()]

    async def list_by_status(self, status: DriverStatus) -> list[Driver]:
        result = await self.session.execute(
            select(DriverModel).where(DriverModel.status == status)
        )
        return [driver_snapshot(r) for r in result.scalars().all()]

    async def add(self, **fields: Any) -> Driver:
        row = DriverModel(**fields)
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateError(
                "License number already registered",
                {"license_number": fields.get("license_number")},
            ) from exc
        await self.session.refresh(row)
        return driver_snapshot(row)

    async def update_fields(self, driver_id: int, fields: dict[str, Any]) -> Driver:
        row = await self._row(driver_id)
        for key, value in fields.items():
            setattr(row, key, value)
        await self.session.flush()
        await self.session.refresh(row)
        return driver_snapshot(row)

    async def delete(self, driver_id: int) -> None:
        await self.session.execute(
            delete(DriverModel).where(DriverModel.id == driver_id)
        )

    async def set_status(
        self,
        driver_id: int,
        status: DriverStatus,
        *,
        expected: DriverStatus,
    ) -> bool:
        """Compare-and-swap the status.  Returns False if no row matched."""
        result = await self.session.execute(
            update(DriverModel)
            .where(DriverModel.id == driver_id, DriverModel.status == expected)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


# ── Trips ─────────────────────────────────────────────────────────────


class TripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, trip_id: int, for_update: bool = False) -> TripModel:
        query = select(TripModel).where(TripModel.id == trip_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(
            query.execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Trip", trip_id)
        return row

    async def get(self, trip_id: int, for_update: bool = False) -> Trip:
        return trip_snapshot(await self._row(trip_id, for_update))

    async def find(
        self,
        *,
        status: Optional[TripStatus] = None,
        search: Optional[str] = None,
    ) -> list[Trip]:
        query = select(TripModel).order_by(
            TripModel.created_at.desc(), TripModel.id.desc()
        )
        if status:
            query = query.where(TripModel.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    TripModel.origin.ilike(pattern),
                    TripModel.destination.ilike(pattern),
                )
            )
        result = await self.session.execute(query)
        return [trip_snapshot(r) for r in result.scalars().all()]

    async def list_by_status(self, status: TripStatus) -> list[Trip]:
        result = await self.session.execute(
            select(TripModel).where(TripModel.status == status)
        )
        return [trip_snapshot(r) for r in result.scalars().all()]

    async def add(self, **fields: Any) -> Trip:
        row = TripModel(status=TripStatus.DRAFT, **fields)
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return trip_snapshot(row)

    async def update_fields(self, trip_id: int, fields: dict[str, Any]) -> Trip:
        row = await self._row(trip_id)
        for key, value in fields.items():
            setattr(row, key, value)
        await self.session.flush()
        await self.session.refresh(row)
        return trip_snapshot(row)

    async def set_status(
        self,
        trip_id: int,
        status: TripStatus,
        *,
        expected: TripStatus,
        **fields: Any,
    ) -> bool:
        """Compare-and-swap the status (plus any extra columns)."""
        result = await self.session.execute(
            update(TripModel)
            .where(TripModel.id == trip_id, TripModel.status == expected)
            .values(status=status, **fields)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_active_for_vehicle(self, vehicle_id: int) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(TripModel)
            .where(
                TripModel.vehicle_id == vehicle_id,
                TripModel.status.in_(list(ACTIVE_TRIP_STATUSES)),
            )
        )
        return result.scalar() or 0

    async def count_active_for_driver(self, driver_id: int) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(TripModel)
            .where(
                TripModel.driver_id == driver_id,
                TripModel.status.in_(list(ACTIVE_TRIP_STATUSES)),
            )
        )
        return result.scalar() or 0

    async def count_for_vehicle(self, vehicle_id: int) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(TripModel)
            .where(TripModel.vehicle_id == vehicle_id)
        )
        return result.scalar() or 0

    async def count_for_driver(self, driver_id: int) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(TripModel)
            .where(TripModel.driver_id == driver_id)
        )
        return result.scalar() or 0
