"""
Concurrency safety tests.

Demonstrates:
1. A plan computed from a stale read loses its compare-and-swap and the
   whole unit rolls back: no half-applied transition is ever visible.
2. Two dispatches racing for one vehicle or driver: exactly one wins, the
   loser sees the eligibility reason, not a generic conflict.
3. The partial unique indexes refuse a second DISPATCHED trip for the
   same vehicle even when the status guards are bypassed.
"""

from datetime import datetime, timezone

import pytest

from fleetflow.domain.enums import (
    DriverStatus,
    RejectionReason,
    TripStatus,
    VehicleStatus,
)
from fleetflow.domain.errors import ConflictError, EligibilityError
from fleetflow.domain.lifecycle import (
    CancelTrip,
    CompleteTrip,
    DispatchTrip,
    plan_transition,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


async def _plan(coordinator, trip_id, command):
    """Read snapshots in one unit and plan, as a racing request would."""
    async with coordinator.unit() as uow:
        trip = await uow.trips.get(trip_id)
        vehicle = await uow.vehicles.get(trip.vehicle_id)
        driver = await uow.drivers.get(trip.driver_id)
    return plan_transition(trip, vehicle, driver, command, NOW)


async def _apply(coordinator, plan):
    async with coordinator.unit() as uow:
        return await uow.apply(plan)


class TestRacingDispatch:
    @pytest.mark.asyncio
    async def test_one_vehicle_two_dispatches(
        self, coordinator, registry, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        driver_a = await make_driver()
        driver_b = await make_driver()
        trip_a = await make_trip(vehicle, driver_a)
        trip_b = await make_trip(vehicle, driver_b)

        # Both requests read the vehicle as AVAILABLE before either writes.
        plan_a = await _plan(coordinator, trip_a.id, DispatchTrip())
        plan_b = await _plan(coordinator, trip_b.id, DispatchTrip())

        winner = await _apply(coordinator, plan_a)
        assert winner.status == TripStatus.DISPATCHED

        with pytest.raises(EligibilityError) as exc_info:
            await _apply(coordinator, plan_b)
        assert exc_info.value.reason == RejectionReason.VEHICLE_UNAVAILABLE

        async with coordinator.unit() as uow:
            assert (await uow.trips.get(trip_b.id)).status == TripStatus.DRAFT
        assert (await registry.get_driver(driver_b.id)).status == DriverStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_one_driver_two_dispatches_rolls_back_vehicle(
        self, coordinator, registry, make_vehicle, make_driver, make_trip
    ):
        driver = await make_driver()
        vehicle_a = await make_vehicle()
        vehicle_b = await make_vehicle()
        trip_a = await make_trip(vehicle_a, driver)
        trip_b = await make_trip(vehicle_b, driver)

        plan_a = await _plan(coordinator, trip_a.id, DispatchTrip())
        plan_b = await _plan(coordinator, trip_b.id, DispatchTrip())
        await _apply(coordinator, plan_a)

        # plan_b claims vehicle_b first, then loses on the driver.
        with pytest.raises(EligibilityError) as exc_info:
            await _apply(coordinator, plan_b)
        assert exc_info.value.reason == RejectionReason.DRIVER_UNAVAILABLE

        assert (await registry.get_vehicle(vehicle_b.id)).status == VehicleStatus.AVAILABLE
        assert (await registry.get_vehicle(vehicle_a.id)).status == VehicleStatus.ON_TRIP
        assert (await registry.get_driver(driver.id)).status == DriverStatus.ON_DUTY


class TestStalePlans:
    @pytest.mark.asyncio
    async def test_complete_after_concurrent_cancel(
        self, coordinator, manager, registry, principal,
        make_vehicle, make_driver, make_trip,
    ):
        vehicle = await make_vehicle(odometer=1000)
        driver = await make_driver()
        trip = await make_trip(vehicle, driver)
        await manager.transition_trip(principal, trip.id, DispatchTrip())

        stale = await _plan(coordinator, trip.id, CompleteTrip(final_odometer=1500))
        await manager.transition_trip(principal, trip.id, CancelTrip())

        with pytest.raises(ConflictError):
            await _apply(coordinator, stale)

        assert (await manager.get_trip(trip.id)).status == TripStatus.CANCELLED
        vehicle_after = await registry.get_vehicle(vehicle.id)
        assert vehicle_after.status == VehicleStatus.AVAILABLE
        assert vehicle_after.odometer == 1000

    @pytest.mark.asyncio
    async def test_draft_cancel_after_concurrent_dispatch(
        self, coordinator, manager, registry, principal,
        make_vehicle, make_driver, make_trip,
    ):
        vehicle = await make_vehicle()
        driver = await make_driver()
        trip = await make_trip(vehicle, driver)

        # Planned against DRAFT: no resource writes, trip CAS on DRAFT.
        stale = await _plan(coordinator, trip.id, CancelTrip())
        await manager.transition_trip(principal, trip.id, DispatchTrip())

        with pytest.raises(ConflictError):
            await _apply(coordinator, stale)

        assert (await manager.get_trip(trip.id)).status == TripStatus.DISPATCHED
        assert (await registry.get_vehicle(vehicle.id)).status == VehicleStatus.ON_TRIP
        assert (await registry.get_driver(driver.id)).status == DriverStatus.ON_DUTY

    @pytest.mark.asyncio
    async def test_dispatch_after_maintenance_took_vehicle(
        self, coordinator, registry, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        driver = await make_driver()
        trip = await make_trip(vehicle, driver)

        stale = await _plan(coordinator, trip.id, DispatchTrip())
        await registry.change_vehicle_status(principal, vehicle.id, VehicleStatus.IN_SHOP)

        with pytest.raises(EligibilityError) as exc_info:
            await _apply(coordinator, stale)
        assert exc_info.value.reason == RejectionReason.VEHICLE_UNAVAILABLE
        assert exc_info.value.details["status"] == VehicleStatus.IN_SHOP.value


class TestDispatchedUniqueness:
    @pytest.mark.asyncio
    async def test_second_dispatched_trip_per_vehicle_is_refused(
        self, coordinator, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        trip_a = await make_trip(vehicle, await make_driver())
        trip_b = await make_trip(vehicle, await make_driver())

        # Bypass the resource CAS entirely: only the index stands in the way.
        with pytest.raises(ConflictError):
            async with coordinator.unit() as uow:
                await uow.trips.set_status(
                    trip_a.id, TripStatus.DISPATCHED, expected=TripStatus.DRAFT
                )
                await uow.trips.set_status(
                    trip_b.id, TripStatus.DISPATCHED, expected=TripStatus.DRAFT
                )

        async with coordinator.unit() as uow:
            assert (await uow.trips.get(trip_a.id)).status == TripStatus.DRAFT
            assert (await uow.trips.get(trip_b.id)).status == TripStatus.DRAFT
