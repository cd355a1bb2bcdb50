"""
Integration tests for ``TripLifecycleManager`` against in-memory SQLite.

Each test drives the manager end to end and then re-reads vehicles and
drivers to check that their statuses moved together with the trip.
"""

from datetime import date

import pytest

from fleetflow.domain.enums import (
    DriverStatus,
    RejectionReason,
    TripStatus,
    VehicleStatus,
)
from fleetflow.domain.errors import (
    EligibilityError,
    InvalidStateError,
    NotFoundError,
    UneditableFieldError,
)
from fleetflow.domain.lifecycle import CancelTrip, CompleteTrip, DispatchTrip


class TestCreateTrip:
    @pytest.mark.asyncio
    async def test_creates_draft_without_claiming_resources(
        self, manager, registry, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        driver = await make_driver()

        trip = await make_trip(vehicle, driver, cargo_weight=18000)

        assert trip.status == TripStatus.DRAFT
        assert trip.completed_at is None
        assert (await registry.get_vehicle(vehicle.id)).status == VehicleStatus.AVAILABLE
        assert (await registry.get_driver(driver.id)).status == DriverStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_cargo_too_heavy_persists_nothing(
        self, manager, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle(max_capacity=20000)
        driver = await make_driver()

        with pytest.raises(EligibilityError) as exc_info:
            await make_trip(vehicle, driver, cargo_weight=25000)

        assert exc_info.value.reason == RejectionReason.CARGO_TOO_HEAVY
        assert await manager.list_trips() == []

    @pytest.mark.asyncio
    async def test_suspended_driver(self, make_vehicle, make_driver, make_trip):
        vehicle = await make_vehicle()
        driver = await make_driver(status=DriverStatus.SUSPENDED)

        with pytest.raises(EligibilityError) as exc_info:
            await make_trip(vehicle, driver)
        assert exc_info.value.reason == RejectionReason.DRIVER_SUSPENDED

    @pytest.mark.asyncio
    async def test_expired_license(self, make_vehicle, make_driver, make_trip):
        vehicle = await make_vehicle()
        driver = await make_driver(license_expiry=date(2026, 2, 1))

        with pytest.raises(EligibilityError) as exc_info:
            await make_trip(vehicle, driver)
        assert exc_info.value.reason == RejectionReason.LICENSE_EXPIRED

    @pytest.mark.asyncio
    async def test_unknown_vehicle(self, make_driver, make_trip):
        driver = await make_driver()

        class _Missing:
            id = 999

        with pytest.raises(NotFoundError):
            await make_trip(_Missing(), driver)

    @pytest.mark.asyncio
    async def test_several_drafts_may_share_a_vehicle(
        self, manager, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        driver = await make_driver()

        await make_trip(vehicle, driver)
        await make_trip(vehicle, driver)

        drafts = await manager.list_trips(status=TripStatus.DRAFT)
        assert len(drafts) == 2


class TestFullLifecycle:
    @pytest.mark.asyncio
    async def test_dispatch_then_complete(
        self, manager, registry, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle(max_capacity=20000, odometer=1000)
        driver = await make_driver()
        trip = await make_trip(vehicle, driver, cargo_weight=18000)

        dispatched = await manager.transition_trip(principal, trip.id, DispatchTrip())
        assert dispatched.status == TripStatus.DISPATCHED
        assert (await registry.get_vehicle(vehicle.id)).status == VehicleStatus.ON_TRIP
        assert (await registry.get_driver(driver.id)).status == DriverStatus.ON_DUTY

        # The vehicle is now held: a new trip on it is refused.
        other_driver = await make_driver()
        with pytest.raises(EligibilityError) as exc_info:
            await make_trip(vehicle, other_driver)
        assert exc_info.value.reason == RejectionReason.VEHICLE_UNAVAILABLE

        completed = await manager.transition_trip(
            principal, trip.id, CompleteTrip(final_odometer=1200)
        )
        assert completed.status == TripStatus.COMPLETED
        assert completed.completed_at is not None

        vehicle_after = await registry.get_vehicle(vehicle.id)
        assert vehicle_after.status == VehicleStatus.AVAILABLE
        assert vehicle_after.odometer == 1200
        assert (await registry.get_driver(driver.id)).status == DriverStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_complete_defaults(
        self, manager, registry, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle(odometer=1000)
        driver = await make_driver()
        trip = await make_trip(vehicle, driver, estimated_fuel_cost=4500)
        await manager.transition_trip(principal, trip.id, DispatchTrip())

        completed = await manager.transition_trip(principal, trip.id, CompleteTrip())

        assert completed.actual_fuel_cost == 4500
        assert completed.distance == 0
        assert (await registry.get_vehicle(vehicle.id)).odometer == 1000

    @pytest.mark.asyncio
    async def test_complete_with_explicit_zero_fuel_cost(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        driver = await make_driver()
        trip = await make_trip(vehicle, driver, estimated_fuel_cost=4500)
        await manager.transition_trip(principal, trip.id, DispatchTrip())

        completed = await manager.transition_trip(
            principal, trip.id, CompleteTrip(actual_fuel_cost=0, distance=320)
        )

        assert completed.actual_fuel_cost == 0
        assert completed.distance == 320

    @pytest.mark.asyncio
    async def test_odometer_rollback_leaves_trip_dispatched(
        self, manager, registry, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle(odometer=1000)
        driver = await make_driver()
        trip = await make_trip(vehicle, driver)
        await manager.transition_trip(principal, trip.id, DispatchTrip())

        with pytest.raises(EligibilityError) as exc_info:
            await manager.transition_trip(
                principal, trip.id, CompleteTrip(final_odometer=900)
            )

        assert exc_info.value.reason == RejectionReason.ODOMETER_ROLLBACK
        assert (await manager.get_trip(trip.id)).status == TripStatus.DISPATCHED
        assert (await registry.get_vehicle(vehicle.id)).status == VehicleStatus.ON_TRIP


class TestInvalidTransitions:
    @pytest.mark.asyncio
    async def test_dispatch_twice(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        trip = await make_trip(await make_vehicle(), await make_driver())
        await manager.transition_trip(principal, trip.id, DispatchTrip())

        with pytest.raises(InvalidStateError):
            await manager.transition_trip(principal, trip.id, DispatchTrip())

    @pytest.mark.asyncio
    async def test_complete_draft(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        trip = await make_trip(await make_vehicle(), await make_driver())

        with pytest.raises(InvalidStateError):
            await manager.transition_trip(principal, trip.id, CompleteTrip())

    @pytest.mark.asyncio
    async def test_unknown_trip(self, manager, principal):
        with pytest.raises(NotFoundError):
            await manager.transition_trip(principal, 999, DispatchTrip())

    @pytest.mark.asyncio
    async def test_dispatch_rechecks_driver(
        self, manager, registry, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        driver = await make_driver()
        trip = await make_trip(vehicle, driver)
        await registry.change_driver_status(principal, driver.id, DriverStatus.SUSPENDED)

        with pytest.raises(EligibilityError) as exc_info:
            await manager.transition_trip(principal, trip.id, DispatchTrip())

        assert exc_info.value.reason == RejectionReason.DRIVER_UNAVAILABLE
        assert (await manager.get_trip(trip.id)).status == TripStatus.DRAFT
        assert (await registry.get_vehicle(vehicle.id)).status == VehicleStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_second_draft_on_held_vehicle(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        first = await make_trip(vehicle, await make_driver())
        second = await make_trip(vehicle, await make_driver())
        await manager.transition_trip(principal, first.id, DispatchTrip())

        with pytest.raises(EligibilityError) as exc_info:
            await manager.transition_trip(principal, second.id, DispatchTrip())
        assert exc_info.value.reason == RejectionReason.VEHICLE_UNAVAILABLE


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_draft_leaves_resources_alone(
        self, manager, registry, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        driver = await make_driver()
        trip = await make_trip(vehicle, driver)
        # Maintenance takes the vehicle while the trip is still a draft.
        await registry.change_vehicle_status(principal, vehicle.id, VehicleStatus.IN_SHOP)

        cancelled = await manager.transition_trip(principal, trip.id, CancelTrip())

        assert cancelled.status == TripStatus.CANCELLED
        assert (await registry.get_vehicle(vehicle.id)).status == VehicleStatus.IN_SHOP
        assert (await registry.get_driver(driver.id)).status == DriverStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_cancel_dispatched_releases_resources(
        self, manager, registry, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle(odometer=1000)
        driver = await make_driver()
        trip = await make_trip(vehicle, driver)
        await manager.transition_trip(principal, trip.id, DispatchTrip())

        cancelled = await manager.transition_trip(principal, trip.id, CancelTrip())

        assert cancelled.status == TripStatus.CANCELLED
        assert cancelled.completed_at is None
        vehicle_after = await registry.get_vehicle(vehicle.id)
        assert vehicle_after.status == VehicleStatus.AVAILABLE
        assert vehicle_after.odometer == 1000
        assert (await registry.get_driver(driver.id)).status == DriverStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_cancel_twice(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        trip = await make_trip(await make_vehicle(), await make_driver())
        await manager.transition_trip(principal, trip.id, CancelTrip())

        with pytest.raises(EligibilityError) as exc_info:
            await manager.transition_trip(principal, trip.id, CancelTrip())
        assert exc_info.value.reason == RejectionReason.ALREADY_TERMINAL

    @pytest.mark.asyncio
    async def test_cancel_completed(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        trip = await make_trip(await make_vehicle(), await make_driver())
        await manager.transition_trip(principal, trip.id, DispatchTrip())
        await manager.transition_trip(principal, trip.id, CompleteTrip())

        with pytest.raises(EligibilityError) as exc_info:
            await manager.transition_trip(principal, trip.id, CancelTrip())
        assert exc_info.value.reason == RejectionReason.ALREADY_TERMINAL


class TestPatchAndQueries:
    @pytest.mark.asyncio
    async def test_patch_draft(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        trip = await make_trip(await make_vehicle(), await make_driver())

        patched = await manager.patch_trip(
            principal, trip.id, {"destination": "Nashik", "revenue": 15000}
        )

        assert patched.destination == "Nashik"
        assert patched.revenue == 15000
        assert patched.status == TripStatus.DRAFT

    @pytest.mark.asyncio
    async def test_patch_does_not_touch_resources(
        self, manager, registry, principal, make_vehicle, make_driver, make_trip
    ):
        vehicle = await make_vehicle()
        trip = await make_trip(vehicle, await make_driver())
        await manager.transition_trip(principal, trip.id, DispatchTrip())

        patched = await manager.patch_trip(principal, trip.id, {"origin": "Thane"})

        assert patched.status == TripStatus.DISPATCHED
        assert (await registry.get_vehicle(vehicle.id)).status == VehicleStatus.ON_TRIP

    @pytest.mark.asyncio
    async def test_patch_terminal_trip(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        trip = await make_trip(await make_vehicle(), await make_driver())
        await manager.transition_trip(principal, trip.id, CancelTrip())

        with pytest.raises(InvalidStateError):
            await manager.patch_trip(principal, trip.id, {"origin": "Thane"})

    @pytest.mark.asyncio
    async def test_patch_rejects_status_field(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        trip = await make_trip(await make_vehicle(), await make_driver())

        with pytest.raises(UneditableFieldError) as exc_info:
            await manager.patch_trip(principal, trip.id, {"status": "COMPLETED"})
        assert exc_info.value.details == {"fields": ["status"]}

    @pytest.mark.asyncio
    async def test_list_filters(
        self, manager, principal, make_vehicle, make_driver, make_trip
    ):
        first = await make_trip(await make_vehicle(), await make_driver(), origin="Delhi")
        await make_trip(await make_vehicle(), await make_driver(), origin="Chennai")
        await manager.transition_trip(principal, first.id, CancelTrip())

        cancelled = await manager.list_trips(status=TripStatus.CANCELLED)
        assert [t.id for t in cancelled] == [first.id]

        found = await manager.list_trips(search="chen")
        assert [t.origin for t in found] == ["Chennai"]
