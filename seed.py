"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 10 sample vehicles (trucks, vans, bikes; one in shop, one retired)
  - 8 sample drivers (one suspended, one off duty with an expired licence)
  - 8 sample trips (DISPATCHED, COMPLETED, DRAFT)

Statuses are consistent: every ON_TRIP vehicle and ON_DUTY driver is held
by exactly one DISPATCHED trip.
"""

import asyncio
from datetime import date, datetime, timezone

from sqlalchemy import text

from fleetflow.domain.enums import (
    DriverStatus,
    TripStatus,
    VehicleStatus,
    VehicleType,
)
from fleetflow.infrastructure.database import async_session_factory, engine
from fleetflow.infrastructure.models import DriverModel, TripModel, VehicleModel


VEHICLES = [
    {"name": "Volvo FH16", "model": "FH16 2024", "plate": "FL-1001", "type": VehicleType.TRUCK, "capacity": 25000, "odometer": 45200, "cost": 85000, "status": VehicleStatus.AVAILABLE, "region": "North"},
    {"name": "Scania R500", "model": "R500 2023", "plate": "FL-1002", "type": VehicleType.TRUCK, "capacity": 20000, "odometer": 67800, "cost": 78000, "status": VehicleStatus.ON_TRIP, "region": "South"},
    {"name": "Mercedes Sprinter", "model": "Sprinter 2024", "plate": "FL-2001", "type": VehicleType.VAN, "capacity": 3500, "odometer": 23100, "cost": 42000, "status": VehicleStatus.AVAILABLE, "region": "East"},
    {"name": "Ford Transit", "model": "Transit 2023", "plate": "FL-2002", "type": VehicleType.VAN, "capacity": 4000, "odometer": 31500, "cost": 38000, "status": VehicleStatus.IN_SHOP, "region": "West"},
    {"name": "Iveco Daily", "model": "Daily 2024", "plate": "FL-2003", "type": VehicleType.VAN, "capacity": 3200, "odometer": 12400, "cost": 35000, "status": VehicleStatus.AVAILABLE, "region": "North"},
    {"name": "MAN TGX", "model": "TGX 2023", "plate": "FL-1003", "type": VehicleType.TRUCK, "capacity": 22000, "odometer": 89100, "cost": 92000, "status": VehicleStatus.ON_TRIP, "region": "South"},
    {"name": "DAF XF", "model": "XF 2024", "plate": "FL-1004", "type": VehicleType.TRUCK, "capacity": 24000, "odometer": 15600, "cost": 88000, "status": VehicleStatus.AVAILABLE, "region": "East"},
    {"name": "Honda CB500X", "model": "CB500X 2024", "plate": "FL-3001", "type": VehicleType.BIKE, "capacity": 50, "odometer": 8700, "cost": 7500, "status": VehicleStatus.AVAILABLE, "region": "North"},
    {"name": "Yamaha XMAX", "model": "XMAX 2024", "plate": "FL-3002", "type": VehicleType.BIKE, "capacity": 30, "odometer": 5200, "cost": 6000, "status": VehicleStatus.AVAILABLE, "region": "West"},
    {"name": "Renault Master", "model": "Master 2023", "plate": "FL-2004", "type": VehicleType.VAN, "capacity": 4500, "odometer": 42300, "cost": 40000, "status": VehicleStatus.RETIRED, "region": "South"},
]

DRIVERS = [
    {"name": "James Wilson", "license": "DL-25001", "expiry": date(2027, 6, 15), "category": "C", "status": DriverStatus.AVAILABLE, "score": 95, "complaints": 0},
    {"name": "Emily Carter", "license": "DL-25002", "expiry": date(2027, 3, 20), "category": "C", "status": DriverStatus.ON_DUTY, "score": 92, "complaints": 1},
    {"name": "Robert Chen", "license": "DL-25003", "expiry": date(2026, 12, 1), "category": "D", "status": DriverStatus.AVAILABLE, "score": 88, "complaints": 2},
    {"name": "Maria Garcia", "license": "DL-25004", "expiry": date(2028, 1, 10), "category": "C", "status": DriverStatus.AVAILABLE, "score": 97, "complaints": 0},
    {"name": "David Kim", "license": "DL-25005", "expiry": date(2025, 8, 30), "category": "B", "status": DriverStatus.OFF_DUTY, "score": 78, "complaints": 3},
    {"name": "Lisa Johnson", "license": "DL-25006", "expiry": date(2027, 9, 15), "category": "C", "status": DriverStatus.AVAILABLE, "score": 91, "complaints": 0},
    {"name": "Tom Anderson", "license": "DL-25007", "expiry": date(2026, 4, 22), "category": "D", "status": DriverStatus.SUSPENDED, "score": 62, "complaints": 8},
    {"name": "Sarah Lee", "license": "DL-25008", "expiry": date(2027, 11, 30), "category": "B", "status": DriverStatus.ON_DUTY, "score": 89, "complaints": 1},
]


def _day(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM vehicles"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Vehicles ──────────────────────────────────────────────────
        vehicles = []
        for v in VEHICLES:
            m = VehicleModel(
                name=v["name"],
                model=v["model"],
                license_plate=v["plate"],
                vehicle_type=v["type"],
                max_capacity=v["capacity"],
                odometer=v["odometer"],
                initial_odometer=0,
                acquisition_cost=v["cost"],
                region=v["region"],
                status=v["status"],
            )
            session.add(m)
            vehicles.append(m)
        await session.flush()
        print(f"  Created {len(vehicles)} vehicles")

        # ── Drivers ───────────────────────────────────────────────────
        drivers = []
        for d in DRIVERS:
            m = DriverModel(
                name=d["name"],
                license_number=d["license"],
                license_expiry=d["expiry"],
                license_category=d["category"],
                safety_score=d["score"],
                complaints=d["complaints"],
                status=d["status"],
            )
            session.add(m)
            drivers.append(m)
        await session.flush()
        print(f"  Created {len(drivers)} drivers")

        # ── Trips ─────────────────────────────────────────────────────
        trips_data = [
            # In flight: hold the ON_TRIP vehicles and ON_DUTY drivers
            {
                "vehicle": vehicles[1], "driver": drivers[1],
                "route": ("Mumbai", "Pune"), "cargo": 15000,
                "fuel": (4500, None), "distance": 150, "revenue": 25000,
                "status": TripStatus.DISPATCHED, "completed_at": None,
            },
            {
                "vehicle": vehicles[5], "driver": drivers[7],
                "route": ("Delhi", "Jaipur"), "cargo": 18000,
                "fuel": (8200, None), "distance": 280, "revenue": 35000,
                "status": TripStatus.DISPATCHED, "completed_at": None,
            },
            # Finished
            {
                "vehicle": vehicles[0], "driver": drivers[0],
                "route": ("Bangalore", "Chennai"), "cargo": 20000,
                "fuel": (9500, 9200), "distance": 350, "revenue": 42000,
                "status": TripStatus.COMPLETED, "completed_at": _day(2026, 2, 10),
            },
            {
                "vehicle": vehicles[2], "driver": drivers[2],
                "route": ("Kolkata", "Patna"), "cargo": 2800,
                "fuel": (5600, 5200), "distance": 600, "revenue": 18000,
                "status": TripStatus.COMPLETED, "completed_at": _day(2026, 2, 12),
            },
            {
                "vehicle": vehicles[6], "driver": drivers[3],
                "route": ("Hyderabad", "Vizag"), "cargo": 22000,
                "fuel": (7800, 7500), "distance": 620, "revenue": 38000,
                "status": TripStatus.COMPLETED, "completed_at": _day(2026, 2, 14),
            },
            {
                "vehicle": vehicles[4], "driver": drivers[5],
                "route": ("Ahmedabad", "Surat"), "cargo": 2500,
                "fuel": (2800, 2600), "distance": 265, "revenue": 12000,
                "status": TripStatus.COMPLETED, "completed_at": _day(2026, 2, 9),
            },
            # Planned
            {
                "vehicle": vehicles[0], "driver": drivers[0],
                "route": ("Chennai", "Coimbatore"), "cargo": 18000,
                "fuel": (6200, None), "distance": 0, "revenue": 28000,
                "status": TripStatus.DRAFT, "completed_at": None,
            },
            {
                "vehicle": vehicles[6], "driver": drivers[3],
                "route": ("Pune", "Goa"), "cargo": 21000,
                "fuel": (8500, None), "distance": 0, "revenue": 32000,
                "status": TripStatus.DRAFT, "completed_at": None,
            },
        ]

        for t in trips_data:
            trip = TripModel(
                vehicle_id=t["vehicle"].id,
                driver_id=t["driver"].id,
                origin=t["route"][0],
                destination=t["route"][1],
                cargo_weight=t["cargo"],
                estimated_fuel_cost=t["fuel"][0],
                actual_fuel_cost=t["fuel"][1],
                distance=t["distance"],
                revenue=t["revenue"],
                status=t["status"],
                completed_at=t["completed_at"],
            )
            session.add(trip)
        await session.flush()
        print(f"  Created {len(trips_data)} trips")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
