"""Seed script to populate the database with sample readings."""

from datetime import UTC, datetime, timedelta

from household_meter.core.database import Base, SessionLocal, engine
from household_meter.models.reading import Reading
from household_meter.schemas.reading import ReadingCreate
from household_meter.services.readings import create_reading
from household_meter.services.time_window import to_utc_ms

HOUSEHOLD = ["anna", "ben", "clara"]


def seed_database() -> None:
    """Seed the database with a few weeks of household readings."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(Reading).first():
            print("Database already has data. Skipping seed.")
            return

        print("Seeding database...")

        start = datetime.now(UTC) - timedelta(days=60)
        meter_value = 1200.0
        for day in range(0, 60, 3):
            recorder = HOUSEHOLD[day % len(HOUSEHOLD)]
            owner = HOUSEHOLD[(day // 3) % len(HOUSEHOLD)]
            meter_value += 1.5 + (day % 4) * 0.5
            reading = create_reading(
                db,
                recorder,
                ReadingCreate(
                    current_kwh=round(meter_value, 1),
                    notes="",
                    for_username=owner,
                ),
                now_ms=to_utc_ms(start + timedelta(days=day)),
            )
            print(f"  {reading.owner_username}: +{reading.delta_kwh} kWh (by {reading.created_by})")

        print("Seed complete.")
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
