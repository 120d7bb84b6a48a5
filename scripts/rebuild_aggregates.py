"""Recompute every monthly aggregate row from the raw readings."""

from household_meter.core.database import Base, SessionLocal, engine
from household_meter.services.readings import rebuild_all_monthly_aggregates


def main() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        count = rebuild_all_monthly_aggregates(db)
        print(f"Rebuilt {count} monthly aggregate rows.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
