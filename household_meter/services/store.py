"""Persistence operations the reading service needs from the database."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal

from sqlalchemy import and_, delete, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from household_meter.core.errors import AuthorizationError, NotFoundError, StoreError
from household_meter.models.monthly_aggregate import MonthlyAggregate, aggregate_key
from household_meter.models.reading import GLOBAL_PK, Reading
from household_meter.services.time_window import month_start_ms, period_label

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(db: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise database failures as StoreError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store failure while %s", action)
        raise StoreError(f"Error {action}", str(exc)) from exc


def insert_reading(db: Session, reading: Reading) -> Reading:
    """Append a reading unconditionally."""
    with store_errors(db, "saving reading"):
        db.add(reading)
        db.commit()
        db.refresh(reading)
    return reading


def most_recent_reading(db: Session) -> Reading | None:
    """Get the reading with the greatest timestamp across all owners."""
    with store_errors(db, "fetching latest reading"):
        return (
            db.query(Reading)
            .filter(Reading.global_pk == GLOBAL_PK)
            .order_by(Reading.timestamp.desc())
            .first()
        )


def query_by_time_range(db: Session, start_ms: int, end_ms: int) -> list[Reading]:
    """Get readings with ``start_ms <= timestamp < end_ms``, newest first."""
    with store_errors(db, "fetching readings"):
        return (
            db.query(Reading)
            .filter(
                and_(
                    Reading.global_pk == GLOBAL_PK,
                    Reading.timestamp >= start_ms,
                    Reading.timestamp < end_ms,
                )
            )
            .order_by(Reading.timestamp.desc())
            .all()
        )


def query_all_readings(db: Session) -> list[Reading]:
    with store_errors(db, "fetching readings"):
        return (
            db.query(Reading)
            .filter(Reading.global_pk == GLOBAL_PK)
            .order_by(Reading.timestamp.asc())
            .all()
        )


def delete_if_owned(db: Session, reading_id: str, requester: str) -> Reading:
    """
    Delete a reading if the requester created it.

    Legacy rows without ``created_by`` may be deleted by the user whose name
    is stored as their owner. The ownership predicate is part of the DELETE
    statement itself, so a concurrent change cannot slip between check and
    delete.

    Returns:
        The deleted reading (detached snapshot).

    Raises:
        NotFoundError: If no reading has this id.
        AuthorizationError: If the reading exists but is not the requester's.
    """
    with store_errors(db, "deleting reading"):
        snapshot = db.get(Reading, reading_id)
        if snapshot is None:
            raise NotFoundError(f"Reading {reading_id} not found.")
        db.refresh(snapshot)
        db.expunge(snapshot)

        owned = or_(
            Reading.created_by == requester,
            and_(
                Reading.created_by.is_(None),
                or_(Reading.owner_username == requester, Reading.username == requester),
            ),
        )
        result = db.execute(
            delete(Reading).where(and_(Reading.id == reading_id, owned)),
            execution_options={"synchronize_session": False},
        )
        db.commit()

        if result.rowcount == 0:
            if db.get(Reading, reading_id) is None:
                raise NotFoundError(f"Reading {reading_id} not found.")
            raise AuthorizationError("Not allowed to delete this reading.")

    return snapshot


def upsert_monthly_aggregate(
    db: Session,
    owner: str,
    period_ts: int,
    delta_kwh: Decimal,
    now_ms: int,
) -> None:
    """Add ``delta_kwh`` to the owner's monthly total, creating the row if absent."""
    period = period_label(period_ts)
    key = aggregate_key(owner, period)
    with store_errors(db, "updating monthly aggregate"):
        result = db.execute(
            update(MonthlyAggregate)
            .where(MonthlyAggregate.id == key)
            .values(total_kwh=MonthlyAggregate.total_kwh + delta_kwh, updated_at=now_ms),
            execution_options={"synchronize_session": False},
        )
        if result.rowcount == 0:
            db.add(_new_aggregate(owner, period_ts, delta_kwh, now_ms))
        db.commit()


def set_monthly_aggregate(
    db: Session,
    owner: str,
    period_ts: int,
    total_kwh: Decimal,
    now_ms: int,
) -> None:
    """Overwrite the owner's monthly total with a recomputed value."""
    key = aggregate_key(owner, period_label(period_ts))
    with store_errors(db, "writing monthly aggregate"):
        aggregate = db.get(MonthlyAggregate, key)
        if aggregate is None:
            db.add(_new_aggregate(owner, period_ts, total_kwh, now_ms))
        else:
            aggregate.total_kwh = total_kwh
            aggregate.updated_at = now_ms
        db.commit()


def get_monthly_aggregate(db: Session, owner: str, period: str) -> Decimal | None:
    """Get the cached total for ``(owner, YYYY-MM)``, or None if no row exists."""
    with store_errors(db, "fetching account summary"):
        aggregate = db.get(MonthlyAggregate, aggregate_key(owner, period))
        return aggregate.total_kwh if aggregate else None


def _new_aggregate(owner: str, period_ts: int, total_kwh: Decimal, now_ms: int) -> MonthlyAggregate:
    return MonthlyAggregate(
        id=aggregate_key(owner, period_label(period_ts)),
        username=owner,
        period=period_label(period_ts),
        total_kwh=total_kwh,
        timestamp=month_start_ms(period_ts),
        updated_at=now_ms,
        global_pk=f"ACCOUNT#{owner}",
    )
