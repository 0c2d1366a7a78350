"""Event-related database queries using SQLAlchemy Core."""

from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import (
    event_trainers,
    events,
    pools,
    registrations,
    trainers,
    users,
)


async def get_event(conn: AsyncConnection, event_id: int) -> dict[str, Any] | None:
    """Get a single event by ID."""
    result = await conn.execute(select(events).where(events.c.event_id == event_id))
    row = result.mappings().first()
    return dict(row) if row else None


async def get_event_registrants(
    conn: AsyncConnection,
    event_id: int,
) -> list[dict[str, Any]]:
    """
    Get registered users for an event, in registration order.

    Each dict has registration_id, user_id, name, email, mobile_number.
    """
    result = await conn.execute(
        select(
            registrations.c.registration_id,
            users.c.user_id,
            users.c.name,
            users.c.email,
            users.c.mobile_number,
        )
        .select_from(registrations.join(users, registrations.c.user_id == users.c.user_id))
        .where(registrations.c.event_id == event_id)
        .order_by(registrations.c.registration_id)
    )
    return [dict(row) for row in result.mappings()]


async def get_event_trainers(
    conn: AsyncConnection,
    event_id: int,
) -> list[dict[str, Any]]:
    """Get trainers linked to an event, in the order they were added."""
    result = await conn.execute(
        select(
            trainers.c.trainer_id,
            trainers.c.name,
            trainers.c.email,
            trainers.c.mobile_number,
        )
        .select_from(
            event_trainers.join(
                trainers, event_trainers.c.trainer_id == trainers.c.trainer_id
            )
        )
        .where(event_trainers.c.event_id == event_id)
        .order_by(event_trainers.c.event_trainer_id)
    )
    return [dict(row) for row in result.mappings()]


async def get_trainers_by_ids(
    conn: AsyncConnection,
    trainer_ids: list[int],
) -> list[dict[str, Any]]:
    """Get trainer rows for the given IDs (unknown IDs are ignored)."""
    if not trainer_ids:
        return []
    result = await conn.execute(
        select(trainers)
        .where(trainers.c.trainer_id.in_(trainer_ids))
        .order_by(trainers.c.trainer_id)
    )
    return [dict(row) for row in result.mappings()]


async def get_event_with_relations(
    conn: AsyncConnection,
    event_id: int,
) -> dict[str, Any] | None:
    """
    Load an event together with its registrants, trainers and pools.

    Returns the event dict with "registrants", "trainers" and "pools" keys,
    or None if the event does not exist.
    """
    from .pools import get_pools_for_event

    event = await get_event(conn, event_id)
    if not event:
        return None

    event["registrants"] = await get_event_registrants(conn, event_id)
    event["trainers"] = await get_event_trainers(conn, event_id)
    event["pools"] = await get_pools_for_event(conn, event_id)
    return event


async def get_events_between(
    conn: AsyncConnection,
    start: datetime,
    end: datetime,
    pools_assigned: bool,
    reminder2_sent: bool | None = None,
) -> list[dict[str, Any]]:
    """
    Get events whose event_date falls in [start, end].

    Args:
        start: Inclusive lower bound (timezone-aware)
        end: Inclusive upper bound (timezone-aware)
        pools_assigned: Required value of the pools_assigned flag
        reminder2_sent: Required value of the reminder flag, or None for any
    """
    query = (
        select(events)
        .where(events.c.event_date >= start)
        .where(events.c.event_date <= end)
        .where(events.c.pools_assigned == pools_assigned)
        .order_by(events.c.event_date, events.c.event_id)
    )
    if reminder2_sent is not None:
        query = query.where(events.c.reminder2_sent == reminder2_sent)

    result = await conn.execute(query)
    return [dict(row) for row in result.mappings()]


async def claim_pool_assignment(conn: AsyncConnection, event_id: int) -> bool:
    """
    Flip pools_assigned from false to true.

    Returns:
        True if this call made the transition, False if the event was
        already assigned (or does not exist).
    """
    result = await conn.execute(
        update(events)
        .where(events.c.event_id == event_id)
        .where(events.c.pools_assigned.is_(False))
        .values(pools_assigned=True, updated_at=func.now())
        .returning(events.c.event_id)
    )
    return result.first() is not None


async def mark_reminder_sent(conn: AsyncConnection, event_id: int) -> None:
    """Record that today's reminder pass has handled this event."""
    await conn.execute(
        update(events)
        .where(events.c.event_id == event_id)
        .values(reminder2_sent=True, updated_at=func.now())
    )


async def link_trainers(
    conn: AsyncConnection,
    event_id: int,
    trainer_ids: list[int],
) -> list[int]:
    """
    Link trainers to an event, skipping ones already linked.

    Returns:
        IDs of the trainers that were newly linked, in input order
    """
    result = await conn.execute(
        select(event_trainers.c.trainer_id).where(event_trainers.c.event_id == event_id)
    )
    existing = {row.trainer_id for row in result}

    new_ids = []
    for trainer_id in trainer_ids:
        if trainer_id not in existing and trainer_id not in new_ids:
            new_ids.append(trainer_id)

    if new_ids:
        await conn.execute(
            insert(event_trainers),
            [{"event_id": event_id, "trainer_id": tid} for tid in new_ids],
        )
    return new_ids


async def count_event_dependents(conn: AsyncConnection, event_id: int) -> dict[str, int]:
    """Count registrations and pools referencing an event."""
    registration_count = await conn.scalar(
        select(func.count())
        .select_from(registrations)
        .where(registrations.c.event_id == event_id)
    )
    pool_count = await conn.scalar(
        select(func.count()).select_from(pools).where(pools.c.event_id == event_id)
    )
    return {"registrations": registration_count or 0, "pools": pool_count or 0}


async def delete_event_row(conn: AsyncConnection, event_id: int) -> bool:
    """
    Delete an event and its trainer links.

    Callers must check count_event_dependents first; registrations and
    pools block the delete at the foreign key level anyway.

    Returns:
        True if the event existed
    """
    await conn.execute(delete(event_trainers).where(event_trainers.c.event_id == event_id))
    result = await conn.execute(
        delete(events).where(events.c.event_id == event_id).returning(events.c.event_id)
    )
    return result.first() is not None
