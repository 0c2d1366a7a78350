"""Pool and pool membership queries."""

from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import pool_attendees, pools


async def get_pools_for_event(
    conn: AsyncConnection,
    event_id: int,
) -> list[dict[str, Any]]:
    """Get all pools of an event, oldest first."""
    result = await conn.execute(
        select(pools).where(pools.c.event_id == event_id).order_by(pools.c.pool_id)
    )
    return [dict(row) for row in result.mappings()]


async def create_pool(
    conn: AsyncConnection,
    event_id: int,
    pool_name: str,
    capacity: int,
    meet_link: str | None,
    trainer_id: int | None,
) -> dict[str, Any]:
    """Create a pool and return the created record."""
    result = await conn.execute(
        insert(pools)
        .values(
            event_id=event_id,
            pool_name=pool_name,
            capacity=capacity,
            meet_link=meet_link,
            trainer_id=trainer_id,
            is_active=True,
        )
        .returning(pools)
    )
    return dict(result.mappings().first())


async def create_pool_attendees(
    conn: AsyncConnection,
    pool_id: int,
    attendees: list[dict[str, Any]],
) -> int:
    """
    Bulk-insert pool members.

    Args:
        pool_id: Pool to add members to
        attendees: Dicts with user_id and meet_link (individual URL or None)

    Returns:
        Number of rows inserted
    """
    if not attendees:
        return 0
    await conn.execute(
        insert(pool_attendees),
        [
            {
                "pool_id": pool_id,
                "user_id": a["user_id"],
                "meet_link": a.get("meet_link"),
                "notified": False,
            }
            for a in attendees
        ],
    )
    return len(attendees)


async def get_attendee_links_for_event(
    conn: AsyncConnection,
    event_id: int,
) -> dict[int, str]:
    """Map user_id -> individual meeting link for an event's pool members."""
    result = await conn.execute(
        select(pool_attendees.c.user_id, pool_attendees.c.meet_link)
        .select_from(pool_attendees.join(pools, pool_attendees.c.pool_id == pools.c.pool_id))
        .where(pools.c.event_id == event_id)
        .where(pool_attendees.c.meet_link.isnot(None))
    )
    return {row.user_id: row.meet_link for row in result}


async def set_pool_trainer(conn: AsyncConnection, pool_id: int, trainer_id: int) -> None:
    """Backfill the trainer of a pool that has none."""
    await conn.execute(
        update(pools)
        .where(pools.c.pool_id == pool_id)
        .where(pools.c.trainer_id.is_(None))
        .values(trainer_id=trainer_id)
    )
