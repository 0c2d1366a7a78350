"""Tests for event and pool queries against a real database (rolled back)."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError

from core.queries.events import (
    claim_pool_assignment,
    count_event_dependents,
    delete_event_row,
    get_event,
    get_event_with_relations,
    get_events_between,
    link_trainers,
    mark_reminder_sent,
)
from core.queries.pools import (
    create_pool,
    create_pool_attendees,
    get_attendee_links_for_event,
    set_pool_trainer,
)
from core.tables import events, registrations, trainers, users

EVENT_DATE = datetime(2026, 3, 4, 18, 30, tzinfo=timezone.utc)


async def create_event(conn, **overrides) -> int:
    values = {
        "title": "Sunrise Yoga",
        "event_date": EVENT_DATE,
        "event_time": "6:00 AM - 7:00 AM",
        "registration_deadline": EVENT_DATE - timedelta(days=1),
        **overrides,
    }
    result = await conn.execute(insert(events).values(**values).returning(events.c.event_id))
    return result.scalar()


async def create_user(conn, name: str, mobile: str, email: str | None = None) -> int:
    result = await conn.execute(
        insert(users)
        .values(name=name, mobile_number=mobile, email=email)
        .returning(users.c.user_id)
    )
    return result.scalar()


async def create_trainer(conn, name: str, mobile: str) -> int:
    result = await conn.execute(
        insert(trainers)
        .values(name=name, mobile_number=mobile, email=f"{name.lower()}@example.com")
        .returning(trainers.c.trainer_id)
    )
    return result.scalar()


async def register(conn, user_id: int, event_id: int) -> None:
    await conn.execute(insert(registrations).values(user_id=user_id, event_id=event_id))


class TestClaimPoolAssignment:
    @pytest.mark.asyncio
    async def test_first_claim_wins(self, db_conn):
        event_id = await create_event(db_conn)

        assert await claim_pool_assignment(db_conn, event_id) is True
        assert await claim_pool_assignment(db_conn, event_id) is False

        event = await get_event(db_conn, event_id)
        assert event["pools_assigned"] is True

    @pytest.mark.asyncio
    async def test_missing_event(self, db_conn):
        assert await claim_pool_assignment(db_conn, 999_999_999) is False


class TestPools:
    @pytest.mark.asyncio
    async def test_second_main_pool_violates_unique_constraint(self, db_conn):
        event_id = await create_event(db_conn)
        await create_pool(
            db_conn, event_id=event_id, pool_name="Main Pool", capacity=100,
            meet_link=None, trainer_id=None,
        )

        savepoint = await db_conn.begin_nested()
        with pytest.raises(IntegrityError):
            await create_pool(
                db_conn, event_id=event_id, pool_name="Main Pool", capacity=100,
                meet_link=None, trainer_id=None,
            )
        await savepoint.rollback()

    @pytest.mark.asyncio
    async def test_attendees_and_personal_links(self, db_conn):
        event_id = await create_event(db_conn)
        priya = await create_user(db_conn, "Priya", "9100000001", "priya@example.com")
        arjun = await create_user(db_conn, "Arjun", "9100000002")
        pool = await create_pool(
            db_conn, event_id=event_id, pool_name="Main Pool", capacity=100,
            meet_link="https://zoom.us/j/1", trainer_id=None,
        )

        count = await create_pool_attendees(
            db_conn,
            pool["pool_id"],
            [
                {"user_id": priya, "meet_link": "https://zoom.us/w/1?tk=p"},
                {"user_id": arjun, "meet_link": None},
            ],
        )

        assert count == 2
        assert await get_attendee_links_for_event(db_conn, event_id) == {
            priya: "https://zoom.us/w/1?tk=p"
        }

    @pytest.mark.asyncio
    async def test_empty_attendee_list(self, db_conn):
        assert await create_pool_attendees(db_conn, 1, []) == 0

    @pytest.mark.asyncio
    async def test_set_pool_trainer_only_fills_empty_slot(self, db_conn):
        event_id = await create_event(db_conn)
        first = await create_trainer(db_conn, "Ravi", "9100000011")
        second = await create_trainer(db_conn, "Anita", "9100000012")
        pool = await create_pool(
            db_conn, event_id=event_id, pool_name="Main Pool", capacity=100,
            meet_link=None, trainer_id=None,
        )

        await set_pool_trainer(db_conn, pool["pool_id"], first)
        await set_pool_trainer(db_conn, pool["pool_id"], second)

        loaded = await get_event_with_relations(db_conn, event_id)
        assert loaded["pools"][0]["trainer_id"] == first


class TestEventQueries:
    @pytest.mark.asyncio
    async def test_event_with_relations(self, db_conn):
        event_id = await create_event(db_conn)
        user_id = await create_user(db_conn, "Priya", "9100000021", "priya@example.com")
        trainer_id = await create_trainer(db_conn, "Ravi", "9100000022")
        await register(db_conn, user_id, event_id)
        await link_trainers(db_conn, event_id, [trainer_id])

        event = await get_event_with_relations(db_conn, event_id)

        assert [r["user_id"] for r in event["registrants"]] == [user_id]
        assert event["registrants"][0]["mobile_number"] == "9100000021"
        assert [t["trainer_id"] for t in event["trainers"]] == [trainer_id]
        assert event["pools"] == []

    @pytest.mark.asyncio
    async def test_link_trainers_skips_existing(self, db_conn):
        event_id = await create_event(db_conn)
        ravi = await create_trainer(db_conn, "Ravi", "9100000031")
        anita = await create_trainer(db_conn, "Anita", "9100000032")

        assert await link_trainers(db_conn, event_id, [ravi]) == [ravi]
        assert await link_trainers(db_conn, event_id, [ravi, anita, anita]) == [anita]

    @pytest.mark.asyncio
    async def test_events_between_filters_flags(self, db_conn):
        pending = await create_event(db_conn, title="Pending")
        reminded = await create_event(db_conn, title="Reminded", pools_assigned=True)
        await mark_reminder_sent(db_conn, reminded)
        assigned = await create_event(db_conn, title="Assigned", pools_assigned=True)
        await create_event(db_conn, title="Other day", event_date=EVENT_DATE + timedelta(days=2))

        start, end = EVENT_DATE, EVENT_DATE + timedelta(hours=23, minutes=59)

        unassigned = await get_events_between(db_conn, start, end, pools_assigned=False)
        due = await get_events_between(
            db_conn, start, end, pools_assigned=True, reminder2_sent=False
        )

        assert pending in [e["event_id"] for e in unassigned]
        due_ids = [e["event_id"] for e in due]
        assert assigned in due_ids
        assert reminded not in due_ids

    @pytest.mark.asyncio
    async def test_dependents_and_delete(self, db_conn):
        event_id = await create_event(db_conn)
        user_id = await create_user(db_conn, "Priya", "9100000041")

        assert await count_event_dependents(db_conn, event_id) == {
            "registrations": 0,
            "pools": 0,
        }

        await register(db_conn, user_id, event_id)
        assert (await count_event_dependents(db_conn, event_id))["registrations"] == 1

        empty_event = await create_event(db_conn)
        trainer_id = await create_trainer(db_conn, "Ravi", "9100000042")
        await link_trainers(db_conn, empty_event, [trainer_id])

        assert await delete_event_row(db_conn, empty_event) is True
        assert await get_event(db_conn, empty_event) is None
        assert await delete_event_row(db_conn, empty_event) is False
