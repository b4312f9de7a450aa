"""Tests for the SQLite client, the persistence adapter and the background mirror."""

import pytest

from ascetic_planner.core import db_client
from ascetic_planner.domain.focus_period import FocusPeriodState
from ascetic_planner.domain.task import SectionId, Subtask
from ascetic_planner.services.persistence_service import LocalMirror, SqlitePersistence, load_local_state
from ascetic_planner.services.task_store import TaskStore
from tests.unit.mocks import T0, InMemoryPersistence


@pytest.fixture
async def db_path(tmp_path):
    """Initialized database file, closed after the test."""
    path = str(tmp_path / "planner.db")
    await db_client.init_db(db_path=path)
    yield path
    await db_client.close_connection(db_path=path)


@pytest.mark.unit
class TestDbClient:
    """Tests for the raw table access."""

    @pytest.mark.asyncio
    async def test_replace_all_keeps_order(self, db_path):
        await db_client.replace_all_tasks([{"id": "b"}, {"id": "a"}, {"id": "c"}], db_path=db_path)

        payloads = await db_client.load_tasks(db_path=db_path)

        assert [p["id"] for p in payloads] == ["b", "a", "c"]

    @pytest.mark.asyncio
    async def test_replace_all_is_destructive(self, db_path):
        await db_client.replace_all_tasks([{"id": "old"}], db_path=db_path)
        await db_client.replace_all_tasks([{"id": "new"}], db_path=db_path)

        assert await db_client.load_tasks(db_path=db_path) == [{"id": "new"}]

    @pytest.mark.asyncio
    async def test_app_state_upsert_and_delete(self, db_path):
        await db_client.set_app_state({"app_title": "One", "focusStartTime": "123"}, db_path=db_path)
        await db_client.set_app_state({"app_title": "Two", "focusStartTime": None}, db_path=db_path)

        assert await db_client.get_app_state(db_path=db_path) == {"app_title": "Two"}

    @pytest.mark.asyncio
    async def test_connection_is_cached(self, db_path):
        first = await db_client.get_connection(db_path=db_path)
        second = await db_client.get_connection(db_path=db_path)

        assert first is second


@pytest.mark.unit
class TestSqlitePersistence:
    """Tests for the PersistencePort adapter over SQLite."""

    @pytest.mark.asyncio
    async def test_tasks_round_trip(self, db_path, make_task):
        persistence = SqlitePersistence(db_path=db_path)
        tasks = [
            make_task("a", is_focus=True, last_title_edit_at=T0 + 5, due_date=T0 + 100),
            make_task("b", section=SectionId.DONE, subtasks=[Subtask(id="s", title="Sub", is_completed=True)]),
        ]

        await persistence.replace_all(tasks)

        assert await persistence.load() == tasks

    @pytest.mark.asyncio
    async def test_load_migrates_legacy_edit_stamp(self, db_path):
        """Test records without a real title edit come back with the timer off."""
        legacy = {"id": "old", "title": "Legacy", "section": "today", "createdAt": T0, "updatedAt": T0}
        stamped = {**legacy, "id": "stamped", "lastTitleEditAt": T0}
        await db_client.replace_all_tasks([legacy, stamped], db_path=db_path)

        tasks = await SqlitePersistence(db_path=db_path).load()

        assert [t.last_title_edit_at for t in tasks] == [0, 0]

    @pytest.mark.asyncio
    async def test_load_skips_unreadable_rows(self, db_path, make_task):
        await db_client.replace_all_tasks(
            [make_task("good").to_wire(), {"id": "bad", "section": "someday"}],
            db_path=db_path,
        )

        tasks = await SqlitePersistence(db_path=db_path).load()

        assert [t.id for t in tasks] == ["good"]

    @pytest.mark.asyncio
    async def test_app_state_round_trip(self, db_path):
        persistence = SqlitePersistence(db_path=db_path)

        assert await persistence.load_app_state() == (None, None)

        await persistence.save_app_state(app_title="Focus", focus_start_ms=T0)
        assert await persistence.load_app_state() == ("Focus", T0)

        await persistence.save_app_state(app_title="", focus_start_ms=None)
        assert await persistence.load_app_state() == ("", None)


@pytest.mark.unit
class TestLocalMirror:
    """Tests for the fire-and-forget write-back."""

    @pytest.mark.asyncio
    async def test_scheduled_writes_land_in_order(self, make_task):
        persistence = InMemoryPersistence()
        mirror = LocalMirror(persistence)

        mirror.schedule_tasks([make_task("a")])
        mirror.schedule_tasks([make_task("a"), make_task("b")])
        mirror.schedule_app_state(FocusPeriodState(title="Goal", start_ms=T0))
        await mirror.flush()

        assert [t.id for t in persistence.tasks] == ["a", "b"]
        assert (persistence.app_title, persistence.focus_start_ms) == ("Goal", T0)

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, make_task):
        persistence = InMemoryPersistence()
        persistence.fail = True
        mirror = LocalMirror(persistence)

        mirror.schedule_tasks([make_task("a")])
        await mirror.flush()

        assert persistence.tasks == []

    def test_without_event_loop_nothing_is_written(self, make_task):
        persistence = InMemoryPersistence()
        mirror = LocalMirror(persistence)

        mirror.schedule_tasks([make_task("a")])

        assert persistence.writes == 0

    @pytest.mark.asyncio
    async def test_store_mutations_are_mirrored(self, clock):
        """Test wiring the store's change listener to the mirror persists each mutation."""
        persistence = InMemoryPersistence()
        mirror = LocalMirror(persistence)
        store = TaskStore(clock=clock, lock_ms=60_000, on_change=mirror.schedule_tasks)

        task = store.add(SectionId.TODAY, "Persist me")
        store.move(task.id, SectionId.DONE)
        await mirror.flush()

        assert [(t.id, t.section) for t in persistence.tasks] == [(task.id, SectionId.DONE)]


@pytest.mark.unit
class TestLoadLocalState:
    @pytest.mark.asyncio
    async def test_defaults_when_nothing_stored(self):
        tasks, state = await load_local_state(InMemoryPersistence(), default_title="Дисциплина.")

        assert tasks == []
        assert state == FocusPeriodState(title="Дисциплина.", start_ms=None)

    @pytest.mark.asyncio
    async def test_stored_empty_title_is_kept(self):
        persistence = InMemoryPersistence()
        persistence.app_title = ""

        _, state = await load_local_state(persistence, default_title="Дисциплина.")

        assert state.title == ""

    @pytest.mark.asyncio
    async def test_read_failure_starts_empty(self):
        persistence = InMemoryPersistence()
        persistence.fail = True

        tasks, state = await load_local_state(persistence, default_title="Default")

        assert tasks == []
        assert state.title == "Default"
