# tests/test_store.py
# PURPOSE: service-level behaviour: all-or-nothing writes and the habit upsert.

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from taskflow import store_db
from taskflow.db_models import HabitHistoryDB, TaskDB
from taskflow.errors import NotFoundError, StoreError, ValidationError
from taskflow.models import TaskCreate, TaskUpdate


def test_create_rolls_back_when_time_block_insert_fails(db, monkeypatch):
    def broken_insert(*args, **kwargs):
        raise OperationalError("INSERT INTO time_blocks", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store_db, "_add_time_block", broken_insert)

    data = TaskCreate.model_validate(
        {"title": "Half written", "timeBlock": {"start": "09:00", "end": "10:00", "date": "2024-01-01"}}
    )
    with pytest.raises(StoreError) as info:
        store_db.create_task(db, data)

    assert info.value.error == "Failed to create task"
    assert db.query(TaskDB).count() == 0


def test_update_rolls_back_when_time_block_insert_fails(db, monkeypatch):
    view = store_db.create_task(db, TaskCreate(title="Stable"))

    def broken_insert(*args, **kwargs):
        raise OperationalError("INSERT INTO time_blocks", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store_db, "_add_time_block", broken_insert)
    with pytest.raises(StoreError):
        store_db.update_task(
            db,
            view.id,
            TaskUpdate.model_validate(
                {"title": "Changed", "timeBlock": {"start": "1", "end": "2", "date": "2024-01-01"}}
            ),
        )

    db.expire_all()
    assert db.query(TaskDB).one().title == "Stable"


def test_create_requires_title(db):
    with pytest.raises(ValidationError):
        store_db.create_task(db, TaskCreate(title=None))


def test_set_habit_entry_upserts(db):
    view = store_db.create_task(db, TaskCreate.model_validate({"title": "Run", "isHabit": True}))

    store_db.set_habit_entry(db, view.id, "2024-02-01", True)
    row = store_db.set_habit_entry(db, view.id, "2024-02-01", False)

    assert row.completed is False
    rows = (
        db.query(HabitHistoryDB)
        .filter(HabitHistoryDB.task_id == view.id, HabitHistoryDB.date == date(2024, 2, 1))
        .all()
    )
    assert len(rows) == 1


def test_set_habit_entry_on_missing_task(db):
    with pytest.raises(NotFoundError):
        store_db.set_habit_entry(db, 1, "2024-02-01", True)


def test_parse_habit_date():
    assert store_db.parse_habit_date("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValidationError):
        store_db.parse_habit_date("2023-02-29")
    with pytest.raises(ValidationError):
        store_db.parse_habit_date("2024-02-01\n")
