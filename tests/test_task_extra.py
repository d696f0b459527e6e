# tests/test_task_extra.py
# PURPOSE: list filters (status, category, search), their combination, ordering and count.

from typing import Dict


def _create_task(client, title: str, **fields) -> Dict:
    """Helper: create a task and return the task view."""
    r = client.post("/api/tasks", json={"title": title, **fields})
    assert r.status_code == 201
    return r.json()["data"]


def _titles(client, query: str = "") -> list:
    r = client.get(f"/api/tasks{query}")
    assert r.status_code == 200
    return [t["title"] for t in r.json()["data"]]


def test_search_title_or_description_case_insensitive(client):
    _create_task(client, "Hello world", description="greeting")
    _create_task(client, "Buy milk", description="shopping")
    _create_task(client, "Call mom", description="say HELLO")

    titles = _titles(client, "?search=hello")
    assert sorted(titles) == ["Call mom", "Hello world"]


def test_status_filters(client):
    done = _create_task(client, "Done one")
    client.patch(f"/api/tasks/{done['id']}/toggle")
    _create_task(client, "Open one")
    _create_task(client, "Habit one", isHabit=True)
    _create_task(
        client, "Blocked one", timeBlock={"start": "09:00", "end": "10:00", "date": "2024-01-01"}
    )

    assert sorted(_titles(client, "?filter=completed")) == ["Done one"]
    assert sorted(_titles(client, "?filter=active")) == ["Blocked one", "Habit one", "Open one"]
    assert _titles(client, "?filter=habits") == ["Habit one"]
    assert _titles(client, "?filter=timeBlocked") == ["Blocked one"]
    assert len(_titles(client, "?filter=all")) == 4
    assert len(_titles(client, "?filter=")) == 4


def test_invalid_filter_is_rejected(client):
    r = client.get("/api/tasks?filter=someday")
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Invalid filter"


def test_category_filter(client):
    client.post("/api/categories", json={"name": "work"})
    client.post("/api/categories", json={"name": "personal"})
    _create_task(client, "Deploy", category="work")
    _create_task(client, "Groceries", category="personal")
    _create_task(client, "Loose end")

    assert _titles(client, "?category=work") == ["Deploy"]
    # "all" means no category restriction
    assert len(_titles(client, "?category=all")) == 3
    assert _titles(client, "?category=missing") == []


def test_filters_combine_with_and(client):
    client.post("/api/categories", json={"name": "work"})
    _create_task(client, "Report draft", category="work")
    finished = _create_task(client, "Report final", category="work")
    client.patch(f"/api/tasks/{finished['id']}/toggle")
    _create_task(client, "Report personal")

    assert _titles(client, "?filter=active&category=work&search=report") == ["Report draft"]


def test_newest_first_and_count(client):
    for title in ("first", "second", "third"):
        _create_task(client, title)

    r = client.get("/api/tasks")
    body = r.json()
    assert [t["title"] for t in body["data"]] == ["third", "second", "first"]
    assert body["count"] == len(body["data"]) == 3


def test_join_fan_out_does_not_duplicate_children(client, db):
    from taskflow.db_models import HabitHistoryDB, TimeBlockDB
    from datetime import date

    task = _create_task(
        client,
        "Busy habit",
        isHabit=True,
        timeBlock={"start": "06:00", "end": "06:30", "date": "2024-01-01"},
    )
    tid = task["id"]
    db.add(TimeBlockDB(task_id=tid, start_time="18:00", end_time="18:30", date=date(2024, 1, 1)))
    db.add(HabitHistoryDB(task_id=tid, date=date(2024, 1, 1), completed=True))
    db.add(HabitHistoryDB(task_id=tid, date=date(2024, 1, 2), completed=False))
    db.commit()

    got = client.get("/api/tasks").json()["data"][0]
    assert len(got["time_blocks"]) == 2
    assert len(got["habit_history"]) == 3
    dates = [h["date"] for h in got["habit_history"]]
    assert dates == sorted(dates)
