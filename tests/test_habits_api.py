# tests/test_habits_api.py
# PURPOSE: habit entries (upsert/delete), per-habit stats and the overview.

from datetime import date, timedelta

from taskflow.db_models import HabitHistoryDB, today_utc


def _create_habit(client, title: str = "Read") -> int:
    r = client.post("/api/tasks", json={"title": title, "isHabit": True})
    assert r.status_code == 201
    return r.json()["data"]["id"]


def _day(offset: int) -> str:
    return (today_utc() - timedelta(days=offset)).isoformat()


def _mark(client, habit_id: int, day: str, completed: bool = True):
    r = client.post(f"/api/habits/{habit_id}/complete", json={"date": day, "completed": completed})
    assert r.status_code == 200, r.json()
    return r.json()


def test_set_true_then_false_leaves_single_row(client, db):
    hid = _create_habit(client)

    first = _mark(client, hid, "2024-03-01", True)
    assert first["data"]["completed"] is True
    assert first["message"] == "Habit completed for 2024-03-01"

    second = _mark(client, hid, "2024-03-01", False)
    assert second["data"]["completed"] is False
    assert second["message"] == "Habit uncompleted for 2024-03-01"
    assert second["data"]["id"] == first["data"]["id"]

    rows = (
        db.query(HabitHistoryDB)
        .filter(HabitHistoryDB.task_id == hid, HabitHistoryDB.date == date(2024, 3, 1))
        .all()
    )
    assert len(rows) == 1
    assert rows[0].completed is False


def test_complete_defaults_to_true(client):
    hid = _create_habit(client)
    r = client.post(f"/api/habits/{hid}/complete", json={"date": "2024-03-02"})
    assert r.json()["data"]["completed"] is True


def test_complete_rejects_bad_dates(client):
    hid = _create_habit(client)
    for bad in ("2024-1-1", "01/02/2024", "2024-02-30", ""):
        r = client.post(f"/api/habits/{hid}/complete", json={"date": bad})
        assert r.status_code == 400
        assert r.json()["error"] == "Valid date (YYYY-MM-DD) is required"
    r = client.post(f"/api/habits/{hid}/complete", json={})
    assert r.status_code == 400


def test_complete_requires_a_habit(client):
    r = client.post("/api/tasks", json={"title": "Not a habit"})
    tid = r.json()["data"]["id"]

    r = client.post(f"/api/habits/{tid}/complete", json={"date": "2024-01-01"})
    assert r.status_code == 404
    assert r.json()["error"] == "Habit not found"

    assert client.post("/api/habits/999/complete", json={"date": "2024-01-01"}).status_code == 404


def test_get_habit_view(client):
    hid = _create_habit(client)
    r = client.get(f"/api/habits/{hid}")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["id"] == hid
    assert "time_blocks" not in data
    assert len(data["habit_history"]) == 1

    plain = client.post("/api/tasks", json={"title": "Plain"}).json()["data"]
    assert client.get(f"/api/habits/{plain['id']}").status_code == 404


def test_delete_history_entry(client):
    hid = _create_habit(client)
    _mark(client, hid, "2024-05-05")

    r = client.delete(f"/api/habits/{hid}/history/2024-05-05")
    assert r.status_code == 200
    assert r.json()["data"]["date"] == "2024-05-05"

    r2 = client.delete(f"/api/habits/{hid}/history/2024-05-05")
    assert r2.status_code == 404
    assert r2.json()["error"] == "Habit history entry not found"

    assert client.delete(f"/api/habits/999/history/2024-05-05").json()["error"] == "Habit not found"
    assert client.delete(f"/api/habits/{hid}/history/not-a-date").status_code == 400


def test_delete_history_checks_habit_before_date(client):
    r = client.delete("/api/habits/999/history/not-a-date")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Habit not found"}


def test_habit_stats_streaks(client):
    hid = _create_habit(client)
    _mark(client, hid, _day(3), True)
    _mark(client, hid, _day(2), True)
    _mark(client, hid, _day(1), False)
    _mark(client, hid, _day(0), True)  # overwrites today's seeded entry

    r = client.get(f"/api/habits/{hid}/stats")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["habitId"] == hid
    assert data["period"] == "30 days"
    assert data["totalDays"] == 4
    assert data["completedDays"] == 3
    assert data["completionRate"] == "75%"
    assert data["currentStreak"] == 1
    assert data["longestStreak"] == 2
    assert [h["date"] for h in data["history"]] == [_day(3), _day(2), _day(1), _day(0)]
    assert [h["completion_value"] for h in data["history"]] == [1, 1, 0, 1]


def test_skipped_day_ends_current_streak(client):
    hid = _create_habit(client)
    _mark(client, hid, _day(3), True)
    _mark(client, hid, _day(0), True)

    data = client.get(f"/api/habits/{hid}/stats").json()["data"]
    assert data["currentStreak"] == 1
    assert data["longestStreak"] == 2


def test_habit_stats_window(client):
    hid = _create_habit(client)
    _mark(client, hid, _day(40), True)
    _mark(client, hid, _day(5), True)

    default = client.get(f"/api/habits/{hid}/stats").json()["data"]
    # today's seeded (incomplete) entry + day 5; day 40 is outside 30 days
    assert default["totalDays"] == 2
    assert default["currentStreak"] == 0

    wide = client.get(f"/api/habits/{hid}/stats?days=60").json()["data"]
    assert wide["period"] == "60 days"
    assert wide["totalDays"] == 3

    assert client.get(f"/api/habits/{hid}/stats?days=abc").status_code == 400
    assert client.get(f"/api/habits/{hid}/stats?days=0").status_code == 400


def test_habit_stats_without_entries(client):
    hid = _create_habit(client)
    client.delete(f"/api/habits/{hid}/history/{_day(0)}")

    data = client.get(f"/api/habits/{hid}/stats").json()["data"]
    assert data["totalDays"] == 0
    assert data["completionRate"] == "0%"
    assert data["currentStreak"] == 0
    assert data["longestStreak"] == 0
    assert data["history"] == []


def test_habit_stats_missing_habit(client):
    assert client.get("/api/habits/424242/stats").status_code == 404


def test_overview_counts_zero_entry_habits_as_zero(client):
    active = _create_habit(client, "Active")
    _mark(client, active, _day(1), True)  # today's seed stays incomplete -> 50%

    idle = _create_habit(client, "Idle")
    client.delete(f"/api/habits/{idle}/history/{_day(0)}")
    _mark(client, idle, _day(30), True)  # outside the 7 day window

    r = client.get("/api/habits/stats/overview")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["period"] == "7 days"
    assert data["totalHabits"] == 2
    assert data["activeHabits"] == 1
    # (50 + 0) / 2, not 50 / 1
    assert data["averageCompletionRate"] == "25%"

    habits = data["habits"]
    assert [h["title"] for h in habits] == ["Active", "Idle"]
    assert habits[0]["total_entries"] == 2
    assert habits[0]["completed_entries"] == 1
    assert habits[0]["completion_rate"] == 50.0
    assert habits[1]["total_entries"] == 0
    assert habits[1]["completion_rate"] is None

    wide = client.get("/api/habits/stats/overview?days=60").json()["data"]
    assert wide["activeHabits"] == 2


def test_overview_without_habits(client):
    data = client.get("/api/habits/stats/overview").json()["data"]
    assert data["totalHabits"] == 0
    assert data["averageCompletionRate"] == "0%"
    assert data["habits"] == []
