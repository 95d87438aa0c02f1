"""
Tests for the workout log, exercise library, exercise catalog, workout plans and sessions.
"""

import pytest

from adapters import exercise_api_adapter

from test_fixtures import api, make_catalog_exercise, make_plan_payload, register_user


def make_session_payload(start="2024-03-15T18:00:00", end="2024-03-15T19:05:00", **overrides):
    payload = {
        "workout_plan_name": "Push day",
        "exercises": make_plan_payload()["exercises"],
        "start_time": start,
        "end_time": end,
        "duration_seconds": 3900,
        "total_sets": 2,
        "completed_sets": 2,
        "calories_burned": 310,
    }
    payload.update(overrides)
    return payload


# =============================================================================
# DAILY WORKOUT LOG
# =============================================================================


def test_log_workout_sums_calories(client, auth_headers):
    r = client.post(
        api("/workouts"),
        json={
            "date": "2024-03-15",
            "exercises": [
                {"name": "Running", "duration_minutes": 30, "calories_burned": 300},
                {"name": "Squats", "sets": 4, "reps": 10, "weight": 60, "calories_burned": 90},
            ],
        },
        headers=auth_headers,
    )
    assert r.status_code == 201
    assert r.json()["total_calories"] == 390

    workouts = client.get(api("/workouts?date=2024-03-15"), headers=auth_headers).json()["workouts"]
    assert len(workouts) == 1
    assert workouts[0]["exercises"][1]["name"] == "Squats"
    assert client.get(api("/workouts?date=2024-03-16"), headers=auth_headers).json()["workouts"] == []


def test_log_workout_requires_exercises(client, auth_headers):
    r = client.post(api("/workouts"), json={"exercises": []}, headers=auth_headers)
    assert r.status_code == 400


def test_list_workouts_requires_date(client, auth_headers):
    r = client.get(api("/workouts"), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Date is required"


def test_delete_workout(client, auth_headers):
    workout = client.post(
        api("/workouts"), json={"exercises": [{"name": "Rowing", "calories_burned": 150}]}, headers=auth_headers
    ).json()

    assert client.delete(api(f"/workouts/{workout['id']}"), headers=auth_headers).status_code == 200
    r = client.delete(api(f"/workouts/{workout['id']}"), headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Workout not found"


# =============================================================================
# EXERCISE LIBRARY AND CATALOG
# =============================================================================


def test_exercise_library(client, auth_headers):
    for name, category in (("Push-up", "strength"), ("Cycling", "cardio"), ("  Deadlift ", "strength")):
        r = client.post(api("/exercises"), json={"name": name, "category": category}, headers=auth_headers)
        assert r.status_code == 201

    exercises = client.get(api("/exercises"), headers=auth_headers).json()["exercises"]
    assert [e["name"] for e in exercises] == ["Cycling", "Deadlift", "Push-up"]
    assert exercises[0]["sets"] == 3 and exercises[0]["reps"] == 10

    strength = client.get(api("/exercises?category=strength"), headers=auth_headers).json()["exercises"]
    assert [e["name"] for e in strength] == ["Deadlift", "Push-up"]


def test_exercise_rejects_unknown_muscle_group(client, auth_headers):
    r = client.post(api("/exercises"), json={"name": "Curl", "muscle_groups": ["forearms"]}, headers=auth_headers)
    assert r.status_code == 400


def test_update_and_delete_exercise(client, auth_headers):
    exercise = client.post(
        api("/exercises"), json={"name": "Bench press", "muscle_groups": ["chest", "arms"]}, headers=auth_headers
    ).json()

    r = client.put(api(f"/exercises/{exercise['id']}"), json={"weight": 62.5, "difficulty": "intermediate"}, headers=auth_headers)
    assert r.json()["weight"] == 62.5
    assert r.json()["difficulty"] == "intermediate"
    assert r.json()["muscle_groups"] == ["chest", "arms"]

    other_headers, _ = register_user(client, "michael")
    assert client.get(api(f"/exercises/{exercise['id']}"), headers=other_headers).status_code == 404

    client.delete(api(f"/exercises/{exercise['id']}"), headers=auth_headers)
    r = client.get(api(f"/exercises/{exercise['id']}"), headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Exercise not found"


def test_exercise_catalog(client, auth_headers, monkeypatch):
    calls = []

    def fake_catalog(muscle, limit=10, offset=0):
        calls.append((muscle, limit))
        return [make_catalog_exercise("Hammer Curl", muscle)]

    monkeypatch.setattr(exercise_api_adapter, "exercises_by_muscle", fake_catalog)

    r = client.get(api("/exercise-catalog?muscle=%20Biceps%20&limit=500"), headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["exercises"][0]["name"] == "Hammer Curl"
    assert calls == [("biceps", 50)]


def test_exercise_catalog_requires_muscle(client, auth_headers):
    assert client.get(api("/exercise-catalog"), headers=auth_headers).status_code == 400
    r = client.get(api("/exercise-catalog?muscle=%20"), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Muscle is required"


# =============================================================================
# WORKOUT PLANS
# =============================================================================


def test_create_workout_plan(client, auth_headers):
    r = client.post(api("/workout-plans"), json=make_plan_payload(exercises=3), headers=auth_headers)
    assert r.status_code == 201
    plan = r.json()
    assert plan["total_exercises"] == 3
    assert plan["saved_at"] == plan["last_modified"]
    assert plan["exercises"][0]["sets"][0] == {
        "set_number": 1, "weight": 40.0, "reps": 8, "rest_seconds": 90, "is_completed": False,
    }


def test_workout_plan_needs_exercises(client, auth_headers):
    payload = make_plan_payload()
    payload["exercises"] = []
    assert client.post(api("/workout-plans"), json=payload, headers=auth_headers).status_code == 400


def test_workout_plans_pagination_and_sort(client, auth_headers):
    for name, count in (("Push day", 2), ("Leg day", 3), ("Back day", 1)):
        client.post(api("/workout-plans"), json=make_plan_payload(name, count), headers=auth_headers)

    body = client.get(api("/workout-plans?limit=2&sort_by=name&order=asc"), headers=auth_headers).json()
    assert body["success"] is True
    assert [p["name"] for p in body["data"]] == ["Back day", "Leg day"]
    assert body["pagination"] == {"total": 3, "page": 1, "limit": 2, "total_pages": 2}

    page_two = client.get(api("/workout-plans?limit=2&page=2&sort_by=name&order=asc"), headers=auth_headers).json()
    assert [p["name"] for p in page_two["data"]] == ["Push day"]

    by_size = client.get(api("/workout-plans?sort_by=total_exercises"), headers=auth_headers).json()
    assert [p["total_exercises"] for p in by_size["data"]] == [3, 2, 1]


def test_workout_plans_unknown_sort_field_and_limits(client, auth_headers):
    client.post(api("/workout-plans"), json=make_plan_payload(), headers=auth_headers)
    body = client.get(api("/workout-plans?sort_by=password&limit=0&page=-3"), headers=auth_headers).json()
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 1
    assert len(body["data"]) == 1


def test_update_workout_plan_recounts_exercises(client, auth_headers):
    plan = client.post(api("/workout-plans"), json=make_plan_payload(exercises=1), headers=auth_headers).json()

    exercises = make_plan_payload(exercises=4)["exercises"]
    r = client.put(
        api(f"/workout-plans/{plan['id']}"), json={"exercises": exercises, "notes": "Deload week"}, headers=auth_headers
    )
    assert r.status_code == 200
    updated = r.json()
    assert updated["total_exercises"] == 4
    assert updated["notes"] == "Deload week"
    assert updated["name"] == "Push day"


def test_workout_plan_not_found(client, auth_headers):
    plan = client.post(api("/workout-plans"), json=make_plan_payload(), headers=auth_headers).json()
    client.delete(api(f"/workout-plans/{plan['id']}"), headers=auth_headers)

    for method in ("get", "put", "delete"):
        kwargs = {"json": {"name": "Renamed"}} if method == "put" else {}
        r = getattr(client, method)(api(f"/workout-plans/{plan['id']}"), headers=auth_headers, **kwargs)
        assert r.status_code == 404
        assert r.json()["error"]["message"] == "Workout plan not found"


# =============================================================================
# WORKOUT SESSIONS
# =============================================================================


def test_store_workout_session(client, auth_headers):
    r = client.post(api("/workout-sessions"), json=make_session_payload(), headers=auth_headers)
    assert r.status_code == 201
    session = r.json()
    assert session["status"] == "completed"
    assert session["calories_burned"] == 310
    assert session["completed_sets"] == 2


@pytest.mark.parametrize("field", ["workout_plan_name", "exercises", "start_time", "total_sets"])
def test_workout_session_missing_field(client, auth_headers, field):
    payload = make_session_payload()
    del payload[field]
    r = client.post(api("/workout-sessions"), json=payload, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == f"Missing field: {field}"


def test_workout_session_blank_name(client, auth_headers):
    r = client.post(api("/workout-sessions"), json=make_session_payload(workout_plan_name="  "), headers=auth_headers)
    assert r.json()["error"]["message"] == "Missing field: workout_plan_name"


def test_workout_session_end_before_start(client, auth_headers):
    r = client.post(
        api("/workout-sessions"),
        json=make_session_payload(start="2024-03-15T18:00:00", end="2024-03-15T17:00:00"),
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "End time must be after start time"


def test_workout_sessions_newest_first(client, auth_headers):
    for day in ("13", "15", "14"):
        client.post(
            api("/workout-sessions"),
            json=make_session_payload(start=f"2024-03-{day}T18:00:00", end=f"2024-03-{day}T19:00:00"),
            headers=auth_headers,
        )

    body = client.get(api("/workout-sessions?limit=2"), headers=auth_headers).json()
    assert [s["start_time"][:10] for s in body["data"]] == ["2024-03-15", "2024-03-14"]
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["total_pages"] == 2


def test_update_workout_session(client, auth_headers):
    session = client.post(api("/workout-sessions"), json=make_session_payload(), headers=auth_headers).json()

    r = client.put(api(f"/workout-sessions/{session['id']}"), json={"notes": "Felt strong", "body_weight": 67.5}, headers=auth_headers)
    assert r.json()["notes"] == "Felt strong"
    assert r.json()["body_weight"] == 67.5

    r = client.put(
        api(f"/workout-sessions/{session['id']}"), json={"end_time": "2024-03-15T17:00:00"}, headers=auth_headers
    )
    assert r.status_code == 400


def test_delete_workout_session(client, auth_headers):
    session = client.post(api("/workout-sessions"), json=make_session_payload(), headers=auth_headers).json()
    assert client.delete(api(f"/workout-sessions/{session['id']}"), headers=auth_headers).status_code == 200
    r = client.get(api(f"/workout-sessions/{session['id']}"), headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Workout session not found"
