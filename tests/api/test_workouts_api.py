"""End-to-end tests for the workout routes through the FastAPI app."""

from pathlib import Path

from fastapi.testclient import TestClient

from sweatsync.config.settings import Settings
from sweatsync.db.store import Store
from sweatsync.main import create_app

MONDAY = "2024-01-01"
TUESDAY = "2024-01-02"

COMPLETION = {
    "date": MONDAY,
    "workout": {"name": "Push"},
    "exercises": [{"name": "Bench Press", "sets": [{"reps": 8, "weight": 135}], "notes": "felt good"}],
}


def test_routes_require_a_token(client: TestClient) -> None:
    for method, path in [
        ("get", "/api/workouts/plan"),
        ("get", "/api/workouts/today"),
        ("get", "/api/workouts/history"),
    ]:
        response = getattr(client, method)(path)
        assert response.status_code == 401, path
        assert response.json()["detail"] == "Access token required"


def test_garbage_token_is_rejected(client: TestClient) -> None:
    response = client.get("/api/workouts/plan", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


def test_fresh_account_gets_default_plan(client: TestClient, register) -> None:
    headers = register("newbie")

    response = client.get("/api/workouts/plan", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "default"
    assert body["plan_name"] == "Full Body Foundations"
    assert body["schedule"]["monday"]["name"] == "Push"


def test_upload_then_today(client: TestClient, register, scenario_plan: dict) -> None:
    headers = register("planner")

    upload = client.post(
        "/api/workouts/upload-plan",
        json={"name": scenario_plan["name"], "planData": {"schedule": scenario_plan["schedule"]}},
        headers=headers,
    )
    assert upload.status_code == 200, upload.text
    assert upload.json()["plan"]["name"] == "A"
    assert upload.json()["plan"]["active"] is True

    monday = client.get("/api/workouts/today", params={"date": MONDAY}, headers=headers).json()
    assert monday["status"] == "scheduled"
    assert monday["source"] == "user"
    assert monday["workout"]["name"] == "Push"
    assert monday["workout"]["exercises"][0]["name"] == "Bench"
    assert monday["workout"]["exercises"][0]["type"] == "reps"

    tuesday = client.get("/api/workouts/today", params={"date": TUESDAY}, headers=headers).json()
    assert tuesday["status"] == "rest_day"
    assert tuesday["workout"] is None
    assert tuesday["date"] == TUESDAY


def test_today_without_date_uses_current_day(client: TestClient, register) -> None:
    response = client.get("/api/workouts/today", headers=register("nowish"))

    assert response.status_code == 200
    assert response.json()["status"] in {"scheduled", "rest_day"}


def test_uploaded_plan_reads_back_with_its_own_keys(client: TestClient, register) -> None:
    headers = register("verbose")
    schedule = {
        "monday": {
            "name": "Push",
            "focus": "chest",
            "exercises": [{"name": "Bench", "sets": 3, "type": "reps", "rest": "90s", "reps": "8-12"}],
        }
    }
    client.post("/api/workouts/upload-plan", json={"name": "Verbose", "schedule": schedule}, headers=headers)

    workout = client.get("/api/workouts/plan", headers=headers).json()["schedule"]["monday"]

    assert workout == {
        "name": "Push",
        "focus": "chest",
        "exercises": [{"name": "Bench", "sets": 3, "type": "reps", "notes": "", "rest": "90s", "reps": "8-12"}],
    }


def test_invalid_upload_returns_400(client: TestClient, register, scenario_plan: dict) -> None:
    headers = register("sloppy")
    client.post("/api/workouts/upload-plan", json=scenario_plan, headers=headers)

    response = client.post(
        "/api/workouts/upload-plan",
        json={"name": "Bad", "schedule": {"monday": {"name": "Push", "exercises": [{"name": "Bench", "sets": 0, "type": "reps"}]}}},
        headers=headers,
    )

    assert response.status_code == 400
    assert "at least 1" in response.json()["error"]
    plan = client.get("/api/workouts/plan", headers=headers).json()
    assert plan["plan_name"] == "A"


def test_plans_listing(client: TestClient, register, scenario_plan: dict) -> None:
    headers = register("collector")
    client.post("/api/workouts/upload-plan", json=scenario_plan, headers=headers)
    client.post("/api/workouts/upload-plan", json={**scenario_plan, "name": "B"}, headers=headers)

    plans = client.get("/api/workouts/plans", headers=headers).json()

    assert [p["name"] for p in plans] == ["B", "A"]
    assert [p["active"] for p in plans] == [True, False]


def test_complete_then_history(client: TestClient, register) -> None:
    headers = register("finisher")

    saved = client.post("/api/workouts/complete", json=COMPLETION, headers=headers)
    assert saved.status_code == 201, saved.text
    assert saved.json()["created"] is True

    history = client.get("/api/workouts/history", headers=headers)
    assert history.status_code == 200
    [workout] = history.json()["workouts"]
    assert workout["date"] == MONDAY
    assert workout["workout_name"] == "Push"
    assert workout["exercises"][0]["sets"] == [{"reps": 8, "weight": 135.0}]
    assert workout["exercises"][0]["notes"] == "felt good"


def test_set_notes_and_extra_keys_come_back_in_history(client: TestClient, register) -> None:
    headers = register("annotator")
    body = {
        **COMPLETION,
        "exercises": [{"name": "Plank", "sets": [{"time": 45, "notes": "last one hard", "side": "left"}]}],
    }

    saved = client.post("/api/workouts/complete", json=body, headers=headers)
    assert saved.status_code == 201, saved.text

    [workout] = client.get("/api/workouts/history", headers=headers).json()["workouts"]
    assert workout["exercises"][0]["sets"] == [{"duration": 45.0, "notes": "last one hard", "side": "left"}]


def test_complete_with_no_exercises_returns_400(client: TestClient, register) -> None:
    headers = register("empty")

    response = client.post("/api/workouts/complete", json={**COMPLETION, "exercises": []}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Date, workout, and exercises are required"
    assert client.get("/api/workouts/history", headers=headers).json()["workouts"] == []


def test_complete_with_malformed_set_returns_422(client: TestClient, register) -> None:
    body = {**COMPLETION, "exercises": [{"name": "Bench", "sets": [{"reps": "lots"}]}]}

    response = client.post("/api/workouts/complete", json=body, headers=register("typo"))

    assert response.status_code == 422


def test_idempotency_key_header_prevents_duplicates(client: TestClient, register) -> None:
    headers = register("flaky-network")
    replay_headers = {**headers, "Idempotency-Key": "abc-123"}

    first = client.post("/api/workouts/complete", json=COMPLETION, headers=replay_headers)
    second = client.post("/api/workouts/complete", json=COMPLETION, headers=replay_headers)

    assert first.status_code == 201
    assert first.json()["created"] is True
    assert second.status_code == 200
    assert second.json()["created"] is False
    assert second.json()["workout"]["id"] == first.json()["workout"]["id"]
    assert len(client.get("/api/workouts/history", headers=headers).json()["workouts"]) == 1


def test_history_limit_out_of_range_returns_400(client: TestClient, register) -> None:
    response = client.get("/api/workouts/history", params={"limit": 0}, headers=register("zero"))

    assert response.status_code == 400
    assert "limit" in response.json()["error"]


def test_delete_flow(client: TestClient, register) -> None:
    owner = register("owner")
    intruder = register("intruder")
    workout_id = client.post("/api/workouts/complete", json=COMPLETION, headers=owner).json()["workout"]["id"]

    forbidden = client.delete(f"/api/workouts/{workout_id}", headers=intruder)
    assert forbidden.status_code == 403

    deleted = client.delete(f"/api/workouts/{workout_id}", headers=owner)
    assert deleted.status_code == 200
    assert deleted.json()["deleted"] == 1

    again = client.delete(f"/api/workouts/{workout_id}", headers=owner)
    assert again.status_code == 404


def test_legacy_delete_body(client: TestClient, register) -> None:
    headers = register("legacy")
    workout_id = client.post("/api/workouts/complete", json=COMPLETION, headers=headers).json()["workout"]["id"]

    bad = client.post("/api/workouts/delete", json={"workoutId": "abc"}, headers=headers)
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Valid workout ID is required"

    ok = client.post("/api/workouts/delete", json={"workoutId": workout_id}, headers=headers)
    assert ok.status_code == 200
    assert client.get("/api/workouts/history", headers=headers).json()["workouts"] == []


def test_missing_default_plan_returns_500(app_settings: Settings, store: Store, tmp_path: Path) -> None:
    broken = app_settings.model_copy(update={"default_plan_path": tmp_path / "missing.json"})

    with TestClient(create_app(broken, store)) as client:
        token = client.post("/api/auth/register", json={"username": "unlucky", "password": "secret-password"}).json()["token"]
        response = client.get("/api/workouts/plan", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to load workout plan"}


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"
