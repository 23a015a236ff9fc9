from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

import api.main
from api.main import app


@pytest.fixture
def client(monkeypatch, today):
    monkeypatch.setattr(api.main, "local_today", lambda: today)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def headers(user_id):
    return {"X-User-ID": user_id}


def test_health(client):
    assert client.get("/").json()["status"] == "ready"


def test_missing_user_header_is_rejected(client):
    assert client.get("/tasks").status_code == 401


def test_chat_creates_schedule_item(client, headers):
    response = client.post("/chat", json={"message": "Set a reminder for my Math quiz tomorrow at 2 PM"}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["side_effect"]["kind"] == "create_schedule_item"

    schedule = client.get("/schedule", headers=headers).json()["schedule"]
    assert schedule[0]["day_of_week"] == "Tuesday"
    assert schedule[0]["time_slot"] == "2:00 PM"


def test_chat_history_and_clear(client, headers):
    client.post("/chat", json={"message": "hello"}, headers=headers)
    messages = client.get("/chat/history", headers=headers).json()["messages"]
    assert messages[0]["message"] == "hello"

    client.post("/chat/clear", headers=headers)
    assert client.get("/chat/history", headers=headers).json()["messages"] == []


def test_task_crud_and_toggle(client, headers):
    created = client.post("/tasks", json={"title": "Lab report", "priority": "high"}, headers=headers).json()
    assert created["priority"] == "high"

    toggled = client.post(f"/tasks/{created['id']}/toggle", headers=headers).json()
    assert toggled["completed"] is True
    assert client.post("/tasks/missing/toggle", headers=headers).status_code == 404


def test_invalid_task_is_rejected(client, headers):
    response = client.post("/tasks", json={"title": ""}, headers=headers)
    assert response.status_code == 422


def test_study_session_defaults_to_today(client, headers, today):
    created = client.post("/study-sessions", json={"subject": "Math", "duration_minutes": 45}, headers=headers).json()
    assert created["session_date"] == today.isoformat()

    body = client.get("/study-sessions", headers=headers).json()
    assert body["total_minutes"] == 45


def test_study_plan_endpoints(client, headers, today):
    request = {"subject": "Biology", "exam_date": (today + timedelta(days=4)).isoformat(), "hours_per_day": 2}
    plan = client.post("/study-plan", json=request, headers=headers).json()
    assert plan["total_days"] == 4

    task_id = plan["days"][0]["tasks"][0]["id"]
    assert client.post(f"/study-plan/tasks/{task_id}/toggle", headers=headers).json()["completed"] is True
    stored = client.get("/study-plan", headers=headers).json()["plans"][0]
    assert stored["progress"] == 12


def test_study_plan_in_the_past_is_rejected(client, headers, today):
    request = {"subject": "Biology", "exam_date": today.isoformat(), "hours_per_day": 2}
    response = client.post("/study-plan", json=request, headers=headers)
    assert response.status_code == 400


def test_notes_endpoint_summarizes(client, headers):
    note = client.post("/notes", json={"title": "Cells", "text": "Cells divide. DNA copies itself."}, headers=headers).json()
    assert note["key_points"][0] == "Main concept: Cells divide"
    assert client.get("/notes", headers=headers).json()["notes"][0]["title"] == "Cells"


def test_upload_text_and_reject_binary(client, headers):
    files = [
        ("files", ("cells.txt", b"Cells divide. DNA copies itself.", "text/plain")),
        ("files", ("virus.exe", b"MZ", "application/octet-stream")),
    ]
    body = client.post("/upload", files=files, headers=headers).json()
    statuses = {entry["filename"]: entry["status"] for entry in body["files"]}
    assert statuses == {"cells.txt": "success", "virus.exe": "error"}

    notes = client.get("/notes", headers=headers).json()["notes"]
    assert notes[0]["file_name"] == "cells.txt"
    assert notes[0]["upload_type"] == "file"


def test_schedule_rejects_unknown_day(client, headers):
    item = {"subject": "Math", "time_slot": "2:00 PM", "day_of_week": "funday"}
    assert client.post("/schedule", json=item, headers=headers).status_code == 422
    assert client.get("/schedule", headers=headers).json()["schedule"] == []
