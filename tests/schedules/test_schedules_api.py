from types import SimpleNamespace

import pytest
from flask import Flask

from src.campus_ops.campus_ops.schedules.controller import register


@pytest.fixture
def client(class_service, timetable_service):
    app = Flask(__name__)
    register(app, SimpleNamespace(class_service=class_service, timetable_service=timetable_service))
    return app.test_client()


def _create_class(client, **overrides):
    body = {"title": "Class A", "days": ["Mon", "Wed"], "startTime": "16:00", "endTime": "18:00", "roomNumber": "101"}
    body.update(overrides)
    return client.post("/api/classes", json=body)


def test_create_class_then_conflict(client):
    assert _create_class(client).status_code == 201

    resp = _create_class(client, title="Class B", days=["Wed", "Fri"], startTime="17:00", endTime="19:00")

    assert resp.status_code == 409
    data = resp.get_json()
    assert data["message"] == 'Schedule Conflict: 101 is already occupied by "Class A" on Wed from 16:00-18:00'
    assert data["conflicts"][0]["conflictingDays"] == ["Wed"]


def test_class_validation_and_not_found(client):
    assert _create_class(client, title="").status_code == 400
    assert _create_class(client, startTime="25:00").status_code == 400
    assert client.put("/api/classes/42", json={"title": "X"}).status_code == 404


def test_update_class(client):
    class_id = _create_class(client).get_json()["data"]["classId"]

    resp = client.put(f"/api/classes/{class_id}", json={"roomNumber": "TBD"})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["roomNumber"] == "TBD"


def test_timetable_crud_and_conflicts(client):
    class_id = _create_class(client).get_json()["data"]["classId"]
    entry = {"classId": class_id, "teacherId": 1, "subject": "Maths", "day": "Mon", "startTime": "14:00", "endTime": "15:00", "room": "2"}

    created = client.post("/api/timetable", json=entry)
    assert created.status_code == 201
    entry_id = created.get_json()["data"]["id"]

    clash = client.post("/api/timetable", json={**entry, "startTime": "14:30", "endTime": "15:30", "room": "5"})
    assert clash.status_code == 409
    assert clash.get_json()["conflicts"] == ['Teacher already has "Maths" in Class A at 14:00-15:00']

    listed = client.get(f"/api/timetable?classId={class_id}").get_json()
    assert listed["count"] == 1

    assert client.put(f"/api/timetable/{entry_id}", json={"endTime": "15:30"}).status_code == 200
    assert client.delete(f"/api/timetable/{entry_id}").status_code == 200
    assert client.delete(f"/api/timetable/{entry_id}").status_code == 404


def test_bulk_generate_atomic(client):
    class_id = _create_class(client).get_json()["data"]["classId"]
    client.post(
        "/api/timetable",
        json={"classId": class_id, "teacherId": 7, "subject": "Bio", "day": "Monday", "startTime": "09:00", "endTime": "10:00"},
    )

    entries = [
        {"teacherId": 1, "subject": "A", "day": "Mon", "startTime": "11:00", "endTime": "12:00"},
        {"teacherId": 7, "subject": "B", "day": "Mon", "startTime": "09:30", "endTime": "10:30"},
        {"teacherId": 2, "subject": "C", "day": "Wed", "startTime": "11:00", "endTime": "12:00"},
    ]
    resp = client.post("/api/timetable/bulk-generate", json={"classId": class_id, "entries": entries})

    assert resp.status_code == 409
    conflicts = resp.get_json()["conflicts"]
    assert len(conflicts) == 1
    assert conflicts[0]["index"] == 1
    assert client.get(f"/api/timetable?classId={class_id}").get_json()["count"] == 1

    ok = client.post("/api/timetable/bulk-generate", json={"classId": class_id, "entries": [entries[0], entries[2]]})
    assert ok.status_code == 201
    assert ok.get_json()["count"] == 2


def test_bulk_generate_requires_entries(client):
    assert client.post("/api/timetable/bulk-generate", json={"classId": 1, "entries": []}).status_code == 400


def test_clear_class(client):
    class_id = _create_class(client).get_json()["data"]["classId"]
    client.post(
        "/api/timetable",
        json={"classId": class_id, "teacherId": 1, "subject": "A", "day": "Mon", "startTime": "09:00", "endTime": "10:00"},
    )

    resp = client.delete(f"/api/timetable/clear-class/{class_id}")

    assert resp.get_json()["deletedCount"] == 1
