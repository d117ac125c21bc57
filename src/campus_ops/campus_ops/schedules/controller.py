from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_api, json_body, optional_int
from ..core.enums import RecordStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import EntryCandidate


def _status(value):
    if value in (None, ""):
        return None
    try:
        return RecordStatus(str(value).lower())
    except ValueError:
        raise ValidationError(f"Invalid status: {value}") from None


def _days(value):
    if value is None:
        return None
    if isinstance(value, str):
        return [d.strip() for d in value.split(",") if d.strip()]
    if not isinstance(value, list):
        raise ValidationError("days must be a list")
    return value


def _candidate(data: dict, *, class_id=None) -> EntryCandidate:
    if not isinstance(data, dict):
        raise ValidationError("Timetable entry must be an object")
    return EntryCandidate(
        class_id=class_id if class_id is not None else data.get("classId"),
        teacher_id=data.get("teacherId"),
        subject=data.get("subject") or "",
        day=data.get("day") or "",
        start_time=data.get("startTime") or "",
        end_time=data.get("endTime") or "",
        room=data.get("room"),
    )


def register(app: Flask, container: Container) -> None:
    classes = container.class_service
    timetable = container.timetable_service

    # ---- classes ----

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="api_class_get")
    @json_api
    def api_class_get(class_id: int):
        return jsonify({"success": True, "data": classes.get_class(class_id).to_dict()})

    @app.route("/api/classes", methods=["POST"], endpoint="api_class_create")
    @json_api
    def api_class_create():
        data = json_body()
        class_id = classes.create_class(
            title=data.get("title") or data.get("classTitle"),
            days=_days(data.get("days")) or (),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            room_number=data.get("roomNumber"),
            teacher_name=data.get("teacherName"),
            subject=data.get("subject"),
        )
        created = classes.get_class(class_id)
        return jsonify({"success": True, "message": "Class created", "data": created.to_dict()}), 201

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="api_class_update")
    @json_api
    def api_class_update(class_id: int):
        data = json_body()
        updated = classes.update_class(
            class_id,
            title=data.get("title") or data.get("classTitle"),
            days=_days(data.get("days")),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            room_number=data.get("roomNumber"),
            status=_status(data.get("status")),
            teacher_name=data.get("teacherName"),
            subject=data.get("subject"),
        )
        return jsonify({"success": True, "message": "Class updated", "data": updated.to_dict()})

    # ---- timetable ----

    @app.route("/api/timetable", methods=["GET"], endpoint="api_timetable_list")
    @json_api
    def api_timetable_list():
        entries = timetable.list_entries(
            class_id=optional_int(request.args.get("classId"), "classId"),
            teacher_id=optional_int(request.args.get("teacherId"), "teacherId"),
            day=request.args.get("day") or None,
            status=_status(request.args.get("status")),
        )
        return jsonify({"success": True, "count": len(entries), "data": [e.to_dict() for e in entries]})

    @app.route("/api/timetable", methods=["POST"], endpoint="api_timetable_create")
    @json_api
    def api_timetable_create():
        entry_id = timetable.create_entry(_candidate(json_body()))
        created = timetable.get_entry(entry_id)
        return jsonify({"success": True, "message": "Timetable entry created", "data": created.to_dict()}), 201

    @app.route("/api/timetable/<int:entry_id>", methods=["PUT"], endpoint="api_timetable_update")
    @json_api
    def api_timetable_update(entry_id: int):
        data = json_body()
        timetable.update_entry(
            entry_id,
            teacher_id=optional_int(data.get("teacherId"), "teacherId"),
            subject=data.get("subject"),
            day=data.get("day"),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            room=data.get("room"),
            status=_status(data.get("status")),
        )
        updated = timetable.get_entry(entry_id)
        return jsonify({"success": True, "message": "Timetable entry updated", "data": updated.to_dict()})

    @app.route("/api/timetable/<int:entry_id>", methods=["DELETE"], endpoint="api_timetable_delete")
    @json_api
    def api_timetable_delete(entry_id: int):
        timetable.delete_entry(entry_id)
        return jsonify({"success": True, "message": "Timetable entry deleted"})

    @app.route("/api/timetable/bulk-generate", methods=["POST"], endpoint="api_timetable_bulk")
    @json_api
    def api_timetable_bulk():
        data = json_body()
        class_id = optional_int(data.get("classId"), "classId")
        entries = data.get("entries")
        if class_id is None or not isinstance(entries, list) or not entries:
            raise ValidationError("classId and entries array are required")

        ids = timetable.bulk_generate(class_id, [_candidate(e, class_id=class_id) for e in entries])
        return (
            jsonify({"success": True, "message": f"Created {len(ids)} timetable entries", "count": len(ids), "ids": ids}),
            201,
        )

    @app.route("/api/timetable/clear-class/<int:class_id>", methods=["DELETE"], endpoint="api_timetable_clear")
    @json_api
    def api_timetable_clear(class_id: int):
        deleted = timetable.clear_class(class_id)
        return jsonify({"success": True, "message": f"Deleted {deleted} timetable entries", "deletedCount": deleted})
