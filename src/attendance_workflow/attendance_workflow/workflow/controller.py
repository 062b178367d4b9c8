from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_actor, json_body
from ..common.responses import ok
from ..common.validators import require_non_empty
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.workflow_service

    @app.route("/api/attendance", methods=["POST"], endpoint="create_attendance")
    def create_attendance():
        actor_id, actor_role = current_actor()
        body = json_body()
        record = svc.create_attendance(
            student_id=require_non_empty(str(body.get("student_id") or ""), "student_id"),
            course_id=require_non_empty(str(body.get("course_id") or ""), "course_id"),
            attendance_date=parse_iso_date(str(body.get("attendance_date") or "")),
            is_present=body.get("is_present", False),
            remarks=body.get("remarks") or "",
            actor_id=actor_id,
            actor_role=actor_role,
        )
        return ok(record, 201)

    @app.route("/api/attendance/<record_id>/submit", methods=["POST"], endpoint="submit_attendance")
    def submit_attendance(record_id: str):
        actor_id, actor_role = current_actor()
        return ok(svc.submit(record_id, actor_id, actor_role))

    @app.route("/api/attendance/<record_id>/approve", methods=["POST"], endpoint="approve_attendance")
    def approve_attendance(record_id: str):
        actor_id, actor_role = current_actor()
        return ok(svc.approve(record_id, actor_id, actor_role, notes=json_body().get("notes") or ""))

    @app.route("/api/attendance/<record_id>/publish", methods=["POST"], endpoint="publish_attendance")
    def publish_attendance(record_id: str):
        actor_id, actor_role = current_actor()
        return ok(svc.publish(record_id, actor_id, actor_role))

    @app.route("/api/attendance/<record_id>/lock", methods=["POST"], endpoint="lock_attendance")
    def lock_attendance(record_id: str):
        actor_id, actor_role = current_actor()
        return ok(svc.lock(record_id, actor_id, actor_role))

    @app.route("/api/attendance/<record_id>/request-reopen", methods=["POST"], endpoint="request_reopen")
    def request_reopen(record_id: str):
        actor_id, actor_role = current_actor()
        done = svc.request_reopen(record_id, actor_id, actor_role, reason=json_body().get("reason") or "")
        return ok({"requested": done})

    @app.route(
        "/api/attendance/reopen-requests/<int:request_id>/approve",
        methods=["POST"],
        endpoint="approve_reopen",
    )
    def approve_reopen(request_id: int):
        actor_id, actor_role = current_actor()
        return ok(svc.approve_reopen(request_id, actor_id, actor_role, comments=json_body().get("comments") or ""))

    @app.route(
        "/api/attendance/reopen-requests/<int:request_id>/reject",
        methods=["POST"],
        endpoint="reject_reopen",
    )
    def reject_reopen(request_id: int):
        actor_id, actor_role = current_actor()
        return ok(svc.reject_reopen(request_id, actor_id, actor_role, comments=json_body().get("comments") or ""))

    @app.route("/api/attendance/<record_id>/apply-correction", methods=["POST"], endpoint="apply_correction")
    def apply_correction(record_id: str):
        actor_id, actor_role = current_actor()
        body = json_body()
        correction = svc.apply_correction(
            record_id,
            body.get("is_present", False),
            body.get("remarks") or "",
            body.get("reason") or "",
            actor_id,
            actor_role,
        )
        return ok(correction, 201)
