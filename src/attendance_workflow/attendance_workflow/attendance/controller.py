from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import day_bounds, parse_iso_date
from ..common.responses import ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    resolver = container.resolver

    @app.route("/api/attendance/<record_id>", methods=["GET"], endpoint="get_attendance")
    def get_attendance(record_id: str):
        return ok(resolver.get(record_id))

    @app.route(
        "/api/attendance/student/<student_id>/date/<day>/course/<course_id>",
        methods=["GET"],
        endpoint="get_attendance_by_student_date",
    )
    def get_by_student_date(student_id: str, day: str, course_id: str):
        return ok(resolver.get_current(student_id, course_id, parse_iso_date(day)))

    @app.route(
        "/api/attendance/student/<student_id>/date/<day>/course/<course_id>/latest",
        methods=["GET"],
        endpoint="get_latest_attendance",
    )
    def get_latest(student_id: str, day: str, course_id: str):
        return ok(resolver.get_latest(student_id, course_id, parse_iso_date(day)))

    @app.route("/api/attendance/student/<student_id>/range", methods=["GET"], endpoint="get_student_range")
    def get_student_range(student_id: str):
        start = parse_iso_date(request.args.get("start_date") or "")
        end = parse_iso_date(request.args.get("end_date") or "")
        return ok(resolver.get_student_range(student_id, start, end))

    @app.route("/api/attendance/course/<course_id>/date/<day>", methods=["GET"], endpoint="get_course_for_date")
    def get_course_for_date(course_id: str, day: str):
        return ok(resolver.get_course_for_date(course_id, parse_iso_date(day)))

    @app.route("/api/attendance/status/<status>", methods=["GET"], endpoint="get_attendance_by_status")
    def get_by_status(status: str):
        return ok(resolver.get_by_status(status))

    @app.route("/api/attendance/statuses", methods=["GET"], endpoint="get_attendance_by_statuses")
    def get_by_statuses():
        return ok(resolver.get_by_statuses(request.args.getlist("status")))

    @app.route(
        "/api/attendance/versions/student/<student_id>/date/<day>/course/<course_id>",
        methods=["GET"],
        endpoint="get_attendance_versions",
    )
    def get_versions(student_id: str, day: str, course_id: str):
        return ok(resolver.get_all_versions(student_id, course_id, parse_iso_date(day)))

    @app.route("/api/attendance/<record_id>/children", methods=["GET"], endpoint="get_child_versions")
    def get_children(record_id: str):
        return ok(resolver.get_children(record_id))

    @app.route("/api/attendance/<record_id>/audit-trail", methods=["GET"], endpoint="get_audit_trail")
    def get_audit_trail(record_id: str):
        return ok(container.ledger.trail(record_id))

    @app.route("/api/attendance/<record_id>/reopen-requests", methods=["GET"], endpoint="list_record_reopen_requests")
    def list_record_reopen_requests(record_id: str):
        return ok(container.reopen_workflow.list_for_record(record_id))

    @app.route("/api/reopen-requests/pending", methods=["GET"], endpoint="list_pending_reopen_requests")
    def list_pending_reopen_requests():
        return ok(container.reopen_workflow.list_pending())

    @app.route("/api/audit/actor/<actor_id>", methods=["GET"], endpoint="get_actor_audit")
    def get_actor_audit(actor_id: str):
        return ok(container.ledger.by_actor(actor_id))

    @app.route("/api/audit/range", methods=["GET"], endpoint="get_audit_range")
    def get_audit_range():
        start, end = day_bounds(
            parse_iso_date(request.args.get("start_date") or ""),
            parse_iso_date(request.args.get("end_date") or ""),
        )
        return ok(container.ledger.between(start, end))
