from __future__ import annotations

from flask import Flask, jsonify, request

from ..core.enums import ErrorKind, Role
from ..core.result import Result
from ..container import Container
from ..records.controller import current_actor, respond


def register(app: Flask, container: Container) -> None:
    def _json_body() -> dict:
        body = request.get_json(silent=True)
        return body if isinstance(body, dict) else {}

    def _actor_required():
        actor = current_actor()
        if actor is None:
            return None, respond(Result.failure(ErrorKind.INVALID_ARGUMENT, "X-Actor-Id header is required"))
        return actor, None

    # Accountant
    @app.route("/api/accountant/payroll-summary", methods=["GET"], endpoint="payroll_summary")
    def payroll_summary():
        return respond(container.payroll_service.payroll_summary(request.args.get("month")))

    @app.route("/api/accountant/salary/process", methods=["POST"], endpoint="process_salary")
    def process_salary():
        return respond(container.payroll_service.process_salary(_json_body(), current_actor()))

    @app.route("/api/accountant/contributions/<kind>", methods=["POST"], endpoint="process_contribution")
    def process_contribution(kind: str):
        return respond(container.payroll_service.process_contribution(kind, _json_body(), current_actor()))

    @app.route("/api/accountant/financial-reports/generate", methods=["POST"], endpoint="generate_financial_report")
    def generate_financial_report():
        return respond(container.payroll_service.generate_financial_report(_json_body(), current_actor()))

    # Manager
    @app.route("/api/manager/team", methods=["GET"], endpoint="team_members")
    def team_members():
        actor, error = _actor_required()
        if error:
            return error
        return respond(container.team_service.team_members(actor.actor_id))

    @app.route("/api/manager/leave/<leave_id>", methods=["POST"], endpoint="process_leave")
    def process_leave(leave_id: str):
        actor, error = _actor_required()
        if error:
            return error
        body = _json_body()
        return respond(
            container.team_service.process_leave_request(leave_id, body.get("status", ""), body.get("remarks"), actor)
        )

    # HR
    @app.route("/api/hr/kpi/<empid>", methods=["POST"], endpoint="update_kpi")
    def update_kpi(empid: str):
        return respond(container.performance_service.update_employee_kpi(empid, _json_body(), current_actor()))

    @app.route("/api/hr/performance/<empid>", methods=["GET"], endpoint="employee_performance")
    def employee_performance(empid: str):
        return respond(container.performance_service.employee_performance(empid))

    # CEO
    @app.route("/api/ceo/overview", methods=["GET"], endpoint="company_overview")
    def company_overview():
        return respond(container.executive_service.company_overview())

    @app.route("/api/ceo/metrics", methods=["GET"], endpoint="performance_metrics")
    def performance_metrics():
        return respond(container.executive_service.performance_metrics())

    @app.route("/api/ceo/decisions", methods=["POST"], endpoint="approve_decision")
    def approve_decision():
        actor, error = _actor_required()
        if error:
            return error
        return respond(container.executive_service.approve_strategic_decision(_json_body(), actor))

    # Reports (admin / hr)
    @app.route("/api/<role>/reports/generate", methods=["POST"], endpoint="generate_report")
    def generate_report(role: str):
        if role not in (Role.ADMIN.value, Role.HR.value):
            return jsonify({"ok": False, "error": f"{role} cannot generate reports"}), 404
        return respond(container.report_service.generate_report(_json_body(), current_actor(), role=Role(role)))

