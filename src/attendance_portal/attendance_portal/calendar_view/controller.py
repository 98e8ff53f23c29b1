from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.web import current_user, login_required, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    holidays = container.holiday_service

    @app.route("/calendar", methods=["GET"], endpoint="calendar")
    @login_required
    def calendar():
        user = current_user()
        view = container.calendar_service.month_view(
            container.request_store.history_for(user.role, user.username),
            year=request.args.get("year", type=int),
            month=request.args.get("month", type=int),
        )
        return jsonify(view.to_dict())

    @app.route("/holidays", methods=["GET"], endpoint="holidays")
    @login_required
    def list_holidays():
        year = request.args.get("year", type=int) or date.today().year
        return jsonify({"holidays": holidays.list_for_year(year)})

    @app.route("/holidays", methods=["POST"], endpoint="add_holiday")
    @roles_required(Role.HOD)
    def add_holiday():
        body = request.get_json(silent=True) or {}
        holidays.add(body.get("date", ""), body.get("label", ""))
        return jsonify({"ok": True}), 201

    @app.route("/holidays/<day>", methods=["DELETE"], endpoint="remove_holiday")
    @roles_required(Role.HOD)
    def remove_holiday(day: str):
        holidays.remove(day)
        return jsonify({"ok": True})
