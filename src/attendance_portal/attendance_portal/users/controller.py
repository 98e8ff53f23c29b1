from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import current_user, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        body = request.get_json(silent=True) or {}
        user = container.auth_service.authenticate(body.get("username", ""), body.get("password", ""))
        session.clear()
        session["username"] = user.username
        session["role"] = user.role.value
        return jsonify({"username": user.username, "role": user.role.value})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"ok": True})

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        user = current_user()
        return jsonify({"username": user.username, "role": user.role.value})
