from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    notifications = container.notification_service

    @app.route("/notifications", methods=["GET"], endpoint="notifications")
    @login_required
    def list_notifications():
        return jsonify(
            {
                "notifications": [n.to_record() for n in notifications.list_all()],
                "unread": notifications.unread_count(),
            }
        )

    @app.route("/notifications/<notification_id>/read", methods=["POST"], endpoint="mark_notification_read")
    @login_required
    def mark_notification_read(notification_id: str):
        notifications.mark_read(notification_id)
        return jsonify({"unread": notifications.unread_count()})

    @app.route("/notifications/read-all", methods=["POST"], endpoint="mark_all_notifications_read")
    @login_required
    def mark_all_notifications_read():
        notifications.mark_all_read()
        return jsonify({"unread": 0})

    @app.route("/notifications", methods=["DELETE"], endpoint="clear_notifications")
    @login_required
    def clear_notifications():
        notifications.clear()
        return jsonify({"unread": 0})
