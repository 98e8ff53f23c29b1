from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc
from ..common.web import current_user, login_required, roles_required
from ..container import Container
from ..core.constants import QUEUE_FOR_ROLE, REJECTION_REASONS
from ..core.enums import Partition, RecipientTarget, RequestStatus, Role
from ..core.exceptions import ValidationError
from .model import NewRequestInput, RequestFilter


def register(app: Flask, container: Container) -> None:
    store = container.request_store
    stats = container.statistics_service

    def _serialize(items) -> list[dict]:
        now = now_utc()
        out: list[dict] = []
        for r in items:
            row = r.to_record()
            if r.is_pending:
                row["pendingSince"] = stats.pending_since(r, now=now)
                row["stale"] = stats.is_stale(r, now=now)
            out.append(row)
        return out

    def _own_queue() -> Partition:
        return QUEUE_FOR_ROLE[current_user().role]

    @app.route("/requests", methods=["POST"], endpoint="submit_request")
    @roles_required(Role.STUDENT)
    def submit_request():
        body = request.get_json(silent=True) or {}
        created = store.submit(
            NewRequestInput(
                subject=body.get("subject", ""),
                date=body.get("date", ""),
                reason=body.get("reason", ""),
                sent_to=body.get("sentTo", RecipientTarget.HOD.value),
                urgent=bool(body.get("urgent", False)),
            ),
            student_name=current_user().username,
        )
        return jsonify({"created": _serialize(created)}), 201

    @app.route("/requests", methods=["GET"], endpoint="my_requests")
    @roles_required(Role.STUDENT)
    def my_requests():
        user = current_user()
        items = store.history_for(user.role, user.username, RequestFilter.from_args(request.args))
        own = store.history_for(user.role, user.username)
        return jsonify(
            {
                "requests": _serialize(items),
                "subjects": sorted({r.subject for r in own}),
            }
        )

    @app.route("/queue", methods=["GET"], endpoint="review_queue")
    @roles_required(Role.HOD, Role.FACULTY)
    def review_queue():
        queue = _own_queue()
        items = store.query(queue, RequestFilter.from_args(request.args))
        return jsonify(
            {
                "queue": queue.value,
                "requests": _serialize(items),
                "subjects": store.subjects(queue),
                "rejectionReasons": list(REJECTION_REASONS),
            }
        )

    @app.route("/queue/<request_id>/approve", methods=["POST"], endpoint="approve_request")
    @roles_required(Role.HOD, Role.FACULTY)
    def approve_request(request_id: str):
        updated = store.review(request_id, RequestStatus.APPROVED, queue=_own_queue())
        return jsonify({"request": updated.to_record()})

    @app.route("/queue/<request_id>/reject", methods=["POST"], endpoint="reject_request")
    @roles_required(Role.HOD, Role.FACULTY)
    def reject_request(request_id: str):
        body = request.get_json(silent=True) or {}
        updated = store.review(
            request_id,
            RequestStatus.REJECTED,
            body.get("rejectionReason"),
            queue=_own_queue(),
        )
        return jsonify({"request": updated.to_record()})

    @app.route("/queue/bulk", methods=["POST"], endpoint="bulk_review")
    @roles_required(Role.HOD, Role.FACULTY)
    def bulk_review():
        body = request.get_json(silent=True) or {}
        ids = body.get("ids") or []
        if not isinstance(ids, list):
            raise ValidationError("ids must be a list")
        count = store.bulk_review(
            ids,
            body.get("decision", ""),
            queue=_own_queue(),
            rejection_reason=body.get("rejectionReason"),
        )
        return jsonify({"reviewed": count})

    @app.route("/queue/keyword", methods=["POST"], endpoint="keyword_review")
    @roles_required(Role.HOD, Role.FACULTY)
    def keyword_review():
        body = request.get_json(silent=True) or {}
        count = store.keyword_review(_own_queue(), body.get("keyword", ""), body.get("decision", ""))
        return jsonify({"reviewed": count})

    @app.route("/approved", methods=["GET"], endpoint="hod_approved")
    @roles_required(Role.FACULTY)
    def hod_approved():
        items = store.query(Partition.APPROVED_REQUESTS, RequestFilter.from_args(request.args))
        return jsonify({"requests": _serialize(items)})

    @app.route("/statistics", methods=["GET"], endpoint="statistics")
    @login_required
    def statistics():
        user = current_user()
        summary = stats.summarize(store.history_for(user.role, user.username))
        return jsonify(summary.to_dict())
