from __future__ import annotations

import io

from flask import Flask, Response, request, send_file

from ..common.web import current_user, login_required
from ..container import Container
from ..requests.model import RequestFilter
from .service import CSV_MIMETYPE, XLSX_MIMETYPE, export_filename, requests_to_csv, requests_to_report


def register(app: Flask, container: Container) -> None:
    def _rows():
        user = current_user()
        return container.request_store.history_for(user.role, user.username, RequestFilter.from_args(request.args))

    def _name() -> str:
        return request.args.get("filename") or f"{current_user().role.value}_requests"

    @app.route("/export/csv", methods=["GET"], endpoint="export_csv")
    @login_required
    def export_csv():
        content = requests_to_csv(_rows())
        return Response(
            content,
            mimetype=CSV_MIMETYPE,
            headers={"Content-Disposition": f"attachment; filename={export_filename(_name(), 'csv')}"},
        )

    @app.route("/export/report", methods=["GET"], endpoint="export_report")
    @login_required
    def export_report():
        content = requests_to_report(_rows())
        return send_file(
            io.BytesIO(content),
            as_attachment=True,
            download_name=export_filename(_name(), "xlsx"),
            mimetype=XLSX_MIMETYPE,
        )
