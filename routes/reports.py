"""
Report downloads (admin).

Handles:
- /admin/reports/<name>.pdf  - PDF of the filtered list (stock, offers, finance, orders)
- /admin/reports/<name>.csv  - same rows as CSV
- /admin/reports/pack.pdf    - every report merged into one back-office pack

Each report honours the same query args as its list page, so the download
matches what the admin is looking at.
"""

import io
from datetime import datetime

from flask import Blueprint, Response, abort, current_app, flash, redirect, request, send_file, url_for

from core.exceptions import AuthExpiredError
from modules import csv_export, reports
from logging_config import get_logger
from .finance import load_filtered_finance
from .guards import BACKEND_ERRORS, admin_required
from .offers import load_filtered_offers
from .orders import load_filtered_orders
from .stock import load_filtered_stock


logger = get_logger(__name__)

reports_bp = Blueprint("reports", __name__)

# name -> (loader, pdf builder, list endpoint)
REPORTS = {
    "stock": (load_filtered_stock, reports.build_stock_report, "stock.stock_list"),
    "offers": (load_filtered_offers, reports.build_offer_report, "offers.admin_offers"),
    "finance": (load_filtered_finance, reports.build_finance_report, "finance.finance"),
    "orders": (load_filtered_orders, reports.build_order_report, "orders.admin_orders"),
}

PACK_ORDER = ("orders", "stock", "offers", "finance")


def _filename(name: str, extension: str) -> str:
    return f"{name}-report-{datetime.now():%Y%m%d-%H%M}.{extension}"


@reports_bp.route("/admin/reports/<name>.pdf", methods=["GET"])
@admin_required
def pdf_report(name: str):
    if name == "pack":
        return pack()
    if name not in REPORTS:
        abort(404)

    loader, builder, endpoint = REPORTS[name]
    try:
        records = loader(request.args)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Could not build report: {e.message}", "error")
        return redirect(url_for(endpoint))

    pdf = builder(records, reports.CompanyInfo.from_config(current_app.config))
    return send_file(
        io.BytesIO(pdf),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=_filename(name, "pdf"),
    )


@reports_bp.route("/admin/reports/<name>.csv", methods=["GET"])
@admin_required
def csv_report(name: str):
    if name not in csv_export.EXPORTERS:
        abort(404)

    loader, _, endpoint = REPORTS[name]
    try:
        records = loader(request.args)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Could not export: {e.message}", "error")
        return redirect(url_for(endpoint))

    return Response(
        csv_export.EXPORTERS[name](records),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={_filename(name, 'csv')}"},
    )


def pack():
    """All reports, unfiltered, merged in PACK_ORDER."""
    company = reports.CompanyInfo.from_config(current_app.config)
    generated_at = datetime.now()
    pdfs = []
    try:
        for name in PACK_ORDER:
            loader, builder, _ = REPORTS[name]
            pdfs.append(builder(loader({}), company, generated_at))
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Could not build the back-office pack: {e.message}", "error")
        return redirect(url_for("orders.admin_orders"))

    return send_file(
        io.BytesIO(reports.merge_reports(pdfs)),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=_filename("back-office-pack", "pdf"),
    )
