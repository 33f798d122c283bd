from flask import Blueprint, jsonify, request

from app.errors import NotFoundError, ValidationError
from app.models.donation import get_donation, list_donations
from app.services.finance_service import month_bounds, monthly_summary
from app.services.payment_service import reconcile_pending_donations
from app.tasks import enqueue_pending_sweep
from app.utils.authz import require_admin

donations_bp = Blueprint("donations", __name__, url_prefix="/api/admin")


def _int_arg(name: str):
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


@donations_bp.get("/donations")
@require_admin
def list_all():
    status = (request.args.get("status") or "").strip() or None
    year, month = _int_arg("year"), _int_arg("month")
    created_from = created_to = None
    if year is not None and month is not None:
        created_from, created_to = month_bounds(year, month)
    elif year is not None or month is not None:
        raise ValidationError("year and month must be given together")
    rows = list_donations(
        status=status, created_from=created_from, created_to=created_to
    )
    return jsonify(rows), 200


@donations_bp.get("/donations/<donation_id>")
@require_admin
def get_one(donation_id):
    row = get_donation(donation_id)
    if not row:
        raise NotFoundError("donation not found")
    return jsonify(row), 200


@donations_bp.post("/donations/refresh-pending")
@require_admin
def refresh_pending():
    if request.args.get("async") == "1":
        job_id = enqueue_pending_sweep()
        if job_id:
            return jsonify({"queued": True, "job_id": job_id}), 202
    return jsonify(reconcile_pending_donations()), 200


@donations_bp.get("/summary")
@require_admin
def summary():
    return jsonify(monthly_summary(_int_arg("year"), _int_arg("month"))), 200
