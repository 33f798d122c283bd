from flask import Blueprint, Response
from flask_jwt_extended import jwt_required
from prometheus_client import REGISTRY, generate_latest, CONTENT_TYPE_LATEST

admin_bp = Blueprint("admin", __name__)


@admin_bp.get("/admin/metrics")
@jwt_required()
def metrics():
    """Prometheus exposition: PIX charges, gateway errors, status updates, e-mails."""
    return Response(generate_latest(REGISTRY), mimetype=CONTENT_TYPE_LATEST)
