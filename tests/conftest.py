import os
import sys
from datetime import datetime, timedelta, timezone

import psycopg2
import pytest

# Ensure project root is on sys.path for module resolution
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("CACHE_ENABLED", "0")

from flask_jwt_extended import create_access_token

from app import create_app
from app.errors import UpstreamError
from app.services import coupon_service, payment_service
from app.services.secret_service import SecretStore
from app.utils import authz
from app.utils.rate_limit import limiter


class FakeGateway:
    """In-memory stand-in for MercadoPagoClient."""

    def __init__(self):
        self.payments = {}
        self.calls = []
        self.fail_ops = set()
        self.fail_ids = set()
        self._next_id = 123

    def _maybe_fail(self, op, payment_id=None):
        if op in self.fail_ops or (payment_id and str(payment_id) in self.fail_ids):
            raise UpstreamError(
                f"Error in {op}", provider="mercadopago", upstream_status=500
            )

    def create_payment(self, payload, idempotency_key=None):
        self.calls.append(("create", payload, idempotency_key))
        self._maybe_fail("create")
        pid = self._next_id
        self._next_id += 1
        payment = {
            "id": pid,
            "status": "pending",
            "transaction_amount": payload["transaction_amount"],
            "point_of_interaction": {
                "transaction_data": {
                    "qr_code": f"00020126PIX{pid}",
                    "qr_code_base64": "iVBORw0KGgo=",
                    "ticket_url": f"https://mp.test/ticket/{pid}",
                }
            },
        }
        self.payments[str(pid)] = payment
        return payment

    def get_payment(self, payment_id):
        self.calls.append(("get", str(payment_id)))
        self._maybe_fail("get", payment_id)
        if str(payment_id) not in self.payments:
            raise UpstreamError(
                "Payment not found", provider="mercadopago", upstream_status=404
            )
        return dict(self.payments[str(payment_id)])

    def cancel_payment(self, payment_id):
        self.calls.append(("cancel", str(payment_id)))
        self._maybe_fail("cancel", payment_id)
        self.payments[str(payment_id)]["status"] = "cancelled"
        return dict(self.payments[str(payment_id)])

    def settle(self, payment_id, status):
        self.payments[str(payment_id)]["status"] = status


class DonationStore:
    """Replaces the donations table for the payment service."""

    def __init__(self):
        self.rows = {}
        self.fail_insert = False
        self.fail_update = False

    def insert(self, **row):
        if self.fail_insert:
            raise psycopg2.OperationalError("could not connect to server")
        donation_id = f"don-{len(self.rows) + 1}"
        rec = {
            "id": donation_id,
            **row,
            "created_at": datetime.now(timezone.utc) + timedelta(seconds=len(self.rows)),
        }
        self.rows[donation_id] = rec
        return dict(rec)

    def set_status(self, donation_id, status):
        if self.fail_update:
            raise psycopg2.OperationalError("could not connect to server")
        if donation_id not in self.rows:
            return False
        self.rows[donation_id]["status"] = status
        return True

    def by_status(self, status):
        rows = [dict(r) for r in self.rows.values() if r["status"] == status]
        return sorted(rows, key=lambda r: r["created_at"])


class CouponBook:
    """Replaces the coupon lookups; windows default to now +/- one day."""

    def __init__(self):
        self.streamer = []
        self.global_ = []

    def add_streamer(
        self,
        codigo,
        *,
        valor=None,
        porcentagem=None,
        data_inicio=None,
        data_fim=None,
        streamer_id="str-1",
    ):
        now = datetime.now(timezone.utc)
        self.streamer.append(
            {
                "id": f"sc-{len(self.streamer) + 1}",
                "streamer_id": streamer_id,
                "nome": f"Cupom {codigo}",
                "codigo": codigo,
                "descricao": None,
                "data_inicio": data_inicio or now - timedelta(days=1),
                "data_fim": data_fim or now + timedelta(days=1),
                "valor": valor,
                "porcentagem": porcentagem,
                "streamer_nome": "Streamer X",
                "streamer_steam_id": "76561198000000001",
            }
        )

    def add_global(self, code, discount_percentage, active=True):
        self.global_.append(
            {
                "id": f"dc-{len(self.global_) + 1}",
                "code": code,
                "discount_percentage": discount_percentage,
                "active": active,
            }
        )

    def find_streamer(self, code, now):
        for r in self.streamer:
            if r["codigo"].upper() == code.upper() and r["data_inicio"] <= now <= r["data_fim"]:
                return dict(r)
        return None

    def find_global(self, code):
        for r in self.global_:
            if r["code"].upper() == code.upper() and r["active"]:
                return dict(r)
        return None


@pytest.fixture(autouse=True)
def _isolate(monkeypatch):
    monkeypatch.setenv("CACHE_ENABLED", "0")
    monkeypatch.setenv("USE_TASK_QUEUE", "0")
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def secrets():
    return SecretStore({"MERCADO_PAGO_ACCESS_TOKEN": "TEST-123", "RESEND_API_KEY": "re_test"})


@pytest.fixture
def donations(monkeypatch):
    store = DonationStore()
    monkeypatch.setattr(payment_service, "insert_donation", store.insert)
    monkeypatch.setattr(payment_service, "set_status_by_id", store.set_status)
    monkeypatch.setattr(payment_service, "list_donations_by_status", store.by_status)
    return store


@pytest.fixture
def coupons(monkeypatch):
    book = CouponBook()
    monkeypatch.setattr(coupon_service, "get_valid_streamer_coupon", book.find_streamer)
    monkeypatch.setattr(coupon_service, "get_active_coupon_by_code", book.find_global)
    return book


@pytest.fixture
def wired(monkeypatch, gateway, secrets, donations, coupons):
    """Payment service fully backed by fakes, as the HTTP handlers see it."""
    monkeypatch.setattr(payment_service.SecretStore, "load", classmethod(lambda cls: secrets))
    monkeypatch.setattr(payment_service, "gateway_from_secrets", lambda s: gateway)
    return gateway


@pytest.fixture
def test_app():
    return create_app({"TESTING": True})


@pytest.fixture
def client(test_app):
    return test_app.test_client()


@pytest.fixture
def roles(monkeypatch):
    table = {"admin-1": "admin", "user-1": "user"}
    monkeypatch.setattr(authz, "get_user_role", lambda user_id: table.get(user_id))
    return table


def _headers(test_app, user_id, role):
    with test_app.app_context():
        token = create_access_token(identity=user_id, additional_claims={"role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(test_app, roles):
    return _headers(test_app, "admin-1", "admin")


@pytest.fixture
def user_headers(test_app, roles):
    return _headers(test_app, "user-1", "user")
