from app.services import email_service, payment_service
from app.services.secret_service import SecretStore

DONOR = {
    "name": "Ana Silva",
    "email": "ana@example.com",
    "phone": "(11) 99999-9999",
    "steamId": "76561198000000000",
    "amount": 50,
}


def test_create_pix_end_to_end(client, wired, donations):
    resp = client.post("/functions/v1/create-pix-payment", json=DONOR)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["payment_id"] == "123"
    assert body["status"] == "pending"
    assert body["amount"] == 50.0
    assert body["qr_code_base64"] == "iVBORw0KGgo="
    assert body["ticket_url"] == "https://mp.test/ticket/123"
    assert body["donation_id"] == "don-1"

    wired.settle("123", "approved")
    resp = client.post(
        "/functions/v1/get-mercadopago-order",
        json={"orderId": "123", "donationId": body["donation_id"]},
    )
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "approved"
    assert donations.rows["don-1"]["status"] == "approved"


def test_create_pix_with_streamer_coupon(client, wired, donations, coupons):
    coupons.add_streamer("STREAMERX", porcentagem=20)

    resp = client.post(
        "/functions/v1/create-pix-payment",
        json={**DONOR, "amount": 100, "discountCoupon": "STREAMERX"},
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["amount"] == 80.0
    assert body["original_amount"] == 100.0
    assert body["discount"]["kind"] == "streamer"


def test_validation_error_shape(client, wired):
    resp = client.post("/functions/v1/create-pix-payment", json={**DONOR, "email": "x"})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid email format", "code": "validation_error"}
    assert wired.calls == []


def test_huge_numeric_amount_is_validation_error(client, wired):
    for amount in (10**30, 1e300):
        resp = client.post(
            "/functions/v1/create-pix-payment", json={**DONOR, "amount": amount}
        )
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "validation_error"
    assert wired.calls == []


def test_missing_gateway_credential_is_500(client, monkeypatch, donations, coupons):
    monkeypatch.setattr(
        payment_service.SecretStore, "load", classmethod(lambda cls: SecretStore({}))
    )

    resp = client.post("/functions/v1/create-pix-payment", json=DONOR)

    assert resp.status_code == 500
    assert resp.get_json()["code"] == "configuration_error"


def test_gateway_error_is_502(client, wired):
    resp = client.post("/functions/v1/get-mercadopago-order", json={"orderId": "999"})

    assert resp.status_code == 502
    body = resp.get_json()
    assert body["provider"] == "mercadopago"
    assert body["upstream_status"] == 404


def test_create_pix_is_rate_limited(client, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_PIX_PER_MINUTE", "2")

    codes = [
        client.post("/functions/v1/create-pix-payment", json={}).status_code
        for _ in range(3)
    ]

    assert codes == [400, 400, 429]


def test_cancel_requires_admin(client, wired, user_headers):
    body = {"orderId": "123", "donationId": "don-1"}

    assert client.post("/functions/v1/cancel-mercadopago-order", json=body).status_code == 401
    resp = client.post(
        "/functions/v1/cancel-mercadopago-order", json=body, headers=user_headers
    )
    assert resp.status_code == 403
    assert wired.calls == []


def test_admin_cancel(client, wired, donations, admin_headers):
    created = client.post("/functions/v1/create-pix-payment", json=DONOR).get_json()

    resp = client.post(
        "/functions/v1/cancel-mercadopago-order",
        json={"orderId": created["payment_id"], "donationId": created["donation_id"]},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "status": "cancelled"}
    assert donations.rows["don-1"]["status"] == "cancelled"


def test_admin_resend_email(client, wired, admin_headers, monkeypatch):
    outbox = []
    monkeypatch.setattr(
        email_service, "send_email", lambda **kw: outbox.append(kw) or ("resend", "m-1")
    )
    monkeypatch.setenv("EMAIL_PROVIDER", "resend")

    resp = client.post(
        "/functions/v1/resend-donation-email",
        json={
            **DONOR,
            "qrCode": "00020126PIX123",
            "qrCodeBase64": "iVBORw0KGgo=",
            "createdAt": "2025-06-15T14:30:00Z",
        },
        headers=admin_headers,
    )

    assert resp.status_code == 200
    assert resp.get_json()["provider"] == "resend"
    assert outbox[0]["api_key"] == "re_test"


def test_cors_preflight(client):
    resp = client.options("/functions/v1/create-pix-payment")

    assert resp.status_code == 204
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert "content-type" in resp.headers["Access-Control-Allow-Headers"]
