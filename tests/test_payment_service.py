from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.errors import ConfigurationError, PersistenceWarning, UpstreamError, ValidationError
from app.services.payment_service import (
    DEFAULT_DESCRIPTION,
    cancel_payment,
    create_pix_payment,
    fetch_payment_status,
    reconcile_pending_donations,
)
from app.services.secret_service import SecretStore


def donor(**overrides):
    body = {
        "name": "Ana Silva",
        "email": "ana@example.com",
        "phone": "11999999999",
        "steamId": "76561198000000000",
        "amount": 50.00,
    }
    body.update(overrides)
    return body


def test_create_without_coupon_charges_full_amount(gateway, secrets, donations, coupons):
    result = create_pix_payment(donor(), secrets=secrets, gateway=gateway)

    assert result["payment_id"] == "123"
    assert result["status"] == "pending"
    assert result["amount"] == Decimal("50.00")
    assert result["original_amount"] == Decimal("50.00")
    assert result["discount"] is None
    assert result["qr_code"] == "00020126PIX123"
    assert result["donation_id"] == "don-1"

    row = donations.rows["don-1"]
    assert row["payment_id"] == "123"
    assert row["status"] == "pending"
    assert row["amount"] == Decimal("50.00")
    assert row["phone"] == "(11) 99999-9999"
    assert row["description"] == DEFAULT_DESCRIPTION
    assert row["discount_coupon"] is None


def test_create_builds_gateway_payload(gateway, secrets, donations, coupons):
    create_pix_payment(donor(name="Ana Maria Silva"), secrets=secrets, gateway=gateway)

    op, payload, key = gateway.calls[0]
    assert op == "create"
    assert payload["payment_method_id"] == "pix"
    assert payload["transaction_amount"] == 50.0
    assert payload["payer"]["first_name"] == "Ana"
    assert payload["payer"]["last_name"] == "Maria Silva"
    assert payload["payer"]["identification"] == {
        "type": "other",
        "number": "76561198000000000",
    }
    assert payload["additional_info"]["payer"]["phone"] == {
        "area_code": "11",
        "number": "999999999",
    }
    assert payload["metadata"]["steam_id"] == "76561198000000000"
    # epoch-millis prefix plus uuid
    assert key.split("-", 1)[0].isdigit()


def test_each_create_uses_a_new_idempotency_key(gateway, secrets, donations, coupons):
    create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    assert gateway.calls[0][2] != gateway.calls[1][2]


def test_streamer_percentage_coupon(gateway, secrets, donations, coupons):
    coupons.add_streamer("STREAMERX", porcentagem=Decimal("20"))

    result = create_pix_payment(
        donor(amount=100, discountCoupon="streamerx"), secrets=secrets, gateway=gateway
    )

    assert result["amount"] == Decimal("80.00")
    assert result["original_amount"] == Decimal("100.00")
    assert result["discount"]["kind"] == "streamer"
    assert result["discount"]["code"] == "STREAMERX"
    payload = gateway.calls[0][1]
    assert payload["transaction_amount"] == 80.0
    assert payload["metadata"]["coupon_code"] == "STREAMERX"
    assert payload["metadata"]["streamer_id"] == "str-1"
    assert donations.rows["don-1"]["discount_coupon"] == "STREAMERX"


def test_coupon_below_minimum_is_rejected_before_gateway(gateway, donations, coupons):
    coupons.add_global("BEMVINDO10", Decimal("10"))
    secrets = SecretStore(
        {"MERCADO_PAGO_ACCESS_TOKEN": "TEST-123", "COUPON_MIN_AMOUNT": "10.00"}
    )

    with pytest.raises(ValidationError) as exc:
        create_pix_payment(
            donor(amount=5, discountCoupon="BEMVINDO10"), secrets=secrets, gateway=gateway
        )

    assert exc.value.code == "coupon_minimum_not_met"
    assert gateway.calls == []
    assert donations.rows == {}


def test_unknown_coupon_is_ignored(gateway, secrets, donations, coupons):
    result = create_pix_payment(
        donor(discountCoupon="NOPE"), secrets=secrets, gateway=gateway
    )
    assert result["amount"] == Decimal("50.00")
    assert result["discount"] is None


def test_fixed_coupon_larger_than_amount_is_rejected(gateway, secrets, donations, coupons):
    coupons.add_streamer("TUDO", valor=Decimal("80"))

    with pytest.raises(ValidationError) as exc:
        create_pix_payment(
            donor(amount=50, discountCoupon="TUDO"), secrets=secrets, gateway=gateway
        )

    assert exc.value.code == "amount_not_positive"
    assert gateway.calls == []


def test_markup_is_applied_after_discount(gateway, donations, coupons):
    coupons.add_global("DEZ", Decimal("10"))
    secrets = SecretStore(
        {"MERCADO_PAGO_ACCESS_TOKEN": "TEST-123", "PIX_MARKUP_PERCENT": "1,5"}
    )

    result = create_pix_payment(
        donor(amount=100, discountCoupon="DEZ"), secrets=secrets, gateway=gateway
    )

    # 100 - 10% = 90, + 1.5% = 91.35
    assert result["amount"] == Decimal("91.35")
    assert result["original_amount"] == Decimal("100.00")


def test_package_name_fills_description(gateway, secrets, donations, coupons):
    create_pix_payment(donor(packageName="VIP Ouro"), secrets=secrets, gateway=gateway)
    assert gateway.calls[0][1]["description"] == "Pacote VIP: VIP Ouro"
    assert gateway.calls[0][1]["metadata"]["package"] == "VIP Ouro"


def test_brazilian_amount_string_is_accepted(gateway, secrets, donations, coupons):
    result = create_pix_payment(donor(amount="1.234,56"), secrets=secrets, gateway=gateway)
    assert result["amount"] == Decimal("1234.56")


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": ""},
        {"email": "not-an-email"},
        {"phone": "123"},
        {"amount": 0},
        {"amount": -10},
        {"amount": "abc"},
        {"amount": 100001},
        {"name": "x" * 121},
    ],
)
def test_invalid_input_never_reaches_gateway(gateway, secrets, donations, coupons, overrides):
    with pytest.raises(ValidationError):
        create_pix_payment(donor(**overrides), secrets=secrets, gateway=gateway)
    assert gateway.calls == []


def test_missing_access_token_is_configuration_error(donations, coupons):
    with pytest.raises(ConfigurationError):
        create_pix_payment(donor(), secrets=SecretStore({}))


def test_gateway_failure_writes_nothing(gateway, secrets, donations, coupons):
    gateway.fail_ops.add("create")
    with pytest.raises(UpstreamError):
        create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    assert donations.rows == {}


def test_persistence_failure_still_returns_charge(gateway, secrets, donations, coupons):
    donations.fail_insert = True

    with pytest.warns(PersistenceWarning):
        result = create_pix_payment(donor(), secrets=secrets, gateway=gateway)

    assert result["payment_id"] == "123"
    assert result["qr_code"] == "00020126PIX123"
    assert result["donation_id"] is None


def test_fetch_updates_settled_status_and_is_idempotent(gateway, secrets, donations, coupons):
    created = create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    gateway.settle(created["payment_id"], "approved")

    first = fetch_payment_status(created["payment_id"], created["donation_id"], gateway=gateway)
    second = fetch_payment_status(created["payment_id"], created["donation_id"], gateway=gateway)

    assert first["status"] == second["status"] == "approved"
    assert donations.rows["don-1"]["status"] == "approved"


def test_fetch_leaves_pending_row_alone(gateway, secrets, donations, coupons, recwarn):
    created = create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    donations.fail_update = True

    payment = fetch_payment_status(created["payment_id"], created["donation_id"], gateway=gateway)

    assert payment["status"] == "pending"
    assert donations.rows["don-1"]["status"] == "pending"
    assert not [w for w in recwarn if issubclass(w.category, PersistenceWarning)]


def test_fetch_without_donation_id_only_reads(gateway, secrets, donations, coupons):
    created = create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    gateway.settle(created["payment_id"], "approved")

    fetch_payment_status(created["payment_id"], gateway=gateway)

    assert donations.rows["don-1"]["status"] == "pending"


def test_fetch_requires_order_id(gateway):
    with pytest.raises(ValidationError):
        fetch_payment_status(None, gateway=gateway)


def test_cancel_sets_status_after_gateway_success(gateway, secrets, donations, coupons):
    created = create_pix_payment(donor(), secrets=secrets, gateway=gateway)

    result = cancel_payment(created["payment_id"], created["donation_id"], gateway=gateway)

    assert result == {"success": True, "status": "cancelled"}
    assert donations.rows["don-1"]["status"] == "cancelled"
    assert gateway.payments["123"]["status"] == "cancelled"


def test_cancel_gateway_failure_leaves_row_untouched(gateway, secrets, donations, coupons):
    created = create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    gateway.fail_ops.add("cancel")

    with pytest.raises(UpstreamError):
        cancel_payment(created["payment_id"], created["donation_id"], gateway=gateway)

    assert donations.rows["don-1"]["status"] == "pending"


def test_cancel_local_write_failure_is_only_logged(gateway, secrets, donations, coupons):
    created = create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    donations.fail_update = True

    with pytest.warns(PersistenceWarning):
        result = cancel_payment(created["payment_id"], created["donation_id"], gateway=gateway)

    assert result["success"] is True


def test_cancel_requires_both_ids(gateway):
    with pytest.raises(ValidationError):
        cancel_payment("123", None, gateway=gateway)
    assert gateway.calls == []


def test_sweep_counts_and_survives_failures(gateway, secrets, donations, coupons):
    for _ in range(3):
        create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    gateway.settle("123", "approved")
    gateway.fail_ids.add("124")

    result = reconcile_pending_donations(gateway=gateway)

    assert result == {"checked": 3, "updated": 1, "failed": 1}
    assert donations.rows["don-1"]["status"] == "approved"
    assert donations.rows["don-2"]["status"] == "pending"
    assert donations.rows["don-3"]["status"] == "pending"


def test_sweep_does_not_count_unsaved_status_as_updated(gateway, secrets, donations, coupons):
    create_pix_payment(donor(), secrets=secrets, gateway=gateway)
    gateway.settle("123", "approved")
    donations.fail_update = True

    with pytest.warns(PersistenceWarning):
        result = reconcile_pending_donations(gateway=gateway)

    assert result == {"checked": 1, "updated": 0, "failed": 1}
    assert donations.rows["don-1"]["status"] == "pending"


def test_sweep_with_nothing_pending_skips_credentials(donations):
    assert reconcile_pending_donations() == {"checked": 0, "updated": 0, "failed": 0}


def test_expired_streamer_coupon_falls_through_to_global(gateway, secrets, donations, coupons):
    past = datetime.now(timezone.utc) - timedelta(days=30)
    coupons.add_streamer(
        "PROMO", porcentagem=Decimal("50"), data_inicio=past, data_fim=past + timedelta(days=1)
    )
    coupons.add_global("PROMO", Decimal("10"))

    result = create_pix_payment(
        donor(amount=100, discountCoupon="PROMO"), secrets=secrets, gateway=gateway
    )

    assert result["amount"] == Decimal("90.00")
    assert result["discount"]["kind"] == "global"
