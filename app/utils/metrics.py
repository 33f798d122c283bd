from prometheus_client import Counter

PIX_PAYMENTS_CREATED = Counter(
    "pix_payments_created_total",
    "PIX charges created at the gateway",
    ["coupon_kind"],
)
GATEWAY_ERRORS = Counter(
    "payment_gateway_errors_total",
    "Failed calls to the payment gateway",
    ["operation"],
)
DONATION_STATUS_UPDATES = Counter(
    "donation_status_updates_total",
    "Donation status overwrites coming from the gateway",
    ["status"],
)
PERSIST_FAILURES = Counter(
    "donation_persist_failures_total",
    "Local writes that failed after the gateway call succeeded",
    ["operation"],
)
EMAILS_SENT = Counter(
    "donation_emails_sent_total",
    "Donation detail e-mails handed to the provider",
    ["provider"],
)
