from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_checkout_total = Counter(
    "ecomm_checkout_total",
    "Total checkouts processed",
    ["status"]  # Labels: 'success', 'empty_cart', 'payment_failed'
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds",
    "Checkout duration in seconds"
)

ecomm_payment_gateway_errors_total = Counter(
    "ecomm_payment_gateway_errors_total",
    "Payment gateway calls that did not produce a usable payment",
    ["reason"]  # Labels: 'transport', 'http_status', 'malformed', 'declined'
)

ecomm_auth_attempts_total = Counter(
    "ecomm_auth_attempts_total",
    "Authentication attempts",
    ["action", "status"]  # action: 'register', 'login', 'change_password'
)
