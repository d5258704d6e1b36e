from .setup import setup_observability
from .metrics import (
    ecomm_checkout_total,
    ecomm_checkout_duration_seconds,
    ecomm_payment_gateway_errors_total,
    ecomm_auth_attempts_total,
)
