"""
Square Payments API client.

Only the single "create payment" call is needed: the card is tokenised in
the browser by Square's Web Payments SDK and we receive a `source_id` for
it. Every failure mode (network, non-2xx, unexpected body, declined
payment) surfaces as PaymentGatewayError so the checkout flow has exactly
one thing to handle.
"""
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from shared.config import settings
from shared.observability import ecomm_payment_gateway_errors_total

logger = structlog.get_logger(__name__)

PRODUCTION_URL = "https://connect.squareup.com/v2/payments"
SANDBOX_URL = "https://connect.squareupsandbox.com/v2/payments"
SQUARE_VERSION = "2024-12-18"

FAILED_STATUSES = {"FAILED", "CANCELED"}


class PaymentGatewayError(Exception):
    def __init__(self, message: str, reason: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code


@dataclass
class PaymentResult:
    payment_id: str
    status: str


class PaymentGateway:
    def __init__(
        self,
        access_token: str,
        location_id: str,
        environment: str = "sandbox",
        currency: str = "USD",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.location_id = location_id
        self.environment = environment
        self.currency = currency
        self.timeout = timeout
        # Injected in tests to stand in for Square
        self._transport = transport

    @property
    def url(self) -> str:
        return SANDBOX_URL if self.environment == "sandbox" else PRODUCTION_URL

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Square-Version": SQUARE_VERSION,
            "Content-Type": "application/json",
        }

    def build_payload(
        self,
        source_id: str,
        amount: int,
        idempotency_key: str,
        buyer_email: Optional[str] = None,
        buyer_name: Optional[str] = None,
    ) -> dict:
        payload = {
            "source_id": source_id,
            "idempotency_key": idempotency_key,
            "amount_money": {"amount": amount, "currency": self.currency},
            "location_id": self.location_id,
        }
        if buyer_email:
            payload["buyer_email_address"] = buyer_email
        if buyer_name:
            payload["note"] = f"Order for {buyer_name}"
        return payload

    def _fail(self, message: str, reason: str, status_code: Optional[int] = None, **context):
        ecomm_payment_gateway_errors_total.labels(reason=reason).inc()
        logger.error("payment_gateway_error", reason=reason, status_code=status_code, detail=message, **context)
        return PaymentGatewayError(message, reason=reason, status_code=status_code)

    async def create_payment(
        self,
        source_id: str,
        amount: int,
        idempotency_key: str,
        buyer_email: Optional[str] = None,
        buyer_name: Optional[str] = None,
    ) -> PaymentResult:
        payload = self.build_payload(source_id, amount, idempotency_key, buyer_email, buyer_name)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise self._fail(f"{type(exc).__name__}: {exc}", reason="transport", idempotency_key=idempotency_key)

        if not resp.is_success:
            raise self._fail(
                resp.text[:1000],
                reason="http_status",
                status_code=resp.status_code,
                idempotency_key=idempotency_key,
            )

        try:
            body = resp.json()
        except ValueError:
            raise self._fail("Response body is not JSON", reason="malformed", status_code=resp.status_code)

        payment = body.get("payment") if isinstance(body, dict) else None
        if not isinstance(payment, dict) or not payment.get("id"):
            raise self._fail("Response has no payment id", reason="malformed", status_code=resp.status_code)

        payment_status = str(payment.get("status", "")).upper()
        if payment_status in FAILED_STATUSES:
            raise self._fail(
                f"Payment {payment['id']} is {payment_status}",
                reason="declined",
                status_code=resp.status_code,
            )

        logger.info("payment_created", payment_id=payment["id"], status=payment_status, amount=amount)
        return PaymentResult(payment_id=payment["id"], status=payment_status)


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency; overridden in tests."""
    return PaymentGateway(
        access_token=settings.SQUARE_ACCESS_TOKEN,
        location_id=settings.SQUARE_LOCATION_ID,
        environment=settings.SQUARE_ENVIRONMENT,
        currency=settings.PAYMENT_CURRENCY,
        timeout=settings.PAYMENT_TIMEOUT_SECONDS,
    )
