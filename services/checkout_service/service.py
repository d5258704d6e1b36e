import uuid
from typing import Optional

import structlog
from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from services.cart_service.repository import CartRepository
from services.cart_service.service import CartService, build_cart_response, cart_total
from services.order_service.service import OrderService
from shared.config import settings
from shared.observability import ecomm_checkout_duration_seconds, ecomm_checkout_total

from .gateway import PaymentGateway, PaymentGatewayError
from .schemas import CheckoutSummary, PaymentRequest, PaymentResponse

logger = structlog.get_logger(__name__)


def _empty_cart() -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty")


def make_idempotency_key(user_id: str, checkout_id: Optional[str] = None) -> str:
    """
    Same user + same checkout id always yields the same key, so a client
    retrying one logical attempt cannot be charged twice. Without a
    checkout id every call gets a fresh key.
    """
    if checkout_id:
        return str(uuid.uuid5(uuid.NAMESPACE_URL, f"techstore:checkout:{user_id}:{checkout_id}"))
    return str(uuid.uuid4())


class CheckoutService:

    @staticmethod
    async def summary(db: AsyncSession, user_id: str) -> CheckoutSummary:
        items = await CartService.get_items(db, user_id)
        if not items:
            raise _empty_cart()

        cart = build_cart_response(items)
        return CheckoutSummary(
            items=cart.items,
            total=cart.total,
            currency=settings.PAYMENT_CURRENCY,
            application_id=settings.SQUARE_APPLICATION_ID,
            location_id=settings.SQUARE_LOCATION_ID,
        )

    @staticmethod
    async def process_payment(
        db: AsyncSession,
        user_id: str,
        data: PaymentRequest,
        gateway: PaymentGateway,
    ) -> PaymentResponse:
        """
        Load cart -> price -> charge -> commit order and clear cart.

        A failed charge leaves the cart untouched and creates nothing. The
        order, its items and the cart deletion share one transaction.
        """
        with ecomm_checkout_duration_seconds.time():
            # 1. Load
            items = await CartService.get_items(db, user_id)
            if not items:
                ecomm_checkout_total.labels(status="empty_cart").inc()
                raise _empty_cart()

            # 2. Price
            total = cart_total(items)

            # 3. Charge
            idempotency_key = make_idempotency_key(user_id, data.checkout_id)
            try:
                payment = await gateway.create_payment(
                    source_id=data.source_id,
                    amount=total,
                    idempotency_key=idempotency_key,
                    buyer_email=data.email,
                    buyer_name=data.name,
                )
            except PaymentGatewayError as exc:
                ecomm_checkout_total.labels(status="payment_failed").inc()
                logger.warning("checkout_payment_failed", user_id=user_id, total=total, reason=exc.reason)
                raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail="Payment failed")

            # 4. Commit
            try:
                order = await OrderService.stage_order_from_cart(
                    db, user_id, items, total, payment.payment_id
                )
                await CartRepository.delete_for_user(db, user_id)
                await db.commit()
            except SQLAlchemyError:
                await db.rollback()
                # The card has been charged; this needs manual reconciliation
                logger.critical(
                    "order_commit_failed",
                    user_id=user_id,
                    payment_id=payment.payment_id,
                    total=total,
                    exc_info=True,
                )
                ecomm_checkout_total.labels(status="commit_failed").inc()
                raise

        ecomm_checkout_total.labels(status="success").inc()
        logger.info(
            "checkout_completed",
            user_id=user_id,
            order_id=order.id,
            payment_id=payment.payment_id,
            total=total,
            lines=len(items),
        )

        # 5. Respond
        return PaymentResponse(order_id=order.id, payment_id=payment.payment_id)
