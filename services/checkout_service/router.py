from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.dependencies import get_current_user
from services.auth_service.models import User
from shared.config import settings
from shared.config.database import get_db
from shared.security import limiter

from .gateway import PaymentGateway, get_payment_gateway
from .schemas import CheckoutSummary, PaymentRequest, PaymentResponse
from .service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.get("", response_model=CheckoutSummary)
async def checkout_summary(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await CheckoutService.summary(db, user.id)


@router.post("/payment", response_model=PaymentResponse)
@limiter.limit(settings.CHECKOUT_RATE_LIMIT)
async def process_payment(
    request: Request,
    payload: PaymentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    return await CheckoutService.process_payment(db, user.id, payload, gateway)
