from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from services.cart_service.schemas import CartLine


class PaymentRequest(BaseModel):
    """
    Field names are snake_case like every other body in the API. The Square
    Web Payments client posts camelCase, which is accepted as well.
    """

    # Card nonce produced by the Square Web Payments SDK
    source_id: str = Field(validation_alias=AliasChoices("source_id", "sourceId"), min_length=1)
    email: Optional[str] = None
    name: Optional[str] = None
    # Stable id for one logical checkout attempt, reused by the client on retry
    checkout_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("checkout_id", "checkoutId"),
        max_length=255,
    )


class PaymentResponse(BaseModel):
    success: bool = True
    order_id: str
    payment_id: str


class CheckoutSummary(BaseModel):
    items: List[CartLine]
    total: int
    currency: str
    application_id: str
    location_id: str
