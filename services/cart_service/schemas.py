from typing import List, Optional

from pydantic import BaseModel

from services.product_service.schemas import ProductResponse


class CartItemAdd(BaseModel):
    product_id: str
    # Missing, zero or negative quantities are treated as 1
    quantity: Optional[int] = 1


class CartLine(BaseModel):
    product: ProductResponse
    quantity: int
    line_total: int


class CartResponse(BaseModel):
    items: List[CartLine] = []
    total: int = 0
    cart_count: int = 0


class CartCountResponse(BaseModel):
    success: bool = True
    cart_count: int
