from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: Optional[str] = None
    quantity: int
    price: int

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: str
    total: int
    status: str
    payment_id: Optional[str]
    created_at: Optional[datetime]
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True
