from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Order, OrderItem
from .repository import OrderRepository


class OrderService:
    @staticmethod
    async def stage_order_from_cart(
        db: AsyncSession, user_id: str, cart_items, total: int, payment_id: str
    ) -> Order:
        """
        Builds a completed order from the cart lines. Each item keeps a copy
        of the product's price as it is right now, not a live reference.
        Nothing is committed here.
        """
        order = Order(
            user_id=user_id,
            total=total,
            status="completed",
            payment_id=payment_id,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    product=item.product,
                    quantity=item.quantity,
                    price=item.product.price,
                )
                for item in cart_items
            ],
        )
        return await OrderRepository.add_order(db, order)

    @staticmethod
    async def get_order(db: AsyncSession, order_id: str, user_id: str) -> Order:
        order = await OrderRepository.get_order_for_user(db, order_id, user_id)
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        return order

    @staticmethod
    async def list_orders(db: AsyncSession, user_id: str):
        return await OrderRepository.list_orders_for_user(db, user_id)
