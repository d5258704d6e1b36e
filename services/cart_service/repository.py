from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import CartItem


class CartRepository:
    @staticmethod
    async def get_line(db: AsyncSession, user_id: str, product_id: str):
        result = await db.execute(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .where(CartItem.product_id == product_id)
        )
        return result.scalars().first()

    @staticmethod
    async def add_item(db: AsyncSession, user_id: str, product_id: str, quantity: int) -> None:
        """Increments the existing line for this product or inserts a new one."""
        existing_item = await CartRepository.get_line(db, user_id, product_id)
        if existing_item:
            existing_item.quantity += quantity
            await db.commit()
            return

        db.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
        try:
            await db.commit()
        except IntegrityError:
            # A concurrent add inserted the same line first
            await db.rollback()
            existing_item = await CartRepository.get_line(db, user_id, product_id)
            if existing_item is None:
                raise
            existing_item.quantity += quantity
            await db.commit()

    @staticmethod
    async def list_items(db: AsyncSession, user_id: str):
        result = await db.execute(
            select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.id)
        )
        return result.scalars().all()

    @staticmethod
    async def count_items(db: AsyncSession, user_id: str) -> int:
        result = await db.execute(
            select(func.count()).select_from(CartItem).where(CartItem.user_id == user_id)
        )
        return result.scalar_one()

    @staticmethod
    async def remove_item(db: AsyncSession, user_id: str, product_id: str) -> int:
        stmt = delete(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id,
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount

    @staticmethod
    async def delete_for_user(db: AsyncSession, user_id: str) -> None:
        """Queues deletion of the whole cart. The caller owns the commit."""
        await db.execute(delete(CartItem).where(CartItem.user_id == user_id))
