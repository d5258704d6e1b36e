import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.schemas import ProductResponse
from services.product_service.service import ProductService

from .repository import CartRepository
from .schemas import CartItemAdd, CartLine, CartResponse

logger = structlog.get_logger(__name__)


def cart_total(items) -> int:
    """Sum of price * quantity in minor currency units."""
    return sum(item.product.price * item.quantity for item in items)


def build_cart_response(items) -> CartResponse:
    lines = [
        CartLine(
            product=ProductResponse.model_validate(item.product),
            quantity=item.quantity,
            line_total=item.product.price * item.quantity,
        )
        for item in items
    ]
    return CartResponse(items=lines, total=cart_total(items), cart_count=len(lines))


class CartService:
    @staticmethod
    async def get_items(db: AsyncSession, user_id: str):
        return await CartRepository.list_items(db, user_id)

    @staticmethod
    async def view_cart(db: AsyncSession, user_id: str) -> CartResponse:
        items = await CartRepository.list_items(db, user_id)
        return build_cart_response(items)

    @staticmethod
    async def count_items(db: AsyncSession, user_id: str) -> int:
        return await CartRepository.count_items(db, user_id)

    @staticmethod
    async def add_item(db: AsyncSession, user_id: str, data: CartItemAdd) -> int:
        quantity = data.quantity if data.quantity and data.quantity > 0 else 1

        # 404s on unknown products
        product = await ProductService.get_product(db, data.product_id)
        product_id = product.id

        await CartRepository.add_item(db, user_id, product_id, quantity)
        logger.info("cart_item_added", user_id=user_id, product_id=product_id, quantity=quantity)

        return await CartRepository.count_items(db, user_id)

    @staticmethod
    async def remove_item(db: AsyncSession, user_id: str, product_id: str) -> CartResponse:
        removed = await CartRepository.remove_item(db, user_id, product_id)
        if removed:
            logger.info("cart_item_removed", user_id=user_id, product_id=product_id)
        return await CartService.view_cart(db, user_id)
