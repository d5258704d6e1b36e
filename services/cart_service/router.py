from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.dependencies import get_current_user
from services.auth_service.models import User
from shared.config.database import get_db

from .schemas import CartCountResponse, CartItemAdd, CartResponse
from .service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartResponse)
async def view_cart(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await CartService.view_cart(db, user.id)


@router.post("/items", response_model=CartCountResponse)
async def add_item(
    item: CartItemAdd,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    cart_count = await CartService.add_item(db, user.id, item)
    return CartCountResponse(cart_count=cart_count)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_item(
    product_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await CartService.remove_item(db, user.id, product_id)
