from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.dependencies import get_optional_user
from services.auth_service.models import User
from services.cart_service.service import CartService
from shared.config.database import get_db

from .schemas import CatalogResponse, ProductResponse
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=CatalogResponse)
async def list_products(
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    products = await ProductService.list_products(db)
    cart_count = await CartService.count_items(db, user.id) if user else 0
    return CatalogResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        cart_count=cart_count,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    return await ProductService.get_product(db, product_id)
