from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .repository import ProductRepository


class ProductService:

    @staticmethod
    async def list_products(db: AsyncSession):
        return await ProductRepository.get_all_products(db)

    @staticmethod
    async def get_product(db: AsyncSession, product_id: str):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return product
