from typing import List

from pydantic import BaseModel


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str
    price: int
    image_url: str

    class Config:
        from_attributes = True


class CatalogResponse(BaseModel):
    products: List[ProductResponse]
    cart_count: int = 0
