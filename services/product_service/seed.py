import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product
from .repository import ProductRepository

logger = structlog.get_logger(__name__)

CATALOG = [
    {
        "id": "1",
        "name": "Premium Headphones",
        "description": "High-quality wireless headphones with noise cancellation",
        "price": 29900,
        "image_url": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=400",
    },
    {
        "id": "2",
        "name": "Smart Watch",
        "description": "Fitness tracking smartwatch with heart rate monitor",
        "price": 19900,
        "image_url": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=400",
    },
    {
        "id": "3",
        "name": "Laptop Stand",
        "description": "Ergonomic aluminum laptop stand for better posture",
        "price": 4900,
        "image_url": "https://images.unsplash.com/photo-1527864550417-7fd91fc51a46?w=400",
    },
    {
        "id": "4",
        "name": "Mechanical Keyboard",
        "description": "RGB mechanical keyboard with Cherry MX switches",
        "price": 12900,
        "image_url": "https://images.unsplash.com/photo-1511467687858-23d96c32e4ae?w=400",
    },
]


async def seed_products(db: AsyncSession) -> int:
    """Inserts the starter catalog into an empty products table."""
    if await ProductRepository.count(db) > 0:
        logger.info("products_already_seeded")
        return 0

    products = [Product(**entry) for entry in CATALOG]
    await ProductRepository.create_products(db, products)
    logger.info("products_seeded", count=len(products))
    return len(products)
