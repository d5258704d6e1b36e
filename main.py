import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from shared.config import settings
from shared.config.database import AsyncSessionLocal, create_tables
from shared.observability import setup_observability
from shared.security import limiter, wants_html

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models  # noqa: F401
from services.session_service import models as session_models  # noqa: F401
from services.product_service import models as product_models  # noqa: F401
from services.cart_service import models as cart_models  # noqa: F401
from services.order_service import models as order_models  # noqa: F401

from services.auth_service.dependencies import NotAuthenticatedError
from services.auth_service.router import router as auth_router
from services.product_service.router import router as product_router
from services.product_service.seed import seed_products
from services.cart_service.router import router as cart_router
from services.checkout_service.router import router as checkout_router
from services.order_service.router import router as order_router
from services.session_service.service import TokenService

logger = structlog.get_logger(__name__)

app = FastAPI(
    title="TechStore",
    version="1.0.0",
    description="Storefront API: catalog, cart, checkout with Square, JWT auth.",
)

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, "techstore")

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    logger.info("auth_rejected", path=request.url.path, reason=exc.reason)
    if wants_html(request):
        return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": exc.detail, "reason": exc.reason},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("storage_error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(auth_router)
app.include_router(product_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(order_router)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "techstore", "status": "running"}


@app.on_event("startup")
async def startup_event():
    # Any failure here (e.g. database unreachable) aborts startup
    await create_tables()
    async with AsyncSessionLocal() as db:
        await TokenService.purge_expired(db)
        if settings.SEED_PRODUCTS:
            await seed_products(db)
    logger.info("startup_complete")


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
