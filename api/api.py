from fastapi import APIRouter
from .endpoints.auth import router as auth_router
from .endpoints.user import router as user_router
from .endpoints.orders import router as orders_router
from .endpoints.health import router as health_router

router = APIRouter(prefix="/api")
router.include_router(health_router, tags=["Health"])
router.include_router(auth_router, prefix="/auth", tags=["Auth"])
router.include_router(user_router, prefix="/users", tags=["User"])
router.include_router(orders_router, tags=["Orders"])
