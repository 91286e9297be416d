"""HTTP routers."""

from fastapi import APIRouter

from . import auth, coupons, health, profile, recipients, transactions, transfers


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(profile.router, tags=["profile"])
    router.include_router(recipients.router, prefix="/recipients", tags=["recipients"])
    router.include_router(transfers.router, prefix="/transfers", tags=["transfers"])
    router.include_router(coupons.router, prefix="/coupons", tags=["coupons"])
    router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
    router.include_router(health.router, tags=["health"])
    return router


__all__ = [
    "create_api_router",
]
