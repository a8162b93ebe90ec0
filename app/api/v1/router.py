"""API V1 Router"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, users, bills, inventory

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(bills.router, prefix="/bills", tags=["Bills"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["Inventory"])
