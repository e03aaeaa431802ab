from fastapi import APIRouter
from print_erp.api.v1 import auth, inventory, procurement

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["Inventory"])
api_router.include_router(procurement.router, prefix="/procurement", tags=["Procurement"])
