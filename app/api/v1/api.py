from fastapi import APIRouter

from app.api.v1.endpoints import custom_domains

api_router = APIRouter()
api_router.include_router(custom_domains.router, prefix="/dominio", tags=["dominio"])
