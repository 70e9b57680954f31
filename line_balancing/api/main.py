from fastapi import APIRouter

from line_balancing.api.routes import balancing, health

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(balancing.router)
