"""Main API router."""

from fastapi import APIRouter

from api.v1 import health, users

# Main API router, mounted under settings.API_PREFIX
api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(users.router, tags=["users"])
