"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from pantry.api.v1.endpoints import auth, health, items, orders, users

api_router = APIRouter()

# Login / logout / me
api_router.include_router(auth.router)

# Admin-managed resources
api_router.include_router(users.router)
api_router.include_router(items.router)

# Order lifecycle
api_router.include_router(orders.router)

api_router.include_router(health.router)
