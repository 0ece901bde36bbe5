"""
FastAPI Routers Package

All routers are included by api/index.py.
"""

from cartkit.routers.cart import router as cart_router

__all__ = [
    "cart_router",
]
