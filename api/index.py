"""
cartkit - Main FastAPI Application

Single entry point for the cart endpoint.
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cartkit.routers import cart_router
from cartkit.routers.deps import shutdown_services


# ==================== FASTAPI APP ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    yield
    # Shutdown
    await shutdown_services()


app = FastAPI(
    title="cartkit",
    description="Form-driven cart actions backed by the Storefront API",
    version="1.0.0",
    lifespan=lifespan
)

# Storefront pages post forms with the cart cookie
_allowed_origins = [
    origin.strip()
    for origin in os.environ.get("CORS_ALLOW_ORIGINS", "").split(",")
    if origin.strip()
]
if _allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

app.include_router(cart_router)


# ==================== HEALTH CHECK ====================

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "cartkit"}
