"""API routes."""

from fastapi import APIRouter

from xgifts.routes import gifts

api_router = APIRouter()

# Gift endpoints (x402 metered)
api_router.include_router(gifts.router, prefix="/gifts", tags=["gifts"])
