# pcb_quote/api/main.py

from fastapi import APIRouter
from .endpoints import quote

# Create main API router
api_router = APIRouter()

# Include PCB quotation endpoints with prefix
api_router.include_router(
    quote.router,
    prefix="/pcb",
    tags=["PCB Quotation"]
)
