from fastapi import APIRouter
from app.api.v1.endpoints import health, weddings, guests, rsvp

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, tags=["health"])
api_router.include_router(weddings.router, prefix="/weddings", tags=["weddings"])
api_router.include_router(guests.router, prefix="/weddings/{wedding_id}/guests", tags=["guests"])
api_router.include_router(rsvp.router, prefix="/rsvp", tags=["rsvp"])
