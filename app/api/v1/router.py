from fastapi import APIRouter

from app.api.v1.endpoints import health, id_cards, notifications, reference, title_deeds, uploads, valuation

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(title_deeds.router, prefix="/title-deeds", tags=["Title Deeds"])
api_router.include_router(id_cards.router, prefix="/id-cards", tags=["ID Cards"])
api_router.include_router(uploads.router, prefix="", tags=["Uploads"])
api_router.include_router(valuation.router, prefix="/property", tags=["Valuation"])
api_router.include_router(reference.router, prefix="/reference", tags=["Reference Data"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

__all__ = ["api_router"]
