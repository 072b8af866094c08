from fastapi import APIRouter

from event_locator.api.v1 import catalog, enrichment, events

# Initialize API router
api_router = APIRouter()

# Include routers from different modules
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["Catalog"])
api_router.include_router(enrichment.router, prefix="/enrichment", tags=["Enrichment"])
