from fastapi import APIRouter, Depends, HTTPException

from event_locator.api.deps import get_enrichment
from event_locator.services.enrichment import AddressEnrichmentService
from event_locator.logging_config import get_logger

router = APIRouter()
logger = get_logger("api.enrichment")


@router.post("/run")
async def run_enrichment(service: AddressEnrichmentService = Depends(get_enrichment)):
    """
    Run one address enrichment sweep now.

    Returns immediately with ``enriched: 0`` when a sweep is already running.
    """
    try:
        enriched = await service.run_once()
    except Exception as e:
        logger.error(f"Error running enrichment sweep: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"enriched": enriched}
