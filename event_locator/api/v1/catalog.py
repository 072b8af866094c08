from typing import List

from fastapi import APIRouter, Depends, HTTPException

from event_locator.api.deps import get_catalog
from event_locator.exceptions import CatalogUnavailableError
from event_locator.schemas.location import CatalogSnapshot
from event_locator.services.catalog import GeoCatalog
from event_locator.logging_config import get_logger

router = APIRouter()
logger = get_logger("api.catalog")


@router.get("/", response_model=CatalogSnapshot)
async def read_catalog(catalog: GeoCatalog = Depends(get_catalog)):
    """
    Countries and their cities, for populating location pickers.
    """
    try:
        return await catalog.load()
    except CatalogUnavailableError as e:
        logger.error(f"Catalog unavailable: {str(e)}")
        raise HTTPException(status_code=503, detail="Location catalog unavailable")


@router.get("/{country}/cities", response_model=List[str])
async def read_country_cities(country: str, catalog: GeoCatalog = Depends(get_catalog)):
    """
    Cities of one catalogued country.
    """
    try:
        cities = await catalog.cities_for(country)
    except CatalogUnavailableError as e:
        logger.error(f"Catalog unavailable: {str(e)}")
        raise HTTPException(status_code=503, detail="Location catalog unavailable")
    if not cities:
        raise HTTPException(status_code=404, detail=f"Country not in catalog: {country}")
    return cities
