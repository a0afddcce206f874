"""
Service-center search API endpoints.

Registered centers are merged with nearby Google Places results.
Business logic is delegated to service classes.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import settings
from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import BadRequestException, CustomException
from ...schemas.service_center import ReconciledResult
from ...services.matcher import MatchThresholds, ServiceCenterMatcher
from ...services.places_service import GooglePlacesClient
from ...services.service_center_service import ServiceCenterService
from ..dependencies import get_places_client

router = APIRouter(prefix="/api/service-centers", tags=["service-centers"])

logger = logging.getLogger(__name__)

PROVIDER_ERROR_HEADER = "X-Places-Provider-Error"


def get_matcher() -> ServiceCenterMatcher:
    """Dependency for the configured ServiceCenterMatcher."""
    return ServiceCenterMatcher(
        mode=settings.MATCH_MODE,
        thresholds=MatchThresholds(
            name=settings.NAME_SIMILARITY_THRESHOLD,
            address=settings.ADDRESS_SIMILARITY_THRESHOLD,
            proximity_km=settings.PROXIMITY_THRESHOLD_KM,
        ),
    )


async def get_service_center_service(
    db: Annotated[AsyncSession, Depends(async_get_db)],
    places_client: Annotated[GooglePlacesClient, Depends(get_places_client)],
    matcher: Annotated[ServiceCenterMatcher, Depends(get_matcher)],
) -> ServiceCenterService:
    """Dependency for ServiceCenterService."""
    return ServiceCenterService(db, places_client, matcher)


@router.get("/nearby", response_model=list[ReconciledResult])
async def get_nearby_service_centers(
    response: Response,
    service: Annotated[ServiceCenterService, Depends(get_service_center_service)],
    lat: float | None = None,
    lng: float | None = None,
    search_query: Annotated[str | None, Query(alias="searchQuery")] = None,
    filter_registered: Annotated[str | None, Query(alias="filterRegistered")] = None,
    radius: int = 10000,
    max_results: Annotated[int, Query(alias="maxResults", gt=0)] = 60,
) -> list[ReconciledResult]:
    """
    Find service centers near a point.

    Registered centers come first, each group sorted by distance. When the
    place search fails the registered centers are still returned and the
    provider status is reported in the ``X-Places-Provider-Error`` header.
    """
    if lat is None or lng is None:
        raise BadRequestException("Latitude and longitude are required")

    try:
        outcome = await service.search_nearby(
            lat=lat,
            lng=lng,
            search_query=search_query,
            filter_registered=filter_registered == "true",
            radius=radius,
            max_results=max_results,
        )
    except Exception as e:
        logger.exception("Nearby service-center search failed")
        raise CustomException(status_code=500, detail="Internal server error") from e

    if outcome.provider_error:
        response.headers[PROVIDER_ERROR_HEADER] = outcome.provider_error
    return outcome.results
