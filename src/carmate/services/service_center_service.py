"""Service-center search: registered centers merged with Google Places results."""

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.service_center import ServiceCenter
from ..schemas.service_center import ReconciledResult, RegisteredCenterRead
from .base import BaseService
from .matcher import ServiceCenterMatcher
from .places_service import GooglePlacesClient, GooglePlacesError


@dataclass
class SearchOutcome:
    """Reconciled results plus the place-search error status, if the provider failed."""

    results: list[ReconciledResult] = field(default_factory=list)
    provider_error: str | None = None


class ServiceCenterService(BaseService):
    """
    Service for nearby service-center lookups.

    Registered centers come from the database and are mandatory: a failure
    loading them propagates. Place-search failures degrade to an empty
    candidate list and are reported through ``SearchOutcome.provider_error``.
    """

    def __init__(
        self,
        db: AsyncSession,
        places_client: GooglePlacesClient,
        matcher: ServiceCenterMatcher,
    ) -> None:
        super().__init__(db)
        self._places = places_client
        self._matcher = matcher

    async def list_registered_centers(self) -> list[RegisteredCenterRead]:
        """Load every registered service center."""
        result = await self.db.execute(select(ServiceCenter))
        centers = [RegisteredCenterRead.model_validate(row) for row in result.scalars().all()]
        self.logger.info("Found %d registered centers in database", len(centers))
        return centers

    async def search_nearby(
        self,
        lat: float,
        lng: float,
        search_query: str | None = None,
        filter_registered: bool = False,
        radius: int = 10000,
        max_results: int = 60,
    ) -> SearchOutcome:
        """
        Search service centers around a point.

        Args:
            lat: Latitude of the query point.
            lng: Longitude of the query point.
            search_query: Optional free text; switches the place search to text search.
            filter_registered: Only return registered centers.
            radius: Search radius in meters.
            max_results: Upper bound on place-search results.

        Returns:
            SearchOutcome with the sorted results and the provider error status, if any.
        """
        self.logger.info("Searching near lat: %s, lng: %s, radius: %sm", lat, lng, radius)
        registered = await self.list_registered_centers()

        provider_error = None
        try:
            search = await self._places.search_service_centers(
                lat,
                lng,
                radius=radius,
                search_query=search_query,
                max_results=max_results,
            )
            candidates = search.places
            provider_error = search.error_status
        except GooglePlacesError as e:
            self.logger.error("Google Places search failed (%s): %s", e.status, e)
            candidates = []
            provider_error = e.status

        results = self._matcher.reconcile(registered, candidates, lat, lng, filter_registered)
        self.logger.info("Returning %d total results", len(results))
        return SearchOutcome(results=results, provider_error=provider_error)
