"""Async client for the Google Places web service (nearby and text search)."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..schemas.service_center import Coordinates, LocationRecord

PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
NEARBY_SEARCH_PATH = "/nearbysearch/json"
TEXT_SEARCH_PATH = "/textsearch/json"

SERVICE_KEYWORDS = "car service OR auto repair OR vehicle maintenance"
SERVICE_PLACE_TYPE = "car_repair"

_SUCCESS_STATUSES = {"OK", "ZERO_RESULTS"}


class GooglePlacesError(RuntimeError):
    """Raised when the Places API call fails or returns a non-successful status."""

    def __init__(self, message: str, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status or "UNKNOWN_ERROR"


@dataclass
class PlacesSearchResult:
    """Places collected by a paged search, plus the status of a follow-up page that failed."""

    places: list[LocationRecord] = field(default_factory=list)
    error_status: str | None = None


def parse_place(raw: dict[str, Any]) -> LocationRecord | None:
    """Normalise one Places result; results without a place id or name are dropped."""
    place_id = raw.get("place_id")
    name = (raw.get("name") or "").strip()
    if not place_id or not name:
        return None

    location = None
    geometry = (raw.get("geometry") or {}).get("location") or {}
    if geometry.get("lat") is not None and geometry.get("lng") is not None:
        location = Coordinates(lat=geometry["lat"], lng=geometry["lng"])

    return LocationRecord(
        place_id=place_id,
        name=name,
        address=raw.get("vicinity") or raw.get("formatted_address"),
        location=location,
        rating=raw.get("rating"),
        user_ratings_total=raw.get("user_ratings_total"),
    )


class GooglePlacesClient:
    """
    Thin wrapper around the Places ``nearbysearch`` and ``textsearch`` endpoints.

    The underlying ``httpx.AsyncClient`` is created lazily and reused until
    ``close()`` is called by the owner of the client.
    """

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 10.0,
        page_delay: float = 2.0,
        base_url: str = PLACES_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            logging.getLogger(__name__).warning("GOOGLE_MAPS_API_KEY is not configured; place search will fail.")
        self._api_key = api_key
        self._timeout = timeout
        self.page_delay = page_delay
        self._base_url = base_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._logger = logging.getLogger(self.__class__.__name__)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise GooglePlacesError("Google Maps API key is not configured", status="MISSING_API_KEY")

        client = await self._get_client()
        try:
            response = await client.get(path, params={**params, "key": self._api_key})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GooglePlacesError(
                f"Places request failed with HTTP {exc.response.status_code}",
                status=f"HTTP_{exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise GooglePlacesError(f"Places request failed: {exc}", status="NETWORK_ERROR") from exc

        payload = response.json()
        status = payload.get("status")
        if status not in _SUCCESS_STATUSES:
            self._logger.error(
                "Places %s failed: status=%s, error_message=%s",
                path,
                status,
                payload.get("error_message"),
            )
            raise GooglePlacesError(payload.get("error_message") or str(status), status=status)
        return payload

    async def nearby_search(
        self,
        lat: float,
        lng: float,
        radius: int,
        keyword: str | None = None,
        place_type: str | None = None,
        pagetoken: str | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"location": f"{lat},{lng}", "radius": radius}
        if keyword:
            params["keyword"] = keyword
        if place_type:
            params["type"] = place_type
        if pagetoken:
            params["pagetoken"] = pagetoken
        return await self._get(NEARBY_SEARCH_PATH, params)

    async def text_search(
        self,
        query: str,
        lat: float,
        lng: float,
        radius: int,
        pagetoken: str | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"query": query, "location": f"{lat},{lng}", "radius": radius}
        if pagetoken:
            params["pagetoken"] = pagetoken
        return await self._get(TEXT_SEARCH_PATH, params)

    async def search_service_centers(
        self,
        lat: float,
        lng: float,
        radius: int = 10000,
        search_query: str | None = None,
        max_results: int = 60,
    ) -> PlacesSearchResult:
        """
        Search for car service places around a point, following result pages.

        A text search is used when ``search_query`` is given, a nearby search
        restricted to car repair places otherwise. Page tokens only become valid
        a short while after they are issued, so every follow-up page waits
        ``page_delay`` seconds first.

        A failing follow-up page ends the search: the places already collected
        are returned together with the failing status.

        Raises:
            GooglePlacesError: If the first page request fails.
        """
        if search_query:
            query = f"{search_query} {SERVICE_KEYWORDS}"

            async def fetch_page(token: str | None) -> dict[str, Any]:
                return await self.text_search(query, lat, lng, radius, pagetoken=token)

        else:

            async def fetch_page(token: str | None) -> dict[str, Any]:
                return await self.nearby_search(
                    lat,
                    lng,
                    radius,
                    keyword=SERVICE_KEYWORDS,
                    place_type=SERVICE_PLACE_TYPE,
                    pagetoken=token,
                )

        payload = await fetch_page(None)
        raw_results: list[dict[str, Any]] = list(payload.get("results", []))
        pages = 1
        error_status = None

        while payload.get("next_page_token") and len(raw_results) < max_results:
            await asyncio.sleep(self.page_delay)
            try:
                payload = await fetch_page(payload["next_page_token"])
            except GooglePlacesError as e:
                self._logger.warning("Stopping after page %d, next page failed (%s): %s", pages, e.status, e)
                error_status = e.status
                break
            raw_results.extend(payload.get("results", []))
            pages += 1

        places = [place for place in map(parse_place, raw_results) if place is not None]
        self._logger.info("Fetched %d places over %d page(s)", len(places), pages)
        return PlacesSearchResult(places=places[:max_results], error_status=error_status)
