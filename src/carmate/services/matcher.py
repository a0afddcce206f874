"""Reconciliation of registered service centers with external place-search results.

A candidate and a registered center describe the same physical place when any of
these holds:

1. the candidate's place id equals the center's stored ``google_place_id``;
2. their names are similar (case-insensitive score above the name threshold);
3. their addresses are similar (case-insensitive score above the address threshold);
4. both have coordinates and lie closer than the proximity threshold.

``MatchMode.STRICT`` only honours rule 1. ``MatchMode.FUZZY`` honours all four, and
a center claimed by a fuzzy match is not repeated as a standalone entry.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..core.config import MatchMode
from ..core.utils.geo import haversine_km
from ..schemas.service_center import (
    Coordinates,
    LocationRecord,
    ReconciledResult,
    RegisteredCenterRead,
    ResultSource,
)
from .similarity import Similarity, dice_coefficient

logger = logging.getLogger(__name__)

GOOGLE_MAPS_PLACE_URL = "https://www.google.com/maps/place/?q=place_id:{place_id}"


def google_maps_url(place_id: str | None) -> str | None:
    if not place_id:
        return None
    return GOOGLE_MAPS_PLACE_URL.format(place_id=place_id)


def distance_from(origin_lat: float, origin_lng: float, location: Coordinates | None) -> float | None:
    if location is None:
        return None
    return haversine_km(origin_lat, origin_lng, location.lat, location.lng)


def sort_results(results: Iterable[ReconciledResult]) -> list[ReconciledResult]:
    """Registered first, then by ascending distance, unknown distances last within each group."""
    return sorted(
        results,
        key=lambda r: (not r.is_registered, r.distance is None, r.distance or 0.0),
    )


@dataclass(frozen=True)
class MatchThresholds:
    name: float = 0.8
    address: float = 0.7
    proximity_km: float = 0.1


class ServiceCenterMatcher:
    """
    Merge registered centers and place-search candidates into one ranked list.

    The matcher is pure: it performs no I/O and keeps no state between calls.
    """

    def __init__(
        self,
        mode: MatchMode = MatchMode.FUZZY,
        similarity: Similarity = dice_coefficient,
        thresholds: MatchThresholds | None = None,
    ) -> None:
        self.mode = MatchMode(mode)
        self._similarity = similarity
        self.thresholds = thresholds or MatchThresholds()

    def _similar(self, first: str | None, second: str | None, threshold: float) -> bool:
        if not first or not second:
            return False
        return self._similarity(first.lower(), second.lower()) > threshold

    def _nearby(self, candidate: LocationRecord, center: RegisteredCenterRead) -> bool:
        center_location = center.location
        if candidate.location is None or center_location is None:
            return False
        distance = haversine_km(
            candidate.location.lat,
            candidate.location.lng,
            center_location.lat,
            center_location.lng,
        )
        return distance < self.thresholds.proximity_km

    def is_same_place(self, candidate: LocationRecord, center: RegisteredCenterRead) -> bool:
        """Apply the matching rules allowed by the current mode."""
        if center.google_place_id and center.google_place_id == candidate.place_id:
            return True
        if self.mode == MatchMode.STRICT:
            return False
        return (
            self._similar(candidate.name, center.service_center_name, self.thresholds.name)
            or self._similar(candidate.address, center.service_center_address, self.thresholds.address)
            or self._nearby(candidate, center)
        )

    def reconcile(
        self,
        registered: Sequence[RegisteredCenterRead],
        candidates: Sequence[LocationRecord],
        origin_lat: float,
        origin_lng: float,
        filter_registered: bool = False,
    ) -> list[ReconciledResult]:
        """
        Build the deduplicated, sorted result list.

        Args:
            registered: Centers stored in our database.
            candidates: Places returned by the place search.
            origin_lat: Latitude of the query point.
            origin_lng: Longitude of the query point.
            filter_registered: Drop every result that is not registered.

        Returns:
            Registered results first, each group ordered by distance from the origin.
        """
        unique_candidates = _dedupe_by_place_id(candidates)

        by_place_id: dict[str, RegisteredCenterRead] = {}
        for center in registered:
            if center.google_place_id:
                by_place_id.setdefault(center.google_place_id, center)

        # Exact place id links win over any fuzzy match.
        linked: dict[int, RegisteredCenterRead] = {}
        for index, candidate in enumerate(unique_candidates):
            center = by_place_id.get(candidate.place_id)
            if center is not None:
                linked[index] = center
        claimed = {center.id for center in linked.values()}

        fuzzy_matched: set[int] = set()
        if self.mode == MatchMode.FUZZY:
            for index, candidate in enumerate(unique_candidates):
                if index in linked:
                    continue
                matches = [center for center in registered if self.is_same_place(candidate, center)]
                if matches:
                    fuzzy_matched.add(index)
                    claimed.update(center.id for center in matches)
                    logger.debug(
                        "Candidate %s matched registered centers %s",
                        candidate.place_id,
                        [str(center.id) for center in matches],
                    )

        standalone = [
            self._registered_result(center, origin_lat, origin_lng)
            for center in registered
            if center.id not in claimed
        ]
        merged = [
            self._candidate_result(
                candidate,
                origin_lat,
                origin_lng,
                is_registered=index in linked or index in fuzzy_matched,
                registered_data=linked.get(index),
            )
            for index, candidate in enumerate(unique_candidates)
        ]

        results = standalone + merged
        if filter_registered:
            results = [result for result in results if result.is_registered]

        logger.info(
            "Reconciled %d registered centers with %d candidates (%s mode): %d linked, %d fuzzy, %d results",
            len(registered),
            len(unique_candidates),
            self.mode.value,
            len(linked),
            len(fuzzy_matched),
            len(results),
        )
        return sort_results(results)

    @staticmethod
    def _candidate_result(
        candidate: LocationRecord,
        origin_lat: float,
        origin_lng: float,
        *,
        is_registered: bool,
        registered_data: RegisteredCenterRead | None,
    ) -> ReconciledResult:
        return ReconciledResult(
            id=candidate.place_id,
            name=candidate.name,
            address=candidate.address,
            location=candidate.location,
            distance=distance_from(origin_lat, origin_lng, candidate.location),
            is_registered=is_registered,
            registered_data=registered_data,
            rating=candidate.rating,
            user_ratings_total=candidate.user_ratings_total,
            google_maps_url=google_maps_url(candidate.place_id),
            source=ResultSource.GOOGLE,
        )

    @staticmethod
    def _registered_result(center: RegisteredCenterRead, origin_lat: float, origin_lng: float) -> ReconciledResult:
        location = center.location
        return ReconciledResult(
            id=str(center.id),
            name=center.service_center_name,
            address=center.service_center_address,
            location=location,
            distance=distance_from(origin_lat, origin_lng, location),
            is_registered=True,
            registered_data=center,
            rating=center.average_rating,
            google_maps_url=google_maps_url(center.google_place_id),
            source=ResultSource.INTERNAL,
        )


def _dedupe_by_place_id(candidates: Iterable[LocationRecord]) -> list[LocationRecord]:
    seen: set[str] = set()
    unique: list[LocationRecord] = []
    for candidate in candidates:
        if candidate.place_id in seen:
            continue
        seen.add(candidate.place_id)
        unique.append(candidate)
    return unique


def reconcile(
    registered: Sequence[RegisteredCenterRead],
    candidates: Sequence[LocationRecord],
    origin_lat: float,
    origin_lng: float,
    filter_registered: bool = False,
    mode: MatchMode = MatchMode.FUZZY,
    similarity: Similarity = dice_coefficient,
) -> list[ReconciledResult]:
    """Functional entry point equivalent to ``ServiceCenterMatcher(mode, similarity).reconcile(...)``."""
    matcher = ServiceCenterMatcher(mode=mode, similarity=similarity)
    return matcher.reconcile(registered, candidates, origin_lat, origin_lng, filter_registered)
