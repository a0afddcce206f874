"""Unit tests for the service-center matcher."""

import pytest

from carmate.core.config import MatchMode
from carmate.schemas.service_center import ResultSource
from carmate.services.matcher import (
    MatchThresholds,
    ServiceCenterMatcher,
    google_maps_url,
    reconcile,
)

ORIGIN_LAT = 3.1390
ORIGIN_LNG = 101.6869


@pytest.fixture
def strict_matcher():
    return ServiceCenterMatcher(mode=MatchMode.STRICT)


@pytest.fixture
def fuzzy_matcher():
    return ServiceCenterMatcher(mode=MatchMode.FUZZY)


def _run(matcher, registered, candidates, filter_registered=False):
    return matcher.reconcile(registered, candidates, ORIGIN_LAT, ORIGIN_LNG, filter_registered)


class TestExactPlaceIdMatching:
    """Links through the stored place id, honoured in every mode."""

    @pytest.mark.parametrize("mode", [MatchMode.STRICT, MatchMode.FUZZY])
    def test_linked_center_is_merged_into_candidate(self, mode, make_center, make_candidate):
        center = make_center(name="Ah Seng Auto Workshop", place_id="place-1")
        candidate = make_candidate(place_id="place-1", name="Ah Seng Auto")

        results = _run(ServiceCenterMatcher(mode=mode), [center], [candidate])

        assert len(results) == 1
        result = results[0]
        assert result.id == "place-1"
        assert result.is_registered is True
        assert result.registered_data == center
        assert result.source == ResultSource.GOOGLE
        assert result.google_maps_url == "https://www.google.com/maps/place/?q=place_id:place-1"

    def test_lookalike_of_linked_center_is_registered(self, fuzzy_matcher, make_center, make_candidate):
        """Test a second listing resembling a place-id linked center still counts as registered."""
        center = make_center(name="Speedy Tyres", place_id="place-1")
        lookalike = make_candidate(place_id="place-x", name="Speedy Tyres")
        linked = make_candidate(place_id="place-1", name="Speedy Tyres Cheras")

        results = _run(fuzzy_matcher, [center], [lookalike, linked])

        by_id = {result.id: result for result in results}
        assert set(by_id) == {"place-x", "place-1"}
        assert by_id["place-1"].is_registered is True
        assert by_id["place-1"].registered_data == center
        assert by_id["place-x"].is_registered is True
        assert by_id["place-x"].registered_data is None


class TestStrictMode:
    """Only exact place-id links count in strict mode."""

    def test_similar_name_is_not_merged(self, strict_matcher, make_center, make_candidate):
        center = make_center(name="Speedy Tyres")
        candidate = make_candidate(place_id="place-2", name="Speedy Tyres")

        results = _run(strict_matcher, [center], [candidate])

        assert len(results) == 2
        assert results[0].source == ResultSource.INTERNAL
        assert results[0].id == str(center.id)
        assert results[0].is_registered is True
        assert results[1].id == "place-2"
        assert results[1].is_registered is False
        assert results[1].registered_data is None

    def test_unlinked_centers_are_standalone(self, strict_matcher, make_center):
        centers = [make_center(name="Alpha Motors"), make_center(name="Zeta Tyre Centre")]

        results = _run(strict_matcher, centers, [])

        assert {result.id for result in results} == {str(center.id) for center in centers}
        assert all(result.source == ResultSource.INTERNAL for result in results)
        assert all(result.registered_data is not None for result in results)


class TestFuzzyMode:
    """Name, address and proximity matching."""

    def test_similar_name_claims_center(self, fuzzy_matcher, make_center, make_candidate):
        center = make_center(name="Speedy Tyres Sdn Bhd", lat=3.2, lng=101.7)
        candidate = make_candidate(place_id="place-2", name="SPEEDY TYRES SDN. BHD.", lat=3.3, lng=101.8)

        results = _run(fuzzy_matcher, [center], [candidate])

        assert len(results) == 1
        assert results[0].id == "place-2"
        assert results[0].is_registered is True
        assert results[0].registered_data is None
        assert results[0].source == ResultSource.GOOGLE

    def test_similar_address_claims_center(self, fuzzy_matcher, make_center, make_candidate):
        center = make_center(
            name="Alpha Motors",
            address="12 Jalan Ampang, Kuala Lumpur",
            lat=None,
            lng=None,
        )
        candidate = make_candidate(
            place_id="place-3",
            name="Zeta Tyre Centre",
            address="12, Jalan Ampang, Kuala Lumpur",
            lat=None,
            lng=None,
        )

        results = _run(fuzzy_matcher, [center], [candidate])

        assert len(results) == 1
        assert results[0].is_registered is True

    def test_nearby_coordinates_claim_center(self, fuzzy_matcher, make_center, make_candidate):
        """Test two places about five metres apart are the same place."""
        center = make_center(name="Alpha Motors", lat=3.15, lng=101.70)
        candidate = make_candidate(place_id="place-4", name="Zeta Tyre Centre", lat=3.15005, lng=101.70)

        results = _run(fuzzy_matcher, [center], [candidate])

        assert len(results) == 1
        assert results[0].id == "place-4"
        assert results[0].is_registered is True

    def test_distant_dissimilar_places_stay_apart(self, fuzzy_matcher, make_center, make_candidate):
        """Test places about a kilometre apart with unrelated names are not merged."""
        center = make_center(name="Alpha Motors", lat=3.15, lng=101.70)
        candidate = make_candidate(place_id="place-5", name="Zeta Tyre Centre", lat=3.16, lng=101.70)

        results = _run(fuzzy_matcher, [center], [candidate])

        assert len(results) == 2
        assert results[0].source == ResultSource.INTERNAL
        assert results[1].is_registered is False

    def test_every_listing_of_a_center_is_registered(self, fuzzy_matcher, make_center, make_candidate):
        center = make_center(name="Speedy Tyres")
        first = make_candidate(place_id="place-a", name="Speedy Tyres")
        second = make_candidate(place_id="place-b", name="Speedy Tyres")

        results = _run(fuzzy_matcher, [center], [first, second])

        by_id = {result.id: result for result in results}
        assert set(by_id) == {"place-a", "place-b"}
        assert by_id["place-a"].is_registered is True
        assert by_id["place-b"].is_registered is True

    def test_filter_keeps_every_matching_listing(self, fuzzy_matcher, make_center, make_candidate):
        center = make_center(name="Speedy Tyres")
        first = make_candidate(place_id="place-a", name="Speedy Tyres")
        second = make_candidate(place_id="place-b", name="Speedy Tyres")

        results = _run(fuzzy_matcher, [center], [first, second], filter_registered=True)

        assert sorted(result.id for result in results) == ["place-a", "place-b"]

    def test_candidate_matching_several_centers_hides_them_all(self, fuzzy_matcher, make_center, make_candidate):
        """Test one listing matching two centers, by name and by proximity, replaces both."""
        centers = [make_center(name="Speedy Tyres", lat=3.5), make_center(name="Alpha Motors")]
        candidate = make_candidate(place_id="place-c", name="Speedy Tyres")

        results = _run(fuzzy_matcher, centers, [candidate])

        assert [result.id for result in results] == ["place-c"]
        assert results[0].is_registered is True

    def test_custom_similarity_and_thresholds(self, make_center, make_candidate):
        matcher = ServiceCenterMatcher(
            mode=MatchMode.FUZZY,
            similarity=lambda first, second: 0.5,
            thresholds=MatchThresholds(name=0.4, address=0.9, proximity_km=0.0),
        )
        center = make_center(name="Alpha Motors", lat=3.15, lng=101.70)
        candidate = make_candidate(place_id="place-6", name="Zeta Tyre Centre", lat=3.5, lng=101.9)

        results = _run(matcher, [center], [candidate])

        assert len(results) == 1
        assert results[0].is_registered is True

    def test_threshold_is_exclusive(self, make_center, make_candidate):
        matcher = ServiceCenterMatcher(
            mode=MatchMode.FUZZY,
            similarity=lambda first, second: 0.8,
            thresholds=MatchThresholds(name=0.8, address=0.8, proximity_km=0.0),
        )
        center = make_center(name="Alpha Motors", address="1 Jalan Satu")
        candidate = make_candidate(place_id="place-7", name="Alpha Motor", address="1 Jalan Satu")

        results = _run(matcher, [center], [candidate])

        assert len(results) == 2


class TestResultList:
    """Properties of the merged result list."""

    def test_duplicate_candidates_are_collapsed(self, fuzzy_matcher, make_candidate):
        candidate = make_candidate(place_id="place-dup", name="Zeta Tyre Centre")

        results = _run(fuzzy_matcher, [], [candidate, candidate.model_copy()])

        assert [result.id for result in results] == ["place-dup"]

    def test_filter_registered_keeps_only_registered(self, fuzzy_matcher, make_center, make_candidate):
        center = make_center(name="Alpha Motors", lat=3.2, lng=101.9)
        linked = make_candidate(place_id="place-1", name="Speedy Tyres", lat=3.5, lng=101.5)
        center_linked = make_center(name="Speedy", place_id="place-1", lat=3.5, lng=101.5)
        other = make_candidate(place_id="place-2", name="Zeta Tyre Centre", lat=3.9, lng=101.1)

        results = _run(fuzzy_matcher, [center, center_linked], [linked, other], filter_registered=True)

        assert {result.id for result in results} == {str(center.id), "place-1"}
        assert all(result.is_registered for result in results)

    def test_registered_first_then_by_distance(self, strict_matcher, make_center, make_candidate):
        far_center = make_center(name="Alpha Motors", lat=ORIGIN_LAT + 0.05)
        near_center = make_center(name="Beta Motors", lat=ORIGIN_LAT + 0.01)
        unlocated_center = make_center(name="Gamma Motors", lat=None, lng=None)
        near_place = make_candidate(place_id="near", name="Delta", lat=ORIGIN_LAT)
        far_place = make_candidate(place_id="far", name="Epsilon", lat=ORIGIN_LAT + 0.2)
        unlocated_place = make_candidate(place_id="nowhere", name="Zeta", lat=None, lng=None)

        results = _run(
            strict_matcher,
            [far_center, unlocated_center, near_center],
            [unlocated_place, far_place, near_place],
        )

        assert [result.name for result in results] == [
            "Beta Motors",
            "Alpha Motors",
            "Gamma Motors",
            "Delta",
            "Epsilon",
            "Zeta",
        ]
        assert results[2].distance is None
        assert results[3].distance == 0.0
        assert results[5].distance is None

    def test_registered_data_only_on_registered_results(self, fuzzy_matcher, make_center, make_candidate):
        centers = [make_center(name="Speedy Tyres", place_id="place-1"), make_center(name="Alpha Motors")]
        candidates = [
            make_candidate(place_id="place-1", name="Speedy"),
            make_candidate(place_id="place-2", name="Zeta Tyre Centre", lat=3.9, lng=101.1),
        ]

        results = _run(fuzzy_matcher, centers, candidates)

        for result in results:
            assert result.source in (ResultSource.GOOGLE, ResultSource.INTERNAL)
            if result.registered_data is not None:
                assert result.is_registered is True

    def test_serialises_with_camel_case_aliases(self, strict_matcher, make_center):
        results = _run(strict_matcher, [make_center(place_id="place-1")], [])

        payload = results[0].model_dump(by_alias=True, mode="json")

        assert payload["isRegistered"] is True
        assert payload["googleMapsUrl"].endswith("place_id:place-1")
        assert payload["registeredData"]["google_place_id"] == "place-1"
        assert payload["source"] == "internal"

    def test_empty_inputs(self, fuzzy_matcher):
        assert _run(fuzzy_matcher, [], []) == []


class TestHelpers:
    def test_google_maps_url_without_place_id(self):
        assert google_maps_url(None) is None
        assert google_maps_url("") is None

    def test_module_reconcile_defaults_to_fuzzy(self, make_center, make_candidate):
        center = make_center(name="Speedy Tyres")
        candidate = make_candidate(place_id="place-1", name="Speedy Tyres")

        results = reconcile([center], [candidate], ORIGIN_LAT, ORIGIN_LNG)

        assert len(results) == 1
        assert results[0].is_registered is True
