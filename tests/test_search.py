from parkpal.models import ParkingSpace, UserLocation
from parkpal.search import search_spaces

KENNINGTON = UserLocation(latitude=51.4879, longitude=-0.1059)


def ids(result):
    return [r.space.id for r in result.results]


def test_empty_message_returns_cheapest_available(inventory):
    result = search_spaces("", inventory)
    assert result.constraints.is_empty()
    # mock-4 is fully booked
    assert result.candidates_found == 4
    assert ids(result) == ["mock-2", "mock-1", "mock-5"]


def test_postcode_search(inventory):
    result = search_spaces("parking near SE17 2BB please", inventory)
    assert result.constraints.postcode == "SE17 2BB"
    assert ids(result) == ["mock-2"]


def test_price_ceiling_search(inventory):
    result = search_spaces("parking under £15", inventory)
    assert result.constraints.max_price == 15
    assert ids(result) == ["mock-2", "mock-1"]
    assert all(r.space.price_per_day <= 15 for r in result.results)


def test_feature_search_ranked_by_distance(inventory):
    result = search_spaces("need secure covered parking", inventory, user_location=KENNINGTON)
    assert result.constraints.features == ["24/7 Security", "Covered"]
    assert ids(result) == ["mock-5", "mock-3", "mock-1"]
    distances = [r.distance for r in result.results]
    assert distances == sorted(distances)


def test_results_are_available_and_bounded(inventory):
    for message in ["", "parking", "covered", "parking in SE1", "cheap"]:
        result = search_spaces(message, inventory, user_location=KENNINGTON)
        assert len(result.results) <= 3
        assert len(result.results) <= result.candidates_found
        for r in result.results:
            assert r.space.capacity > 0


def test_repeated_searches_are_identical(inventory):
    first = search_spaces("covered parking in Borough", inventory)
    second = search_spaces("covered parking in Borough", inventory)
    assert [r.to_payload() for r in first.results] == [r.to_payload() for r in second.results]


def test_inventory_is_not_modified(inventory):
    before = [s.model_dump() for s in inventory]
    search_spaces("parking near Oval", inventory, user_location=KENNINGTON)
    assert [s.model_dump() for s in inventory] == before


def test_no_match_is_empty_not_an_error(inventory):
    result = search_spaces("parking in Camden", inventory)
    assert result.candidates_found == 0
    assert result.results == []


def test_multi_word_place_names_survive(inventory):
    result = search_spaces("I want a spot in Kennington Park Road please", inventory + [
        ParkingSpace(id="kpr", title="Driveway", address="40 Kennington Park Road", price_per_day=8),
        ParkingSpace(id="kr", title="Yard", address="7 Kennington Road", price_per_day=6),
    ])
    assert result.constraints.location == "Kennington Park Road"
    # mock-4 on the same road is fully booked
    assert ids(result) == ["kpr"]


def test_park_lane_does_not_widen_to_any_lane():
    inventory = [
        ParkingSpace(id="park-lane", address="55 Park Lane", location="Mayfair"),
        ParkingSpace(id="long-lane", address="1 Long Lane", location="Borough"),
    ]
    result = search_spaces("parking near Park Lane", inventory)
    assert result.constraints.location == "Park Lane"
    assert ids(result) == ["park-lane"]


def test_time_of_day_is_not_a_location(inventory):
    result = search_spaces("parking at 5pm near Oval", inventory)
    assert result.constraints.location == "Oval"
    assert ids(result) == ["mock-5"]
