import json

import pytest

from parkpal.data_loader import load_spaces_from_file, normalize_space


def test_bundled_fixture_loads(fixture_path):
    result = load_spaces_from_file(fixture_path)
    assert [s.id for s in result.spaces] == ["mock-1", "mock-2", "mock-3", "mock-4", "mock-5"]
    oval = result.spaces[4]
    assert oval.coordinates == (51.4822, -0.1131)
    assert oval.feature_tags == ["Covered", "24/7 Security", "Electric Charging"]


def test_json_wrapped_in_spaces_key(tmp_path):
    path = tmp_path / "inv.json"
    path.write_text(json.dumps({"spaces": [{"title": "A", "price_per_day": "9.5"}]}))
    spaces = load_spaces_from_file(str(path)).spaces
    assert spaces[0].id == "0"
    assert spaces[0].price_per_day == 9.5


def test_csv_with_column_aliases(tmp_path):
    path = tmp_path / "inv.csv"
    path.write_text(
        "id,name,postcode,lat,lng,daily_price,capacity,booked,amenities,available\n"
        "s1,Garage,SE1 1AA,51.5,-0.09,£14,3,,\"CCTV, Covered\",yes\n"
        "s2,Yard,,not-a-number,,,x,1,,no\n",
        encoding="utf-8",
    )
    s1, s2 = load_spaces_from_file(str(path)).spaces

    assert s1.title == "Garage"
    assert s1.coordinates == (51.5, -0.09)
    assert s1.price_per_day == 14
    assert s1.total_spaces == 3
    assert s1.booked_spaces is None
    assert s1.feature_tags == ["CCTV", "Covered"]
    assert s1.is_available is True

    assert s2.coordinates is None
    assert s2.total_spaces is None
    assert s2.capacity == 0
    assert s2.is_available is False


def test_normalize_space_keeps_numeric_ids_as_strings():
    s = normalize_space({"id": 42, "total_spaces": 2.0, "latitude": None}, 0)
    assert s.id == "42"
    assert s.total_spaces == 2
    assert s.latitude is None


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_spaces_from_file(str(tmp_path / "nope.json"))


def test_unsupported_inputs(tmp_path):
    bad_ext = tmp_path / "inv.txt"
    bad_ext.write_text("[]")
    with pytest.raises(ValueError):
        load_spaces_from_file(str(bad_ext))

    bad_json = tmp_path / "inv.json"
    bad_json.write_text(json.dumps({"rows": []}))
    with pytest.raises(ValueError):
        load_spaces_from_file(str(bad_json))
