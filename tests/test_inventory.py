import pytest
import requests

from conftest import FakeResponse
from parkpal import inventory as inventory_module
from parkpal.config import Settings
from parkpal.inventory import (
    InventoryError,
    StaticInventory,
    SupabaseInventory,
    get_inventory,
)


def test_static_inventory_reads_fixture(fixture_path):
    inv = StaticInventory(fixture_path)
    assert len(inv.fetch_all()) == 5
    assert [s.id for s in inv.fetch_available()] == ["mock-1", "mock-2", "mock-3", "mock-5"]


def test_static_inventory_returns_fresh_snapshots(fixture_path):
    inv = StaticInventory(fixture_path)
    first = inv.fetch_all()
    second = inv.fetch_all()
    assert first == second
    assert first is not second


def test_static_inventory_missing_file(tmp_path):
    with pytest.raises(InventoryError):
        StaticInventory(str(tmp_path / "missing.json")).fetch_all()


def test_supabase_inventory_queries_rest_table(monkeypatch):
    calls = []

    def fake_get(url, headers=None, params=None, timeout=None):
        calls.append({"url": url, "headers": headers, "params": params})
        return FakeResponse(
            payload=[
                {"id": 1, "title": "A", "total_spaces": 2, "booked_spaces": 2},
                {"id": 2, "title": "B", "total_spaces": 2, "booked_spaces": 0},
            ]
        )

    monkeypatch.setattr(inventory_module.requests, "get", fake_get)
    inv = SupabaseInventory("https://db.example.co/", "secret")

    assert [s.id for s in inv.fetch_all()] == ["1", "2"]
    assert [s.id for s in inv.fetch_available()] == ["2"]

    assert calls[0]["url"] == "https://db.example.co/rest/v1/spaces"
    assert calls[0]["headers"]["apikey"] == "secret"
    assert calls[0]["params"] == {"select": "*"}
    assert calls[1]["params"]["is_available"] == "eq.true"


def test_supabase_inventory_http_error(monkeypatch):
    monkeypatch.setattr(
        inventory_module.requests,
        "get",
        lambda *a, **kw: FakeResponse(status_code=401, text="bad key"),
    )
    with pytest.raises(InventoryError, match="401"):
        SupabaseInventory("https://db.example.co", "k").fetch_all()


def test_supabase_inventory_transport_error(monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(inventory_module.requests, "get", boom)
    with pytest.raises(InventoryError):
        SupabaseInventory("https://db.example.co", "k").fetch_available()


def test_get_inventory_selects_provider(fixture_path):
    live = get_inventory(Settings(supabase_url="https://db.example.co", supabase_key="k"))
    assert isinstance(live, SupabaseInventory)

    static = get_inventory(Settings(supabase_url=None, supabase_key=None, inventory_path=fixture_path))
    assert isinstance(static, StaticInventory)
    assert static.source.startswith("file:")
