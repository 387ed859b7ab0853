"""Inventory providers.

Both providers return a freshly read snapshot on every call; capacity changes
whenever a booking is confirmed, so nothing here caches between requests.
"""
from __future__ import annotations

from typing import Any, Protocol

import requests
from loguru import logger

from parkpal.config import Settings
from parkpal.data_loader import load_spaces_from_file, normalize_rows
from parkpal.filters import is_available
from parkpal.models import ParkingSpace


class InventoryError(RuntimeError):
    pass


class InventoryProvider(Protocol):
    source: str

    def fetch_all(self) -> list[ParkingSpace]: ...

    def fetch_available(self) -> list[ParkingSpace]: ...


class StaticInventory:
    """Spaces read from a local CSV/JSON fixture."""

    def __init__(self, path: str):
        self.path = path
        self.source = f"file:{path}"

    def fetch_all(self) -> list[ParkingSpace]:
        try:
            result = load_spaces_from_file(self.path)
        except (OSError, ValueError) as e:
            raise InventoryError(f"Could not load inventory fixture: {e}") from e
        return result.spaces

    def fetch_available(self) -> list[ParkingSpace]:
        return [s for s in self.fetch_all() if is_available(s)]


class SupabaseInventory:
    """Spaces read from a hosted Postgres table through its REST API."""

    def __init__(self, url: str, key: str, table: str = "spaces", timeout_s: float = 15.0):
        self.base_url = url.rstrip("/")
        self.key = key
        self.table = table
        self.timeout_s = timeout_s
        self.source = f"supabase:{table}"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Accept": "application/json",
        }

    def _select(self, params: dict[str, Any]) -> list[ParkingSpace]:
        url = f"{self.base_url}/rest/v1/{self.table}"
        try:
            resp = requests.get(url, headers=self._headers(), params=params, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise InventoryError(f"Inventory request failed: {e}") from e

        if resp.status_code != 200:
            raise InventoryError(f"Inventory query failed: {resp.status_code} {resp.text[:240]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise InventoryError("Inventory response was not JSON") from e
        if not isinstance(data, list):
            raise InventoryError("Inventory response was not a list of rows")

        spaces = normalize_rows(data)
        logger.debug(f"Fetched {len(spaces)} spaces from {self.source}")
        return spaces

    def fetch_all(self) -> list[ParkingSpace]:
        return self._select({"select": "*"})

    def fetch_available(self) -> list[ParkingSpace]:
        rows = self._select({"select": "*", "is_available": "eq.true"})
        # booked counts are not expressible as a column filter
        return [s for s in rows if is_available(s)]


def get_inventory(settings: Settings) -> InventoryProvider:
    if settings.supabase_url and settings.supabase_key:
        return SupabaseInventory(
            settings.supabase_url,
            settings.supabase_key,
            table=settings.supabase_spaces_table,
            timeout_s=settings.inventory_timeout_s,
        )
    return StaticInventory(settings.inventory_path)
