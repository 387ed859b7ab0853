from __future__ import annotations

import csv
import json
import math
import os
from dataclasses import dataclass
from typing import Any, Iterable

from parkpal.models import ParkingSpace


@dataclass(frozen=True)
class LoadResult:
    spaces: list[ParkingSpace]
    source: str


def _try_parse_float(v: object) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v)
    s = str(v).strip().lstrip("£")
    if s == "":
        return None
    try:
        return float(s)
    except ValueError:
        return None


def _try_parse_int(v: object) -> int | None:
    f = _try_parse_float(v)
    if f is None or not math.isfinite(f):
        return None
    return int(f)


def _try_parse_bool(v: object) -> bool | None:
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("true", "t", "yes", "y", "1"):
        return True
    if s in ("false", "f", "no", "n", "0"):
        return False
    return None


def _row_get(row: dict, keys: Iterable[str]) -> Any | None:
    for k in keys:
        if k in row and row[k] not in (None, ""):
            return row[k]
    return None


def _coord(v: object) -> float | str | None:
    if isinstance(v, bool) or not isinstance(v, (int, float, str)):
        return None
    return v


def _str_or_none(v: object) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def normalize_space(row: dict, idx: int) -> ParkingSpace:
    """Map one raw store row onto a :class:`ParkingSpace`.

    Numeric fields that do not parse are left unset; coordinates are kept as
    given so the ranker can decide what to do with them.
    """
    space_id = str(_row_get(row, ["id", "_id", "ID", "space_id"]) or idx)

    features = _row_get(row, ["features", "amenities"])
    if not isinstance(features, (str, list)):
        features = None
    if isinstance(features, list):
        features = [str(f) for f in features if f is not None]

    return ParkingSpace(
        id=space_id,
        title=_str_or_none(_row_get(row, ["title", "name"])),
        description=_str_or_none(_row_get(row, ["description", "desc"])),
        location=_str_or_none(_row_get(row, ["location", "area"])),
        address=_str_or_none(_row_get(row, ["address", "street"])),
        postcode=_str_or_none(_row_get(row, ["postcode", "post_code", "postal_code"])),
        latitude=_coord(_row_get(row, ["latitude", "lat"])),
        longitude=_coord(_row_get(row, ["longitude", "lon", "lng"])),
        what3words=_str_or_none(_row_get(row, ["what3words", "w3w"])),
        features=features,
        price_per_day=_try_parse_float(_row_get(row, ["price_per_day", "daily_price"])),
        price_per_month=_try_parse_float(_row_get(row, ["price_per_month", "monthly_price"])),
        total_spaces=_try_parse_int(_row_get(row, ["total_spaces", "capacity"])),
        booked_spaces=_try_parse_int(_row_get(row, ["booked_spaces", "booked"])),
        is_available=_try_parse_bool(_row_get(row, ["is_available", "available"])),
        available_from=_str_or_none(_row_get(row, ["available_from"])),
        available_to=_str_or_none(_row_get(row, ["available_to"])),
    )


def normalize_rows(rows: Iterable[Any]) -> list[ParkingSpace]:
    return [normalize_space(row, idx) for idx, row in enumerate(rows) if isinstance(row, dict)]


def load_spaces_from_file(path: str) -> LoadResult:
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Parking inventory file not found: {path}. "
            f"Put a CSV/JSON file there or configure the hosted store."
        )

    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            return LoadResult(spaces=normalize_rows(reader), source=path)

    if ext == ".json":
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)

        if isinstance(obj, dict) and isinstance(obj.get("spaces"), list):
            return LoadResult(spaces=normalize_rows(obj["spaces"]), source=path)

        if isinstance(obj, list):
            return LoadResult(spaces=normalize_rows(obj), source=path)

        raise ValueError(f"Unsupported JSON structure in {path}")

    raise ValueError(f"Unsupported file extension: {ext} (expected .csv/.json)")
