from __future__ import annotations

import math
import re
from typing import Any, Iterable

from parkpal.geo import haversine_km
from parkpal.models import ParkingSpace, RankedCandidate, UserLocation

DEFAULT_LIMIT = 3

_SPLIT_RE = re.compile(r"[\s,]+")

# Shorter tokens and house numbers turn up inside unrelated words and prices.
MIN_KEYWORD_LEN = 3


def _keyword_fields(space: ParkingSpace) -> list[str]:
    return [(f or "").lower() for f in (space.location, space.address, space.postcode)]


def extract_location_keywords(message: str, inventory: Iterable[ParkingSpace]) -> list[str]:
    """Inventory location words that appear in the message."""
    text = (message or "").lower()
    if not text:
        return []

    seen: set[str] = set()
    matched: list[str] = []
    for space in inventory:
        for field in _keyword_fields(space):
            for word in _SPLIT_RE.split(field):
                if len(word) < MIN_KEYWORD_LEN or word.isdigit() or word in seen:
                    continue
                seen.add(word)
                if word in text:
                    matched.append(word)
    return matched


def keyword_score(space: ParkingSpace, keywords: Iterable[str]) -> int:
    fields = _keyword_fields(space)
    return sum(1 for k in keywords if any(k in f for f in fields))


def _price_key(space: ParkingSpace) -> float:
    return space.price_per_day if space.price_per_day is not None else math.inf


def rank_candidates(
    candidates: list[ParkingSpace],
    user_location: UserLocation | None = None,
    keywords: list[str] | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[RankedCandidate]:
    """Order candidates by distance (or keyword hits) and keep the top ``limit``.

    Ties fall back to ascending daily price and then input order, so the
    same input always yields the same ranking.
    """
    rows: list[dict[str, Any]] = []
    for idx, space in enumerate(candidates):
        row: dict[str, Any] = {"space": space, "idx": idx, "distance": None, "score": 0}
        if user_location is not None:
            coords = space.coordinates
            if coords is not None:
                row["distance"] = haversine_km(
                    user_location.latitude, user_location.longitude, coords[0], coords[1]
                )
        else:
            row["score"] = keyword_score(space, keywords or [])
        rows.append(row)

    if user_location is not None:
        rows.sort(
            key=lambda r: (
                r["distance"] if r["distance"] is not None else math.inf,
                _price_key(r["space"]),
                r["idx"],
            )
        )
    else:
        rows.sort(key=lambda r: (-r["score"], _price_key(r["space"]), r["idx"]))

    rows = rows[: max(0, int(limit))]

    return [
        RankedCandidate(space=r["space"], distance=r["distance"], keyword_score=r["score"])
        for r in rows
    ]
