from __future__ import annotations

from typing import Iterable

from parkpal.models import ParkingSpace, SearchConstraints


def _contains(haystack: str | None, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def is_available(space: ParkingSpace) -> bool:
    if space.is_available is False:
        return False
    return space.capacity > 0


def matches_location(space: ParkingSpace, phrase: str) -> bool:
    fields = (space.title, space.location, space.address, space.postcode)
    return any(_contains(f, phrase) for f in fields)


def matches_features(space: ParkingSpace, requested: list[str]) -> bool:
    tags = space.feature_tags
    return any(_contains(tag, label) for label in requested for tag in tags)


def within_price(space: ParkingSpace, max_price: int) -> bool:
    if space.price_per_day is None:
        return False
    return space.price_per_day <= max_price


def within_dates(space: ParkingSpace, start: str, end: str) -> bool:
    # ISO date prefixes compare correctly as strings
    if space.available_from and space.available_from[:10] > start:
        return False
    if space.available_to and space.available_to[:10] < end:
        return False
    return True


def filter_candidates(
    constraints: SearchConstraints,
    inventory: Iterable[ParkingSpace],
) -> list[ParkingSpace]:
    out: list[ParkingSpace] = []
    for space in inventory:
        if not is_available(space):
            continue
        if constraints.location and not matches_location(space, constraints.location):
            continue
        if constraints.postcode and not _contains(space.postcode, constraints.postcode):
            continue
        if constraints.what3words and not _contains(space.what3words, constraints.what3words):
            continue
        if constraints.features and not matches_features(space, constraints.features):
            continue
        if constraints.max_price is not None and not within_price(space, constraints.max_price):
            continue
        if (
            constraints.start_date
            and constraints.end_date
            and not within_dates(space, constraints.start_date, constraints.end_date)
        ):
            continue
        out.append(space)
    return out
