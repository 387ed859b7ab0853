from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from loguru import logger

from parkpal.filters import filter_candidates
from parkpal.models import ParkingSpace, RankedCandidate, SearchConstraints, UserLocation
from parkpal.query_parser import interpret_query
from parkpal.ranking import DEFAULT_LIMIT, extract_location_keywords, rank_candidates


@dataclass(frozen=True)
class SearchResult:
    constraints: SearchConstraints
    keywords: list[str]
    candidates_found: int
    results: list[RankedCandidate]


def search_spaces(
    message: str,
    inventory: Sequence[ParkingSpace],
    user_location: UserLocation | None = None,
    limit: int = DEFAULT_LIMIT,
    today: date | None = None,
) -> SearchResult:
    """Interpret ``message``, filter ``inventory`` and rank what is left.

    ``inventory`` must be a snapshot fetched for this request; it is read,
    never modified.
    """
    constraints = interpret_query(message, today=today)
    candidates = filter_candidates(constraints, inventory)

    keywords: list[str] = []
    if user_location is None:
        keywords = extract_location_keywords(message, inventory)

    results = rank_candidates(candidates, user_location=user_location, keywords=keywords, limit=limit)

    logger.info(
        f"search: constraints={constraints.model_dump(exclude_defaults=True)} "
        f"inventory={len(inventory)} candidates={len(candidates)} returned={len(results)}"
    )
    return SearchResult(
        constraints=constraints,
        keywords=keywords,
        candidates_found=len(candidates),
        results=results,
    )
