"""Turn a free-text parking request into :class:`SearchConstraints`.

Every extractor is independent and returns ``None`` (or an empty list) when
nothing matches, so a partial or garbled message just widens the search.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Callable, Optional

from parkpal.models import SearchConstraints

# keyword -> canonical feature label
FEATURE_KEYWORDS: dict[str, str] = {
    "security": "24/7 Security",
    "secure": "24/7 Security",
    "24/7": "24/7 Security",
    "cctv": "CCTV",
    "covered": "Covered",
    "underground": "Covered",
    "indoor": "Covered",
    "electric": "Electric Charging",
    "charging": "Electric Charging",
    "ev": "Electric Charging",
    "disabled": "Disabled Access",
    "accessible": "Disabled Access",
    "valet": "Valet",
    "premium": "Premium",
    "luxury": "Premium",
    "budget": "Budget",
    "cheap": "Budget",
    "affordable": "Budget",
}

_MONTHS = {
    "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept",
    "oct", "nov", "dec",
}

# Words trimmed from either edge of a location phrase. Words that can begin
# or end a real place name ("Park Lane", "Maple Close") are not listed.
_EDGE_WORDS = {
    "a", "an", "the", "i", "im", "i'm", "we", "me", "my", "some", "any",
    "need", "needs", "want", "looking", "look", "find", "book", "get",
    "for", "to", "of", "please", "space", "spaces", "spot", "spots",
    "parking", "nearest", "closest", "somewhere", "good", "nice", "today",
    "tomorrow", "tonight", "weekend", "evening", "evenings",
}

# Words that end a location phrase.
_PHRASE_END = (
    r"(?=\s+(?:from|for|on|under|with|between|please|less|max|maximum|budget"
    r"|until|to|starting|by|in|at|near|around)\b|\s*[,.;!?]|\s*$)"
)
_PHRASE = r"([a-z0-9][a-z0-9'\- ]*?)"

_LOCATION_PATTERNS = [
    re.compile(r"\b(?:in|at|near|around)\s+" + _PHRASE + _PHRASE_END, re.IGNORECASE),
    re.compile(r"\b((?:[a-z0-9'\-]+\s+){0,2}?[a-z0-9'\-]+)\s+(?:car\s+)?parking\b", re.IGNORECASE),
    re.compile(
        r"\b(?:find|book|need)\s+(?:a\s+)?parking\s+(?:in|at|near)\s+" + _PHRASE + _PHRASE_END,
        re.IGNORECASE,
    ),
]

# "at 5pm", "at 10.30", "at 6"
_TIME_RE = re.compile(r"\d{1,2}(?:[:.]\d{2})?\s*(?:am|pm)?", re.IGNORECASE)

_POSTCODE_RE = re.compile(r"\b([a-z]{1,2}\d{1,2}[a-z]?)\s+(\d[a-z]{2})\b", re.IGNORECASE)
_W3W_RE = re.compile(r"///([a-z]+)\.([a-z]+)\.([a-z]+)", re.IGNORECASE)

_MONTH_DAY = r"[a-z]+\s+\d{1,2}(?!\d)(?:st|nd|rd|th)?"
_DAY_ONLY = r"(?:[a-z]+\s+)?\d{1,2}(?!\d)(?:st|nd|rd|th)?"
_ORDINAL_RE = re.compile(r"(?<=\d)(?:st|nd|rd|th)$", re.IGNORECASE)

_PRICE_PATTERNS = [
    re.compile(r"\bunder\s+£?\s*(\d+)", re.IGNORECASE),
    re.compile(r"\bless\s+than\s+£?\s*(\d+)", re.IGNORECASE),
    re.compile(r"\bbudget\s+of\s+£?\s*(\d+)", re.IGNORECASE),
    re.compile(r"\bmax(?:imum)?(?:\s+of)?\s+£?\s*(\d+)", re.IGNORECASE),
]


def _keyword_re(keyword: str) -> re.Pattern[str]:
    tail = r"(?!\s+of\b)" if keyword == "budget" else ""
    return re.compile(r"(?<![\w/])" + re.escape(keyword) + r"(?![\w/])" + tail, re.IGNORECASE)


_FEATURE_RES = [(_keyword_re(k), label) for k, label in FEATURE_KEYWORDS.items()]


def _is_edge_word(word: str) -> bool:
    key = word.lower().strip(".,!?'")
    return key in _EDGE_WORDS or key in FEATURE_KEYWORDS or key in _MONTHS


def _clean_location(phrase: str) -> str:
    """Trim filler words from both ends; inner words are part of the place name."""
    words = phrase.split()
    while words and _is_edge_word(words[0]):
        words.pop(0)
    while words and _is_edge_word(words[-1]):
        words.pop()
    return " ".join(words)


def extract_location(message: str) -> Optional[str]:
    for pattern in _LOCATION_PATTERNS:
        for m in pattern.finditer(message):
            if not m.group(1):
                continue
            location = _clean_location(m.group(1))
            if location and not _TIME_RE.fullmatch(location):
                return location
    return None


def extract_postcode(message: str) -> Optional[str]:
    m = _POSTCODE_RE.search(message)
    if not m:
        return None
    return f"{m.group(1)} {m.group(2)}".upper()


def extract_what3words(message: str) -> Optional[str]:
    m = _W3W_RE.search(message)
    if not m:
        return None
    return ".".join(g.lower() for g in m.groups())


def extract_features(message: str) -> list[str]:
    hits: list[tuple[int, str]] = []
    for pattern, label in _FEATURE_RES:
        for m in pattern.finditer(message):
            hits.append((m.start(), label))
    hits.sort(key=lambda h: h[0])

    labels: list[str] = []
    for _, label in hits:
        if label not in labels:
            labels.append(label)
    return labels


def _parse_month_day(text: str, year: int) -> Optional[str]:
    s = " ".join(_ORDINAL_RE.sub("", text.strip()).split())
    for fmt in ("%B %d %Y", "%b %d %Y"):
        try:
            return datetime.strptime(f"{s} {year}", fmt).date().isoformat()
        except ValueError:
            continue
    return None


def _parse_with(fmt: str) -> Callable[[str], Optional[str]]:
    def parse(text: str) -> Optional[str]:
        try:
            return datetime.strptime(text.strip(), fmt).date().isoformat()
        except ValueError:
            return None

    return parse


def extract_dates(message: str, today: date | None = None) -> tuple[Optional[str], Optional[str]]:
    """Return ``(start, end)`` ISO dates; the first matching date shape wins."""
    year = (today or date.today()).year

    m = re.search(
        rf"\bfrom\s+({_MONTH_DAY})(?:\s*(?:[-–]|to|until)\s*({_DAY_ONLY}))?",
        message,
        re.IGNORECASE,
    )
    if m:
        start = _parse_month_day(m.group(1), year)
        end = None
        if m.group(2):
            end_text = m.group(2)
            if end_text.strip()[0].isdigit():
                # "from July 3rd to 6th": end day shares the start month
                end_text = f"{m.group(1).split()[0]} {end_text}"
            end = _parse_month_day(end_text, year)
        return start, end

    shapes = [
        (r"(?<!\d)(\d{1,2}/\d{1,2}/\d{4})(?:\s*[-–]\s*(\d{1,2}/\d{1,2}/\d{4}))?", _parse_with("%d/%m/%Y")),
        (r"(?<!\d)(\d{4}-\d{2}-\d{2})(?:\s*[-–]\s*(\d{4}-\d{2}-\d{2}))?", _parse_with("%Y-%m-%d")),
    ]
    for pattern, parse in shapes:
        m = re.search(pattern, message)
        if m:
            start = parse(m.group(1))
            end = parse(m.group(2)) if m.group(2) else None
            return start, end

    return None, None


def extract_max_price(message: str) -> Optional[int]:
    for pattern in _PRICE_PATTERNS:
        m = pattern.search(message)
        if m:
            return int(m.group(1))
    return None


def interpret_query(message: str, today: date | None = None) -> SearchConstraints:
    text = message or ""
    start, end = extract_dates(text, today=today)
    return SearchConstraints(
        location=extract_location(text),
        postcode=extract_postcode(text),
        what3words=extract_what3words(text),
        features=extract_features(text),
        start_date=start,
        end_date=end,
        max_price=extract_max_price(text),
    )
