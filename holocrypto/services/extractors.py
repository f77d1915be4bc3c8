"""
Fact extraction from shape-unstable fundamentals-provider payloads.

Provider responses are observed single-wrapped, double-wrapped or bare under
`data`, with founders stored as a list or as a keyed map. Each fact is
described as an ordered list of candidate paths; a candidate that hits a
missing key or a wrong type simply fails and the next one is tried. When
nothing resolves the result is the empty default, never an error.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence

from holocrypto.schemas.views import FundingInfo, FundingRound
from holocrypto.utils.formatting import coerce_number


MAX_FOUNDERS = 6
MAX_FUNDING_ROUNDS = 5

PEOPLE_KEYS = ("people", "team")
FOUNDER_KEYS = ("founders", "persons", "people")
NAME_KEYS = ("name", "full_name", "title")

FUNDING_PARENT_KEYS = ("metrics", "profile")
ROUND_LIST_KEYS = ("rounds", "funding_rounds")
TOTAL_RAISED_KEYS = ("total_raised_usd", "raised", "total")

ROUND_DATE_KEYS = ("date", "announced_on", "announced_at")
ROUND_LABEL_KEYS = ("round", "round_type", "type", "name")
ROUND_AMOUNT_KEYS = ("amount_usd", "raised_usd", "amount", "raised")
ROUND_INVESTOR_COUNT_KEYS = ("investor_count", "investors_count")


class ShapeMismatch(LookupError):
    """A candidate path did not match the payload's structure."""


def _dig(node: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(node, dict) or key not in node:
            raise ShapeMismatch(key)
        node = node[key]
    return node


def _unwrap_levels(payload: Any) -> List[Any]:
    """The payload itself, then up to two nested `data` wrappers."""
    levels = [payload]
    node = payload
    for _ in range(2):
        try:
            node = _dig(node, "data")
        except ShapeMismatch:
            break
        levels.append(node)
    return levels


def _first_number(node: Any, keys: Iterable[str]) -> Optional[float]:
    """First key holding a finite number; junk values fall through to the next key."""
    for key in keys:
        try:
            number = coerce_number(_dig(node, key))
        except ShapeMismatch:
            continue
        if number is not None:
            return number
    return None


def _as_records(container: Any) -> List[Any]:
    """Ordered list of records from either a list or a keyed mapping."""
    if isinstance(container, list):
        return list(container)
    if isinstance(container, dict):
        return list(container.values())
    raise ShapeMismatch(type(container).__name__)


def _display_name(record: Any) -> Optional[str]:
    if not isinstance(record, dict):
        return None
    for key in NAME_KEYS:
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _unique_names(records: Sequence[Any], limit: int) -> List[str]:
    seen: set[str] = set()
    names: List[str] = []
    for record in records:
        name = _display_name(record)
        if name is None or name in seen:
            continue
        seen.add(name)
        names.append(name)
        if len(names) >= limit:
            break
    return names


def _find_profile(payload: Any) -> Any:
    for level in _unwrap_levels(payload):
        try:
            profile = _dig(level, "profile")
        except ShapeMismatch:
            continue
        if isinstance(profile, dict):
            return profile
    raise ShapeMismatch("profile")


def _founder_names(people: Any) -> List[str]:
    """Names under the first founder key that yields any; raises if none does."""
    for key in FOUNDER_KEYS:
        try:
            names = _unique_names(_as_records(_dig(people, key)), MAX_FOUNDERS)
        except ShapeMismatch:
            continue
        if names:
            return names

    # bare leadership list
    if isinstance(people, list):
        names = _unique_names(people, MAX_FOUNDERS)
        if names:
            return names
    raise ShapeMismatch("founders")


def extract_founders(payload: Any) -> List[str]:
    """
    Founder display names: unique, first-seen order, at most six.

    Each people container (`people`, then `team`) is tried in turn; one that
    is not a mapping or list, or that yields no resolvable names, falls
    through to the next. A container that is itself a list of person records
    counts as a leadership list.
    """
    try:
        profile = _find_profile(payload)
    except ShapeMismatch:
        return []

    for key in PEOPLE_KEYS:
        try:
            return _founder_names(_dig(profile, key))
        except ShapeMismatch:
            continue
    return []


def _first_value(record: dict, keys: Iterable[str]) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def _funding_round(record: dict) -> FundingRound:
    date = _first_value(record, ROUND_DATE_KEYS)
    label = _first_value(record, ROUND_LABEL_KEYS)

    investors = record.get("investors")
    if isinstance(investors, list):
        count: Optional[int] = len(investors)
    else:
        raw = _first_value(record, ROUND_INVESTOR_COUNT_KEYS)
        count = raw if isinstance(raw, int) and not isinstance(raw, bool) else None

    return FundingRound(
        date=str(date) if date is not None else None,
        round=str(label) if label is not None else None,
        amount_usd=_first_number(record, ROUND_AMOUNT_KEYS),
        investors=count,
    )


def _find_fundraising(payload: Any) -> dict:
    for level in _unwrap_levels(payload):
        for parent in FUNDING_PARENT_KEYS:
            try:
                fundraising = _dig(level, parent, "fundraising")
            except ShapeMismatch:
                continue
            if isinstance(fundraising, dict):
                return fundraising
    raise ShapeMismatch("fundraising")


def extract_funding(payload: Any) -> FundingInfo:
    """Total raised and up to five funding rounds, source order kept."""
    try:
        fundraising = _find_fundraising(payload)
    except ShapeMismatch:
        return FundingInfo()

    rounds: List[Any] = []
    for key in ROUND_LIST_KEYS:
        value = fundraising.get(key)
        if isinstance(value, list):
            rounds = value
            break

    return FundingInfo(
        total_raised=_first_number(fundraising, TOTAL_RAISED_KEYS),
        rounds=[_funding_round(r) for r in rounds if isinstance(r, dict)][:MAX_FUNDING_ROUNDS],
    )
