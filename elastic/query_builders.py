"""Elasticsearch query builders for the transaction endpoints."""
from __future__ import annotations
import math
from typing import Any, Dict, List, Optional, Tuple

from core.logger import get_logger

log = get_logger("elastic/query_builders")

# (label, lower bound, upper bound); lower is exclusive except for the first bucket
PRICE_RANGES: List[Tuple[str, float, Optional[float]]] = [
    ("0-100", 0, 100),
    ("101-200", 100, 200),
    ("201-300", 200, 300),
    ("301-400", 300, 400),
    ("401-500", 400, 500),
    ("501-600", 500, 600),
    ("601-700", 600, 700),
    ("701-800", 700, 800),
    ("801-900", 800, 900),
    ("901-above", 900, None),
]

CATEGORY_PAGE_SIZE = 500

# index.max_result_window default; from + size above it is rejected by the store
MAX_RESULT_WINDOW = 10000

# Lucene regexp operators; anything else is literal
_REGEXP_RESERVED = set('.?+*|{}[]()"\\#@&<>~')


def _escape_regexp(value: str) -> str:
    return "".join(f"\\{ch}" if ch in _REGEXP_RESERVED else ch for ch in value)


def _escape_wildcard(value: str) -> str:
    return "".join(f"\\{ch}" if ch in "*?\\" else ch for ch in value)


def month_filter(month: str) -> Dict[str, Any]:
    """
    Build a filter for records sold in ``month`` of any year.

    The month is left-padded with "0" to two characters and matched against
    the ISO text of ``dateOfSale`` as ``YYYY-MM-``. Nothing is validated: a
    value such as "13" or "ab" simply matches no record.

    Args:
        month: Month number as sent by the client ("3", "03", "12", ...)

    Returns:
        Elasticsearch regexp query clause
    """
    padded = str(month).rjust(2, "0")
    return {
        "regexp": {
            "dateOfSale.raw": {
                "value": f"[0-9]{{4}}-{_escape_regexp(padded)}-.*",
                "flags": "NONE",
            }
        }
    }


def _parse_number(text: str) -> Optional[float]:
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def search_filter(search: str) -> Optional[Dict[str, Any]]:
    """
    Free-text clause for the transaction listing.

    Matches a case-insensitive substring of title or description, or a price
    equal to ``search`` when it reads as a number. Empty search matches all.
    """
    if not search:
        return None

    pattern = f"*{_escape_wildcard(search)}*"
    should: List[Dict[str, Any]] = [
        {"wildcard": {"title.raw": {"value": pattern, "case_insensitive": True}}},
        {"wildcard": {"description.raw": {"value": pattern, "case_insensitive": True}}},
    ]

    price = _parse_number(search.strip())
    if price is not None:
        should.append({"term": {"price": price}})

    return {"bool": {"should": should, "minimum_should_match": 1}}


def q_listing(month: str, search: str = "", page: int = 1, per_page: int = 10) -> Dict[str, Any]:
    """
    Build the paginated listing query.

    Pages are 1-based; ``from`` is ``(page - 1) * per_page``. Results keep the
    index order, so consecutive pages never overlap. ``size`` is trimmed so
    that ``from + size`` stays within ``MAX_RESULT_WINDOW``.
    """
    offset = (page - 1) * per_page
    size = max(0, min(per_page, MAX_RESULT_WINDOW - offset))

    filters: List[Dict[str, Any]] = [month_filter(month)]
    text_clause = search_filter(search)
    if text_clause:
        filters.append(text_clause)

    query_body = {
        "query": {"bool": {"filter": filters}},
        "from": offset,
        "size": size,
        "sort": ["_doc"],
        "track_total_hits": False,
    }
    log.debug(f"Listing query: month={month} search={search!r} page={page} per_page={per_page}")
    return query_body


def q_statistics(month: str) -> Dict[str, Any]:
    """Sum of price plus sold/unsold counts over the month, in one request."""
    return {
        "size": 0,
        "query": {"bool": {"filter": [month_filter(month)]}},
        "aggs": {
            "total_sale_amount": {"sum": {"field": "price"}},
            "sold": {"filter": {"term": {"sold": True}}},
            "unsold": {"filter": {"term": {"sold": False}}},
        },
    }


def price_bucket_filter(lower: float, upper: Optional[float], first: bool) -> Dict[str, Any]:
    bounds: Dict[str, float] = {"gte" if first else "gt": lower}
    if upper is not None:
        bounds["lte"] = upper
    return {"range": {"price": bounds}}


def q_price_range(month: str) -> Dict[str, Any]:
    """One named filter per histogram bucket, evaluated in a single search."""
    filters = {
        label: price_bucket_filter(lower, upper, first=(idx == 0))
        for idx, (label, lower, upper) in enumerate(PRICE_RANGES)
    }
    return {
        "size": 0,
        "query": {"bool": {"filter": [month_filter(month)]}},
        "aggs": {"price_ranges": {"filters": {"filters": filters}}},
    }


def q_category_breakdown(month: str, after: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Composite aggregation over ``category``; records without one form a null group.

    Args:
        month: Month number
        after: ``after_key`` of the previous page, if any
    """
    composite: Dict[str, Any] = {
        "size": CATEGORY_PAGE_SIZE,
        "sources": [
            {"category": {"terms": {"field": "category", "missing_bucket": True}}}
        ],
    }
    if after:
        composite["after"] = after
    return {
        "size": 0,
        "query": {"bool": {"filter": [month_filter(month)]}},
        "aggs": {"categories": {"composite": composite}},
    }
