"""Execute transaction queries and transform Elasticsearch responses."""
from __future__ import annotations
from typing import Any, Dict, List

from elasticsearch import Elasticsearch

from core.logger import get_logger
from models.transaction import CategoryCount, CombinedView, PriceRangeCount, Statistics
from elastic.query_builders import (
    MAX_RESULT_WINDOW,
    PRICE_RANGES,
    q_category_breakdown,
    q_listing,
    q_price_range,
    q_statistics,
)

log = get_logger("elastic/executors")


def execute_listing(
    client: Elasticsearch,
    index: str,
    *,
    month: str,
    search: str = "",
    page: int = 1,
    per_page: int = 10,
) -> List[Dict[str, Any]]:
    """
    Return one page of transactions matching the month and search text.

    Each item is the stored document plus its ``_id``. An empty page is an
    empty list, never an error, including pages that start past the
    store's result window.
    """
    if (page - 1) * per_page >= MAX_RESULT_WINDOW:
        log.info(f"Listing page starts past the result window: month={month} page={page} per_page={per_page}")
        return []

    query = q_listing(month, search=search, page=page, per_page=per_page)
    response = client.search(index=index, body=query)

    hits = response.get("hits", {}).get("hits", [])
    results = [{"_id": hit.get("_id"), **hit.get("_source", {})} for hit in hits]

    log.info(f"Listing returned {len(results)} transaction(s): month={month} page={page}")
    return results


def execute_statistics(client: Elasticsearch, index: str, *, month: str) -> Statistics:
    """
    Sale total and sold/unsold counts for a month.

    Returns:
        Statistics with ``totalSaleAmount`` 0 when no record matches
    """
    response = client.search(index=index, body=q_statistics(month))
    aggs = response.get("aggregations", {})

    stats = Statistics(
        totalSaleAmount=aggs.get("total_sale_amount", {}).get("value", 0.0) or 0,
        totalSoldItems=aggs.get("sold", {}).get("doc_count", 0),
        totalUnsoldItems=aggs.get("unsold", {}).get("doc_count", 0),
    )
    log.info(f"Statistics for month={month}: {stats.model_dump()}")
    return stats


def execute_price_range(client: Elasticsearch, index: str, *, month: str) -> List[PriceRangeCount]:
    """Histogram counts in the fixed bucket order."""
    response = client.search(index=index, body=q_price_range(month))
    buckets = (
        response.get("aggregations", {})
        .get("price_ranges", {})
        .get("buckets", {})
    )

    result = [
        PriceRangeCount(range=label, count=buckets.get(label, {}).get("doc_count", 0))
        for label, _, _ in PRICE_RANGES
    ]
    log.debug(f"Price ranges for month={month}: {[r.count for r in result]}")
    return result


def execute_category_breakdown(client: Elasticsearch, index: str, *, month: str) -> List[CategoryCount]:
    """
    Record count per category for a month.

    Pages through the composite aggregation until every category is read.
    Records without a category are reported under ``None``.
    """
    categories: List[CategoryCount] = []
    after = None

    while True:
        response = client.search(index=index, body=q_category_breakdown(month, after=after))
        agg = response.get("aggregations", {}).get("categories", {})
        buckets = agg.get("buckets", [])

        for bucket in buckets:
            categories.append(
                CategoryCount(
                    category=bucket.get("key", {}).get("category"),
                    count=bucket.get("doc_count", 0),
                )
            )

        after = agg.get("after_key")
        if not buckets or not after:
            break

    log.info(f"Category breakdown for month={month}: {len(categories)} categor(ies)")
    return categories


def execute_combined(client: Elasticsearch, index: str, *, month: str) -> CombinedView:
    """
    Statistics, price histogram and category breakdown for one month.

    The three reads are independent; any failure propagates and no partial
    view is returned.
    """
    return CombinedView(
        statistics=execute_statistics(client, index, month=month),
        priceRange=execute_price_range(client, index, month=month),
        categoryBreakdown=execute_category_breakdown(client, index, month=month),
    )
