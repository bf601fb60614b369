"""REST API routes for the transactions service."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from api.dependencies import StoreContext, get_month, get_store
from core.logger import get_logger
from elastic.client import health_check
from elastic.executors import (
    execute_category_breakdown,
    execute_combined,
    execute_listing,
    execute_price_range,
    execute_statistics,
)
from ingestion.seed_loader import initialize_store

log = get_logger("api/routes")

router = APIRouter()


def _failure(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@router.get("/initialize", response_class=PlainTextResponse)
def initialize(store: StoreContext = Depends(get_store)):
    """
    Reload the store from the seed dataset.

    Returns:
        Plain text status; 500 when the fetch or either store operation fails
    """
    try:
        initialize_store(
            store.client,
            store.index,
            url=store.config.dataset_url,
            timeout=store.config.dataset_timeout_seconds,
        )
    except Exception as e:
        log.exception(f"Store initialization failed: {e}")
        return PlainTextResponse("Error initializing database", status_code=500)

    return PlainTextResponse("Database initialized successfully", status_code=200)


@router.get("/transactions")
def list_transactions(
    month: str = Depends(get_month),
    search: str = Query(default="", description="Matches title, description or price"),
    page: int = Query(default=1, ge=1, description="1-based page number"),
    per_page: int = Query(default=10, ge=1, alias="perPage", description="Page size"),
    store: StoreContext = Depends(get_store),
):
    """
    List transactions for a month, optionally filtered by search text.

    Args:
        month: Month of sale
        search: Free text
        page: Page number
        per_page: Records per page
        store: Store context

    Returns:
        Array of transactions; no total count
    """
    try:
        return execute_listing(
            store.client,
            store.index,
            month=month,
            search=search,
            page=page,
            per_page=per_page,
        )
    except Exception as e:
        log.exception(f"Transaction listing failed: {e}")
        return _failure("Failed to fetch transactions")


@router.get("/statistics")
def statistics(month: str = Depends(get_month), store: StoreContext = Depends(get_store)):
    """Total sale amount and sold/unsold item counts for a month."""
    try:
        return execute_statistics(store.client, store.index, month=month).model_dump()
    except Exception as e:
        log.exception(f"Statistics failed: {e}")
        return _failure("Failed to fetch statistics")


@router.get("/price-range")
def price_range(month: str = Depends(get_month), store: StoreContext = Depends(get_store)):
    """Item counts per fixed price bucket for a month."""
    try:
        return [bucket.model_dump() for bucket in execute_price_range(store.client, store.index, month=month)]
    except Exception as e:
        log.exception(f"Price range failed: {e}")
        return _failure("Failed to fetch price range data")


@router.get("/category-breakdown")
def category_breakdown(month: str = Depends(get_month), store: StoreContext = Depends(get_store)):
    """Item counts per category for a month."""
    try:
        return [item.model_dump() for item in execute_category_breakdown(store.client, store.index, month=month)]
    except Exception as e:
        log.exception(f"Category breakdown failed: {e}")
        return _failure("Failed to fetch category breakdown")


@router.get("/combined")
def combined(month: str = Depends(get_month), store: StoreContext = Depends(get_store)):
    """Statistics, price ranges and category breakdown in one response."""
    try:
        return execute_combined(store.client, store.index, month=month).model_dump()
    except Exception as e:
        log.exception(f"Combined view failed: {e}")
        return _failure("Failed to combine data")


@router.get("/health")
def health(store: StoreContext = Depends(get_store)) -> dict:
    return {"status": "healthy", "store": "up" if health_check(store.client) else "down"}
