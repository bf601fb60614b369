"""Dependency injection for the transactions API."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from elasticsearch import Elasticsearch
from fastapi import HTTPException, Query, Request

from core.config import AppConfig


@dataclass
class StoreContext:
    """Long-lived store handle shared by every request."""

    client: Elasticsearch
    index: str
    config: AppConfig


def get_store(request: Request) -> StoreContext:
    """
    Get the store context created at startup.

    Returns:
        StoreContext held on the application state
    """
    return request.app.state.store


def get_month(month: Optional[str] = Query(default=None, description="Month of sale, 1-12")) -> str:
    """
    Required ``month`` query parameter.

    Raises:
        HTTPException: 400 if the parameter is absent or blank
    """
    if month is None or not month.strip():
        raise HTTPException(status_code=400, detail="month query parameter is required")
    return month.strip()
