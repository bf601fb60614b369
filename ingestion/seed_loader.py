"""
Seed dataset loader.

Fetches the product transaction dataset over HTTP and replaces the contents
of the transactions index with it.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional

import httpx
from elasticsearch import Elasticsearch
from pydantic import ValidationError

from core.logger import get_logger
from elastic.indexer import replace_all
from models.transaction import TransactionDoc

log = get_logger("ingestion/seed_loader")


class DatasetFetchError(Exception):
    """The seed dataset could not be downloaded or is not a list of transactions."""


def fetch_dataset(
    url: str,
    *,
    timeout: float,
    http_client: Optional[httpx.Client] = None,
) -> List[Dict[str, Any]]:
    """
    Download the seed dataset and return its raw items.

    Args:
        url: Location of the JSON array
        timeout: Request timeout in seconds
        http_client: Optional client to reuse (tests inject a mock transport)

    Raises:
        DatasetFetchError: On network errors, non-2xx status or a payload that
            is not a JSON array
    """
    log.info(f"Fetching seed dataset: {url}")

    owns_client = http_client is None
    client = http_client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = client.get(url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPError as e:
        log.error(f"Seed dataset request failed: {type(e).__name__}: {e}")
        raise DatasetFetchError(f"Failed to fetch dataset from {url}: {e}") from e
    except ValueError as e:
        log.error(f"Seed dataset is not valid JSON: {e}")
        raise DatasetFetchError(f"Dataset at {url} is not valid JSON") from e
    finally:
        if owns_client:
            client.close()

    if not isinstance(payload, list):
        raise DatasetFetchError(f"Expected a JSON array from {url}, got {type(payload).__name__}")

    log.info(f"Fetched {len(payload)} raw transaction(s)")
    return payload


def to_documents(items: List[Any]) -> List[Dict[str, Any]]:
    """
    Coerce raw dataset items into store documents.

    Raises:
        DatasetFetchError: If an item cannot be read as a transaction
    """
    docs = []
    for position, item in enumerate(items):
        try:
            docs.append(TransactionDoc.model_validate(item).to_source())
        except ValidationError as e:
            raise DatasetFetchError(f"Dataset item {position} is not a transaction: {e}") from e
    return docs


def initialize_store(
    client: Elasticsearch,
    index: str,
    *,
    url: str,
    timeout: float,
    http_client: Optional[httpx.Client] = None,
) -> int:
    """
    Replace every stored transaction with the current seed dataset.

    The dataset is fully fetched and validated before anything is deleted.
    The delete and the insert are separate store operations.

    Returns:
        int: Number of indexed transactions
    """
    items = fetch_dataset(url, timeout=timeout, http_client=http_client)
    docs = to_documents(items)

    indexed = replace_all(client, index, docs)
    log.info(f"Store initialized: index={index} documents={indexed}")
    return indexed
