"""
Elasticsearch index management and document indexing.

Provides functions for:
- Creating the transactions index with its mapping
- Removing every document from the index
- Bulk indexing documents
"""
from __future__ import annotations
import time
from typing import Any, Dict, List, Optional

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError
from elasticsearch.helpers import bulk

from core.logger import get_logger
from .mappings import mapping_transactions

log = get_logger("elastic/indexer")


def ensure_transactions_index(client: Elasticsearch, index_name: str) -> bool:
    """
    Ensure the transactions index exists, creating it if necessary.

    Args:
        client: Elasticsearch client
        index_name: Name of the transactions index

    Returns:
        bool: True if the index was created, False if it already existed

    Raises:
        ApiError: If index creation fails
    """
    log.info(f"Ensuring transactions index exists: {index_name}")

    try:
        if client.indices.exists(index=index_name):
            log.info(f"Transactions index already exists: {index_name}")
            return False

        client.indices.create(index=index_name, body=mapping_transactions())
        log.info(f"Successfully created transactions index: {index_name}")
        return True

    except ApiError as e:
        log.opt(exception=True).error(
            f"Elasticsearch API error creating transactions index {index_name}: {e}"
        )
        raise


def delete_all(client: Elasticsearch, index: str) -> int:
    """
    Delete every document in ``index`` and refresh it.

    Returns:
        int: Number of deleted documents
    """
    response = client.delete_by_query(
        index=index,
        query={"match_all": {}},
        refresh=True,
        conflicts="proceed",
    )
    deleted = response.get("deleted", 0)
    log.info(f"Deleted {deleted} document(s) from {index}")
    return deleted


def bulk_index(
    client: Elasticsearch,
    index: str,
    docs: List[Dict[str, Any]],
    *,
    id_field: Optional[str] = None,
) -> int:
    """
    Bulk index documents into Elasticsearch.

    Handles partial failures by logging each failed item and raising once
    the whole batch has been sent.

    Args:
        client: Elasticsearch client
        index: Target index name
        docs: List of document dictionaries to index
        id_field: Optional field name to use as document ID

    Returns:
        int: Number of successfully indexed documents

    Raises:
        RuntimeError: If any document failed to index

    Examples:
        >>> docs = [{"id": 1, "title": "Backpack"}, {"id": 2, "title": "Jacket"}]
        >>> bulk_index(client, "product-transactions", docs, id_field="id")
        2
    """
    start_time = time.time()

    if not docs:
        log.debug("No documents to index, skipping bulk operation")
        return 0

    log.info(
        f"Starting bulk index operation: index={index} "
        f"doc_count={len(docs)} id_field={id_field or 'auto'}"
    )

    actions = []
    for d in docs:
        action = {
            "_op_type": "index",
            "_index": index,
            "_source": d,
        }
        if id_field and d.get(id_field) is not None:
            action["_id"] = str(d[id_field])
        actions.append(action)

    ok, details = bulk(client, actions, raise_on_error=False, stats_only=False, refresh="wait_for")

    failed = []
    if isinstance(details, list):
        for item in details:
            meta = item.get("index") or item.get("create") or {}
            if meta.get("status", 200) >= 300:
                failed.append(meta)

    elapsed = time.time() - start_time

    if failed:
        for i, f in enumerate(failed[:10]):
            log.error(
                f"Bulk failure {i+1}: "
                f"status={f.get('status')} "
                f"id={f.get('_id', 'N/A')} "
                f"error={f.get('error', 'Unknown error')}"
            )
        if len(failed) > 10:
            log.error(f"... and {len(failed) - 10} more failures (not shown)")
        raise RuntimeError(f"{len(failed)} of {len(actions)} document(s) failed to index into {index}")

    log.info(
        f"Bulk index completed: index={index} "
        f"success={ok}/{len(actions)} elapsed={elapsed:.2f}s"
    )
    return ok


def replace_all(client: Elasticsearch, index: str, docs: List[Dict[str, Any]]) -> int:
    """
    Replace the whole index contents with ``docs``.

    Not atomic: readers between the delete and the insert see an empty or
    partially filled index, and a failed insert leaves it that way.
    """
    ensure_transactions_index(client, index)
    delete_all(client, index)
    return bulk_index(client, index, docs, id_field="id")
