"""Elasticsearch client construction and health checking."""
from __future__ import annotations

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ConnectionError as ESConnectionError

from core.config import AppConfig
from core.logger import get_logger

log = get_logger("elastic/client")


def create_client(cfg: AppConfig) -> Elasticsearch:
    """
    Build an Elasticsearch client from configuration.

    The caller owns the returned client and must close it on shutdown.

    Args:
        cfg: Application configuration

    Returns:
        Elasticsearch: Configured Elasticsearch client

    Raises:
        RuntimeError: If the store URL is not configured or the client cannot be built
    """
    if not cfg.elasticsearch_url:
        error_msg = "ELASTICSEARCH_URL is not configured"
        log.error(error_msg)
        raise RuntimeError(error_msg)

    log.info(f"Initializing Elasticsearch client for {cfg.elasticsearch_url}")

    try:
        kwargs = {
            "request_timeout": cfg.elastic_request_timeout,
            "retry_on_timeout": True,
            "max_retries": 3,
        }
        if cfg.elastic_api_key:
            kwargs["api_key"] = cfg.elastic_api_key
        return Elasticsearch(cfg.elasticsearch_url, **kwargs)
    except Exception as e:
        log.opt(exception=True).error(
            f"Unexpected error initializing Elasticsearch client: {type(e).__name__}: {e}"
        )
        raise RuntimeError(f"Failed to initialize Elasticsearch client: {e}")


def log_cluster_info(client: Elasticsearch) -> None:
    """Log cluster name and version; a down cluster is reported, not raised."""
    try:
        info = client.info()
        cluster_name = info.get("cluster_name", "unknown")
        version = info.get("version", {}).get("number", "unknown")
        log.info(f"Elasticsearch connected: cluster={cluster_name} version={version}")
    except ESConnectionError as e:
        log.error(f"Failed to connect to Elasticsearch: {e}")
    except Exception as e:
        log.error(f"Could not read Elasticsearch cluster info: {type(e).__name__}: {e}")


def close_client(client: Elasticsearch) -> None:
    log.info("Closing Elasticsearch client")
    try:
        client.close()
    except Exception as e:
        log.warning(f"Error closing Elasticsearch client: {e}")


def health_check(client: Elasticsearch) -> bool:
    """
    Check if the Elasticsearch cluster is reachable and healthy.

    Returns:
        bool: True if cluster status is green or yellow, False otherwise
    """
    try:
        health = client.cluster.health()
        status = health.get("status", "unknown")

        log.debug(f"Elasticsearch cluster health: {status}")

        return status in ("green", "yellow")

    except Exception as e:
        log.error(f"Elasticsearch health check failed: {e}")
        return False
