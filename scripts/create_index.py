#!/usr/bin/env python3
"""
Create the transactions index with its mapping, optionally seeding it.
Run this before deploying to ensure the index exists.

Usage:
    python scripts/create_index.py [--seed]
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from core.config import config
from elastic.client import close_client, create_client
from elastic.indexer import ensure_transactions_index
from ingestion.seed_loader import initialize_store


def create_index(seed: bool = False) -> bool:
    """Create the transactions index and, with ``seed``, load the dataset."""

    logger.info("🔧 Creating Transactions Index")
    logger.info("=" * 60)
    logger.info(f"Environment: {config.environment}")
    logger.info(f"Elasticsearch: {config.elasticsearch_url}")
    logger.info(f"Transaction Index: {config.elastic_index_transactions}")
    logger.info("=" * 60)

    client = create_client(config)
    index = config.elastic_index_transactions
    try:
        created = ensure_transactions_index(client, index)
        logger.info(f"✅ Index '{index}' {'created' if created else 'already exists'}")

        if seed:
            logger.info(f"📦 Seeding from {config.dataset_url}...")
            count = initialize_store(
                client,
                index,
                url=config.dataset_url,
                timeout=config.dataset_timeout_seconds,
            )
            logger.info(f"✅ Indexed {count} transaction(s)")

        txn_count = client.count(index=index)["count"]
        logger.info(f"📊 Transaction documents: {txn_count}")
        return True
    except Exception as e:
        logger.error(f"❌ Error preparing transactions index: {e}")
        return False
    finally:
        close_client(client)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--seed", action="store_true", help="Load the seed dataset after creating the index")
    args = parser.parse_args()

    success = create_index(seed=args.seed)
    sys.exit(0 if success else 1)
