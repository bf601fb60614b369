from __future__ import annotations
import os
import sys
from pathlib import Path

import uvicorn

# --- Ensure project root is in path ---
ROOT_DIR = Path(__file__).resolve().parent
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

# --- Import core setup ---
from core.config import config
from core.logger import get_logger, route_stdlib_logging

log = get_logger("main")


def verify_environment() -> None:
    """Check environment prerequisites before launching the API."""
    log.info(f"Starting transactions service in '{config.environment}' mode")

    if not os.getenv("ELASTICSEARCH_URL"):
        log.warning(f"⚠️  ELASTICSEARCH_URL not set, using default {config.elasticsearch_url}")
    if config.dataset_url:
        log.info(f"Seed dataset: {config.dataset_url}")


def launch_api() -> None:
    """Run the API under uvicorn."""
    log.info(f"Launching API on {config.app_host}:{config.app_port}")
    route_stdlib_logging("uvicorn", "uvicorn.error", "uvicorn.access", "elastic_transport")

    try:
        uvicorn.run(
            "api.app:app",
            host=config.app_host,  # nosec B104
            port=config.app_port,
            log_config=None,
            log_level="trace" if config.log_level == "NOTSET" else config.log_level.lower(),
        )
    except KeyboardInterrupt:
        log.info("Transactions service stopped by user.")


def main() -> None:
    verify_environment()
    launch_api()


if __name__ == "__main__":
    main()
