"""Transactions service REST API application."""
from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Optional

from elasticsearch import Elasticsearch
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.dependencies import StoreContext
from api.routes import router
from core.config import AppConfig, config
from core.logger import get_logger
from elastic.client import close_client, create_client, log_cluster_info
from elastic.indexer import ensure_transactions_index

log = get_logger("api/app")


def create_app(cfg: Optional[AppConfig] = None, client: Optional[Elasticsearch] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        cfg: Configuration; the module-level config when omitted
        client: Store client to use instead of building one from ``cfg``.
            A client passed in is not closed on shutdown.
    """
    cfg = cfg or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(f"Transactions service starting up in '{cfg.environment}' mode")

        owns_client = client is None
        store_client = client if client is not None else create_client(cfg)
        app.state.store = StoreContext(
            client=store_client,
            index=cfg.elastic_index_transactions,
            config=cfg,
        )

        log_cluster_info(store_client)
        try:
            ensure_transactions_index(store_client, cfg.elastic_index_transactions)
        except Exception as e:
            # Keep serving; /initialize creates the index once the store is reachable
            log.error(f"Could not ensure transactions index at startup: {e}")

        log.info(f"Service ready on port {cfg.app_port}")

        yield

        log.info("Transactions service shutting down...")
        if owns_client:
            close_client(store_client)

    app = FastAPI(
        title="Product Transactions Service",
        description="Monthly listing and statistics over product transactions",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "query")
        message = first.get("msg", "invalid request")
        log.warning(f"Rejected request {request.url.path}: {location} {message}")
        return JSONResponse(
            status_code=400,
            content={"error": f"{location}: {message}" if location else message},
        )

    app.include_router(router)
    return app


app = create_app()
