"""Pytest configuration and fixtures."""
import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from core.config import AppConfig
from models.transaction import TransactionDoc
from tests.fakes import INDEX, FakeElasticsearch, fake_bulk


@pytest.fixture
def cfg(tmp_path):
    return AppConfig(
        environment="test",
        elastic_index_transactions=INDEX,
        dataset_url="https://example.test/product_transaction.json",
        dataset_timeout_seconds=2,
        logs_dir=tmp_path / "logs",
    )

@pytest.fixture
def fake_es(monkeypatch):
    """Fake store; bulk writes from the indexer land in it."""
    monkeypatch.setattr("elastic.indexer.bulk", fake_bulk)
    return FakeElasticsearch()

@pytest.fixture
def seed(fake_es):
    """Insert transactions the same way the loader stores them."""

    def _seed(*records):
        for record in records:
            doc = TransactionDoc.model_validate(record).to_source()
            fake_es.index_doc(doc, str(doc["id"]) if "id" in doc else None)

    return _seed

@pytest.fixture
def api(cfg, fake_es):
    app = create_app(cfg, client=fake_es)
    with TestClient(app) as client:
        yield client

