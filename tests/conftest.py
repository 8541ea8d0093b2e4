# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
from typing import Dict
from unittest.mock import MagicMock


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_product() -> Dict:
    """A direct-sale product with stock"""
    return {
        "id": "p1",
        "name": "Silk Wrap",
        "price": 450.0,
        "categoryId": "c1",
        "isDirectSale": True,
        "stockQuantity": 5,
        "media": [{"id": "m1", "url": "https://cdn.example.com/wrap.jpg", "type": "image"}],
        "reviews": [],
    }


@pytest.fixture
def sample_products(sample_product):
    """Three products, only the first sold directly"""
    return [
        sample_product,
        {"id": "p2", "name": "Cashmere Scarf", "price": 1200.0, "isDirectSale": False, "reviews": []},
        {"id": "p3", "name": "Linen Tote", "price": 300.0, "isDirectSale": True, "stockQuantity": 1},
    ]


@pytest.fixture
def shipping() -> Dict:
    """Checkout shipping form"""
    return {
        "fullName": "Thandi Mokoena",
        "email": "thandi@example.com",
        "address": "12 Long Street",
        "city": "Cape Town",
        "zipCode": "8001",
    }


# =============================================================================
# LOCAL STORE FIXTURES
# =============================================================================

@pytest.fixture
def local_store(tmp_path):
    """Fresh SQLite-backed local store per test"""
    from bridge_core.offline.local_store import LocalStore

    store = LocalStore(tmp_path / "bridge_test.db")
    yield store
    store.close()


# =============================================================================
# MOCK SUPABASE FIXTURES
# =============================================================================

@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client returning empty results for every table call"""
    mock_client = MagicMock()
    query = mock_client.table.return_value
    query.select.return_value.execute.return_value.data = []
    query.select.return_value.range.return_value.execute.return_value.data = []
    query.select.return_value.eq.return_value.limit.return_value.execute.return_value.data = []
    query.select.return_value.limit.return_value.execute.return_value.data = []
    query.select.return_value.limit.return_value.execute.return_value.count = 0
    query.upsert.return_value.execute.return_value.data = []
    query.insert.return_value.execute.return_value.data = []
    query.delete.return_value.eq.return_value.execute.return_value.data = []
    mock_client.auth.get_session.return_value = None
    return mock_client


def make_table_client(tables: Dict[str, object]):
    """
    Client whose table(name) returns a per-table mock.

    Values are row lists (fetches return them) or exceptions (every call
    on that table raises).
    """
    client = MagicMock()
    mocks = {}

    def table(name):
        if name not in mocks:
            mock_table = MagicMock()
            value = tables.get(name, [])
            if isinstance(value, Exception):
                mock_table.select.return_value.range.return_value.execute.side_effect = value
                mock_table.upsert.return_value.execute.side_effect = value
                mock_table.delete.return_value.eq.return_value.execute.side_effect = value
                mock_table.insert.return_value.execute.side_effect = value
            else:
                mock_table.select.return_value.range.return_value.execute.return_value.data = value
                mock_table.upsert.return_value.execute.return_value.data = []
                mock_table.insert.return_value.execute.return_value.data = []
            mocks[name] = mock_table
        return mocks[name]

    client.table.side_effect = table
    client.tables = mocks
    return client


@pytest.fixture
def table_client_factory():
    """Factory for per-table mock clients"""
    return make_table_client


class PostgrestLikeError(Exception):
    """Exception carrying a PostgREST error code"""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code


@pytest.fixture
def missing_table_error():
    return PostgrestLikeError("Could not find the table 'public.products' in the schema cache", code="PGRST205")


@pytest.fixture
def permission_error():
    return PostgrestLikeError("new row violates row-level security policy", code="42501")


# =============================================================================
# GATEWAY / STORE FIXTURES
# =============================================================================

@pytest.fixture
def offline_gateway(local_store, tmp_path):
    """Gateway with no remote backend"""
    from bridge_core.offline.remote_gateway import RemoteGateway

    return RemoteGateway(None, local_store, media_dir=tmp_path / "media")


@pytest.fixture
def online_gateway(local_store, mock_supabase_client, tmp_path):
    """Gateway backed by the mock Supabase client"""
    from bridge_core.offline.remote_gateway import RemoteGateway

    return RemoteGateway(mock_supabase_client, local_store, media_dir=tmp_path / "media")


@pytest.fixture
def store_config(tmp_path):
    from bridge_core.config import StoreConfig

    return StoreConfig(
        local_db_path=tmp_path / "bridge_test.db",
        media_dir=tmp_path / "media",
        status_reset_seconds=None,
        local_save_delay=0,
        refresh_workers=2,
    )


@pytest.fixture
def tracker():
    """Status tracker without the auto-reset timer"""
    from bridge_core.services.mutations import SaveStatusTracker

    return SaveStatusTracker(reset_seconds=None)


@pytest.fixture
def offline_store(offline_gateway, local_store, store_config, tracker):
    """Sync store in local-only mode"""
    from bridge_core.offline.sync_store import SyncStore

    store = SyncStore(offline_gateway, local_store, store_config, tracker)
    store.hydrate()
    return store


@pytest.fixture
def online_store(online_gateway, local_store, store_config, tracker):
    """Sync store backed by the mock Supabase client"""
    from bridge_core.offline.sync_store import SyncStore

    store = SyncStore(online_gateway, local_store, store_config, tracker)
    store.hydrate()
    return store
