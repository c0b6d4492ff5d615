"""
Pytest fixtures for API tests.

A temporary sqlite store is created once per session, seeded through
sbri_api.seeding and patched into sbri_api.dependencies.DB_PATH.
"""
import os

# Generous budgets so the suite never trips the rate limiter
os.environ.setdefault("RATE_LIMIT_DEFAULT", "10000/minute")
os.environ.setdefault("RATE_LIMIT_SEARCH", "10000/minute")

import sqlite3

import pytest
from fastapi.testclient import TestClient

from sbri_api import dependencies
from sbri_api.schema import ensure_schema
from sbri_api.seeding import (
    seed_company,
    seed_sector_benchmark,
    store_score,
    upsert_sector_stats,
    upsert_thresholds,
)

TECH = "00000006"          # tech-london, computed score 14 (low)
MIDLANDS = "00000007"      # manufacturing-midlands, region thresholds make 31 high
RETAIL = "00000008"        # retail-northwest, computed score 53 (medium)
STORED = "00000009"        # stored score 85 with reasons ['x']
NO_ACCOUNTS = "00000010"   # no accounts, failure rate 0.10, status only on business profile
SCOTLAND = "00000011"      # manufacturing in another region, code-only thresholds apply
UNKNOWN = "99999999"


def seed_store(conn: sqlite3.Connection) -> None:
    ensure_schema(conn)

    seed_company(conn, TECH, "SBRI Test Co Ltd", "tech-london")
    seed_sector_benchmark(conn, TECH)

    seed_company(conn, MIDLANDS, "Midlands Foundry Ltd", "manufacturing-midlands")
    upsert_thresholds(conn, "28290", high=30, medium=10, region="West Midlands")
    upsert_thresholds(conn, "28290", high=90, medium=80)

    seed_company(conn, SCOTLAND, "Clyde Engineering Ltd", "manufacturing-midlands", region="Scotland")

    seed_company(conn, RETAIL, "Northwest Retail Ltd", "retail-northwest")

    seed_company(conn, STORED, "Stored Score Ltd", "tech-london")
    store_score(conn, STORED, 85, ["x"])

    seed_company(conn, NO_ACCOUNTS, "Dormant Trading Ltd", "retail-northwest", sic="99999", region="Nowhere")
    upsert_sector_stats(conn, "99999", "Nowhere", "2025Q1", 0.02, 0.10, 12)
    conn.execute("DELETE FROM financial_accounts WHERE company_number = ?", (NO_ACCOUNTS,))
    conn.execute("UPDATE profiles SET status = NULL WHERE company_number = ?", (NO_ACCOUNTS,))
    conn.execute("UPDATE business_profiles SET status = 'ACTIVE ' WHERE company_number = ?", (NO_ACCOUNTS,))
    conn.commit()


@pytest.fixture(scope="session")
def db_path(tmp_path_factory):
    """Seeded sqlite store used by every API test."""
    path = tmp_path_factory.mktemp("store") / "sbri_test.db"
    conn = sqlite3.connect(str(path))
    try:
        seed_store(conn)
    finally:
        conn.close()

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(dependencies, "DB_PATH", path)
        yield path


@pytest.fixture
def conn(db_path):
    """Read connection to the seeded store, closed after the test."""
    connection = dependencies.get_db_connection()
    yield connection
    connection.close()


@pytest.fixture(scope="module")
def client(db_path):
    """Create a test client for the FastAPI app."""
    from sbri_api.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="module")
def base_url():
    """Base URL for API v1 endpoints."""
    return "/api/v1"


@pytest.fixture
def empty_conn():
    """In-memory store with the schema but no rows."""
    connection = sqlite3.connect(":memory:")
    connection.row_factory = sqlite3.Row
    ensure_schema(connection)
    yield connection
    connection.close()
