"""
Tests for schema creation, the seeding helpers and the seeding scripts.

Each test gets its own store so the shared API fixture is never touched.
"""
import json
import sqlite3

import pytest

from sbri_api import dependencies
from sbri_api.schema import TABLES, ensure_schema, missing_tables
from sbri_api.seeding import (
    VARIANTS,
    build_accounts,
    clean_company,
    seed_company,
    seed_sector_benchmark,
    set_sic_region,
    store_score,
    upsert_sector_stats,
    upsert_thresholds,
)


@pytest.fixture
def store():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    ensure_schema(conn)
    yield conn
    conn.close()


def count(conn, table, company_number=None):
    if company_number is None:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    return conn.execute(
        f"SELECT COUNT(*) FROM {table} WHERE company_number = ?", (company_number,)
    ).fetchone()[0]


class TestSchema:
    def test_all_tables_created(self, store):
        assert missing_tables(store) == []

    def test_idempotent(self, store):
        ensure_schema(store)
        assert missing_tables(store) == []

    def test_missing_tables_on_empty_store(self):
        conn = sqlite3.connect(":memory:")
        assert missing_tables(conn) == list(TABLES)
        conn.close()


class TestAccounts:
    def test_three_year_trail(self):
        """Turnover grows per year; profit, assets and liabilities derive from it."""
        docs = build_accounts("1", VARIANTS["tech-london"]["accounts"])
        assert [d["period_end"] for d in docs] == ["2022-03-31", "2023-03-31", "2024-03-31"]
        assert [d["turnover"] for d in docs] == [1100000, 1232000, 1379840]
        assert docs[2]["profit"] == 165581
        assert docs[0]["assets"] == 891000
        assert docs[0]["liabilities"] == 490050

    def test_shrinking_turnover(self):
        docs = build_accounts("1", VARIANTS["retail-northwest"]["accounts"])
        assert [d["turnover"] for d in docs] == [900000, 873000, 846810]


class TestSeedCompany:
    def test_seeds_every_table(self, store):
        summary = seed_company(store, "00000007", "Midlands Foundry Ltd", "manufacturing-midlands")
        assert summary["sic_code"] == "28290"
        assert count(store, "profiles", "00000007") == 1
        assert count(store, "business_profiles", "00000007") == 1
        assert count(store, "financial_accounts", "00000007") == 3
        assert count(store, "filings", "00000007") == 2
        assert count(store, "insolvency_notices", "00000007") == 1
        assert count(store, "director_changes", "00000007") == 3
        assert count(store, "ccj_details", "00000007") == 2
        assert count(store, "sector_stats") == 1

    def test_reseed_does_not_duplicate(self, store):
        seed_company(store, "00000006", "SBRI Test Co Ltd")
        seed_company(store, "00000006", "SBRI Test Co Ltd")
        assert count(store, "financial_accounts", "00000006") == 3
        assert count(store, "director_changes", "00000006") == 3
        assert count(store, "ccj_details", "00000006") == 1
        assert count(store, "sector_stats") == 1

    def test_overrides(self, store):
        seed_company(store, "00000006", "Override Ltd", "tech-london", sic="70229", region="Wales")
        row = store.execute("SELECT sic_codes, region FROM profiles").fetchone()
        assert json.loads(row["sic_codes"]) == ["70229"]
        assert row["region"] == "Wales"
        stats = store.execute("SELECT sic_code, region FROM sector_stats").fetchone()
        assert (stats["sic_code"], stats["region"]) == ("70229", "Wales")

    def test_unknown_variant(self, store):
        with pytest.raises(ValueError, match="Unknown variant"):
            seed_company(store, "1", "X", "bakery-cornwall")


class TestCleanCompany:
    def test_removes_only_that_company(self, store):
        seed_company(store, "00000006", "A Ltd")
        seed_company(store, "00000008", "B Ltd", "retail-northwest")
        store_score(store, "00000006", 50, [])
        deleted = clean_company(store, "00000006")
        assert deleted["financial_accounts"] == 3
        assert deleted["risk_scores"] == 1
        assert count(store, "profiles") == 1
        assert count(store, "filings", "00000008") == 2

    def test_unknown_company(self, store):
        assert set(clean_company(store, "nope").values()) == {0}


class TestSicRegionAndBenchmark:
    def test_set_sic_region(self, store):
        seed_company(store, "00000006", "A Ltd")
        set_sic_region(store, "00000006", "47190", "North West")
        row = store.execute("SELECT sic_codes, region FROM profiles").fetchone()
        assert json.loads(row["sic_codes"]) == ["47190"]
        assert row["region"] == "North West"

    def test_set_sic_region_unknown(self, store):
        with pytest.raises(LookupError):
            set_sic_region(store, "00000006", "47190", "North West")

    def test_benchmark_copies_latest_stats(self, store):
        seed_company(store, "00000006", "A Ltd")
        upsert_sector_stats(store, "62020", "London", "2025Q2", 0.1, 0.025, 1500)
        benchmark = seed_sector_benchmark(store, "00000006")
        assert benchmark["period"] == "2025Q2"
        assert benchmark["failure_rate"] == 0.025
        assert count(store, "sector_benchmarks") == 1

    def test_benchmark_without_profile(self, store):
        with pytest.raises(LookupError, match="No profile"):
            seed_sector_benchmark(store, "00000006")

    def test_benchmark_without_stats(self, store):
        seed_company(store, "00000006", "A Ltd")
        set_sic_region(store, "00000006", "11111", "Nowhere")
        with pytest.raises(LookupError, match="No sector stats"):
            seed_sector_benchmark(store, "00000006")


class TestThresholdsAndScores:
    def test_upsert_thresholds_any_region(self, store):
        """NULL region rows are updated in place, not duplicated."""
        upsert_thresholds(store, "62020", 80, 50)
        upsert_thresholds(store, "62020", 75, 45)
        rows = store.execute("SELECT high, medium, region FROM risk_thresholds").fetchall()
        assert [(r["high"], r["medium"], r["region"]) for r in rows] == [(75, 45, None)]

    def test_region_and_code_rows_coexist(self, store):
        upsert_thresholds(store, "62020", 80, 50)
        upsert_thresholds(store, "62020", 60, 30, region="London")
        assert count(store, "risk_thresholds") == 2

    def test_store_score(self, store):
        store_score(store, "00000006", 85, ["x"])
        row = store.execute("SELECT score, reasons FROM risk_scores").fetchone()
        assert row["score"] == 85
        assert json.loads(row["reasons"]) == ["x"]


class TestScripts:
    """The CLI entry points, run against a temporary file store."""

    @pytest.fixture
    def db_file(self, tmp_path, monkeypatch):
        path = tmp_path / "cli.db"
        # Scripts repoint dependencies.DB_PATH; undo it after the test
        monkeypatch.setattr(dependencies, "DB_PATH", dependencies.DB_PATH)
        return path

    def _count(self, path, table):
        conn = sqlite3.connect(str(path))
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        finally:
            conn.close()

    def test_init_db_reseed(self, db_file):
        import init_db

        assert init_db.main(["--db", str(db_file), "--reseed", "00000006"]) == 0
        assert self._count(db_file, "profiles") == 1
        assert self._count(db_file, "sector_benchmarks") == 1

    def test_seed_company_clean_only(self, db_file):
        import seed_company as script

        assert script.main(["00000006", "--db", str(db_file)]) == 0
        assert self._count(db_file, "filings") == 2
        assert script.main(["00000006", "--db", str(db_file), "--clean-only"]) == 0
        assert self._count(db_file, "filings") == 0

    def test_seed_sector_stats_requires_target(self, db_file):
        import seed_sector_stats

        with pytest.raises(SystemExit):
            seed_sector_stats.main(["--db", str(db_file), "--sic", "62020"])

    def test_seed_sector_stats_from_unknown_company(self, db_file):
        import seed_sector_stats

        assert seed_sector_stats.main(["--db", str(db_file), "--from-company", "00000006"]) == 1

    def test_seed_sic_region_unknown_company(self, db_file):
        import init_db
        import seed_sic_region

        init_db.main(["--db", str(db_file)])
        assert seed_sic_region.main(["00000006", "--sic", "1", "--region", "X", "--db", str(db_file)]) == 1

    def test_seed_scores(self, db_file):
        import seed_scores

        assert seed_scores.main(["--db", str(db_file), "thresholds", "62020", "--high", "80", "--medium", "50"]) == 0
        assert seed_scores.main(["--db", str(db_file), "score", "00000006", "85", "--reason", "x"]) == 0
        assert self._count(db_file, "risk_thresholds") == 1
        assert self._count(db_file, "risk_scores") == 1
