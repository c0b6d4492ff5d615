"""
Sector domain service.

Sector statistics are keyed by SIC code, region and reporting period. The
latest period wins, and a region-specific row is preferred over any other
row for the same code.
"""
from __future__ import annotations

import sqlite3

import structlog

from .base_service import BaseService
from .query_builder import QueryBuilder

logger = structlog.get_logger("sbri.services.sector")

SECTOR_COLUMNS = "sic_code, region, period, avg_margin, failure_rate, sample_size, updated_at"


class SectorService(BaseService):
    """Business logic for sector statistics and per-company benchmarks."""

    def _latest_stats_row(
        self,
        conn: sqlite3.Connection,
        sic_code: str,
        region: str | None = None,
    ) -> sqlite3.Row | None:
        qb = (
            QueryBuilder("sector_stats")
            .filter_sic(sic_code)
            .filter_region(region)
            .order_by("period DESC, id DESC")
            .limit(1)
        )
        sql, params = qb.build_select(SECTOR_COLUMNS)
        return self._execute_one(conn, sql, params)

    def get_sector_stats(
        self,
        conn: sqlite3.Connection,
        sic_code: str | None,
        region: str | None = None,
    ) -> dict | None:
        """Latest stats for the code, preferring the given region."""
        if not sic_code:
            return None

        if region:
            row = self._latest_stats_row(conn, sic_code, region)
            if row is not None:
                return dict(row)

        row = self._latest_stats_row(conn, sic_code)
        if row is None:
            logger.info("sector_stats_missing", sic_code=sic_code, region=region)
            return None
        return dict(row)

    def get_company_benchmark(self, conn: sqlite3.Connection, company_number: str) -> dict | None:
        row = self._execute_one(
            conn,
            f"""
            SELECT company_number, {SECTOR_COLUMNS}
            FROM sector_benchmarks
            WHERE company_number = ?
            """,
            (str(company_number),),
        )
        return dict(row) if row is not None else None


# Singleton instance for router use
sector_service = SectorService()
