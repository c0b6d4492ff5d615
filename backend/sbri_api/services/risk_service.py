"""
Risk domain service.

Gathers everything the scoring engine needs for one company (latest
financial snapshot, sector benchmark, applicable thresholds, any stored
score), normalizes it and calls the engine. The engine itself never touches
the store.
"""
from __future__ import annotations

import sqlite3

import structlog

from .base_service import BaseService
from .company_service import company_service
from .normalize import primary_sic_code, to_financial_snapshot, to_sector_benchmark
from .risk_engine import (
    StoredScore,
    ThresholdRecord,
    resolve_thresholds,
    score_company,
    to_number,
)
from .sector_service import sector_service

logger = structlog.get_logger("sbri.services.risk")


class RiskService(BaseService):
    """Lookups around the risk engine."""

    def load_threshold_records(
        self,
        conn: sqlite3.Connection,
        sic_code: str | None,
    ) -> list[ThresholdRecord]:
        """All thresholds rows for a code, newest first."""
        if not sic_code:
            return []
        rows = self._execute_many(
            conn,
            """
            SELECT sic_code, region, high, medium
            FROM risk_thresholds
            WHERE sic_code = ?
            ORDER BY updated_at DESC, id DESC
            """,
            (str(sic_code),),
        )
        return [
            ThresholdRecord(
                sic_code=row["sic_code"],
                region=row["region"],
                high=to_number(row["high"]) if row["high"] is not None else None,
                medium=to_number(row["medium"]) if row["medium"] is not None else None,
            )
            for row in rows
        ]

    def get_stored_score(self, conn: sqlite3.Connection, company_number: str) -> StoredScore | None:
        """Most recently updated stored score for the company, if any."""
        row = self._execute_one(
            conn,
            """
            SELECT score, reasons, updated_at
            FROM risk_scores
            WHERE company_number = ?
            ORDER BY updated_at DESC, id DESC
            LIMIT 1
            """,
            (str(company_number),),
        )
        if row is None:
            return None
        return StoredScore(
            score=row["score"],
            reasons=self._load_json(row["reasons"], []),
            updated_at=row["updated_at"],
        )

    def score(self, conn: sqlite3.Connection, company_number: str) -> dict | None:
        """
        Score one company.

        Returns None for an unknown company so the caller can answer "not
        found" without ever invoking the engine.
        """
        profile = company_service.get_company(conn, company_number)
        if profile is None:
            return None

        sic_code = primary_sic_code(profile)
        region = profile.get("region")

        thresholds = resolve_thresholds(
            self.load_threshold_records(conn, sic_code), sic_code, region
        )
        logger.debug(
            "thresholds_resolved",
            sic_code=sic_code,
            region=region,
            high=thresholds.high,
            medium=thresholds.medium,
        )
        stored = self.get_stored_score(conn, company_number)

        if stored is not None:
            snapshot = benchmark = None
            logger.info("stored_score_used", company_number=company_number, updated_at=stored.updated_at)
        else:
            snapshot = to_financial_snapshot(profile.get("latest_accounts"))
            benchmark = to_sector_benchmark(sector_service.get_sector_stats(conn, sic_code, region))

        result = score_company(snapshot, benchmark, thresholds, stored)
        logger.info(
            "company_scored",
            company_number=company_number,
            score=result.score,
            level=result.level,
            source=result.source,
        )

        return {
            "profile": profile,
            "industry": {
                "sic_code": sic_code,
                "region": region,
                "thresholds": {"high": thresholds.high, "medium": thresholds.medium},
            },
            "risk": result.to_dict(),
        }


# Singleton instance for router use
risk_service = RiskService()
