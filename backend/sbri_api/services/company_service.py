"""
Company domain service.

Profile lookup (with business status and latest accounts folded in), name
search, and the per-company record lists: filings, director changes, CCJs
and insolvency notices.
"""
from __future__ import annotations

import sqlite3

import structlog

from ..config.constants import INSOLVENCY_RESULT_LIMIT, SEARCH_RESULT_LIMIT
from .base_service import BaseService
from .normalize import DIRECTOR_DATE_FIELDS, format_status, normalize_director_change
from .pagination import PaginatedResult
from .query_builder import QueryBuilder

logger = structlog.get_logger("sbri.services.company")

PROFILE_COLUMNS = """
    company_number, company_name, status, incorporation_date,
    sic_codes, region, address, jurisdiction, updated_at
"""

FILING_SORT_WHITELIST = {
    "filing_date": "filing_date",
    "category": "category",
}

# First non-null date field of the stored document, same order the normalizer uses
DIRECTOR_EVENT_DATE_SQL = "COALESCE({})".format(
    ", ".join(f"json_extract(document, '$.{name}')" for name in DIRECTOR_DATE_FIELDS)
)


class CompanyService(BaseService):
    """Business logic for company profile and record queries."""

    def _map_profile_row(self, row: sqlite3.Row) -> dict:
        return {
            "company_number": row["company_number"],
            "company_name": row["company_name"],
            "status": row["status"],
            "incorporation_date": row["incorporation_date"],
            "sic_codes": [str(code) for code in self._load_json(row["sic_codes"], []) or []],
            "region": row["region"],
            "address": self._load_json(row["address"]),
            "jurisdiction": row["jurisdiction"],
            "updated_at": row["updated_at"],
        }

    def count_profiles(self, conn: sqlite3.Connection) -> int:
        row = self._execute_one(conn, "SELECT COUNT(*) FROM profiles")
        return row[0] if row else 0

    def search_companies(
        self,
        conn: sqlite3.Connection,
        name: str | None,
        limit: int = SEARCH_RESULT_LIMIT,
    ) -> list[dict]:
        """Case-insensitive substring match on company name. Empty name => no results."""
        if not name:
            return []
        qb = QueryBuilder("profiles")
        qb.filter_search(name, ["company_name"])
        qb.order_by("company_name ASC")
        qb.limit(min(limit, SEARCH_RESULT_LIMIT))
        sql, params = qb.build_select(PROFILE_COLUMNS)
        return [self._map_profile_row(row) for row in self._execute_many(conn, sql, params)]

    def get_profile(self, conn: sqlite3.Connection, company_number: str) -> dict | None:
        row = self._execute_one(
            conn,
            f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE company_number = ?",
            (str(company_number),),
        )
        if row is None:
            return None
        return self._map_profile_row(row)

    def inject_business_status(
        self,
        conn: sqlite3.Connection,
        company_number: str,
        profile: dict,
    ) -> dict:
        """Fill profile["status"] from the business profile when the profile has none."""
        if profile.get("status"):
            return profile
        row = self._execute_one(
            conn,
            "SELECT status FROM business_profiles WHERE company_number = ?",
            (str(company_number),),
        )
        status = format_status(row["status"]) if row is not None else None
        if status:
            profile["status"] = status
        return profile

    def get_latest_accounts(self, conn: sqlite3.Connection, company_number: str) -> dict | None:
        """Most recent accounts document, or None when the company has filed none."""
        row = self._execute_one(
            conn,
            """
            SELECT period_end, document
            FROM financial_accounts
            WHERE company_number = ?
            ORDER BY period_end DESC,
                     json_extract(document, '$.periodEnd') DESC,
                     json_extract(document, '$.year') DESC
            LIMIT 1
            """,
            (str(company_number),),
        )
        if row is None:
            return None
        document = self._load_json(row["document"], {})
        if not isinstance(document, dict):
            return None
        if row["period_end"] and not document.get("period_end"):
            document["period_end"] = row["period_end"]
        document.setdefault("company_number", str(company_number))
        return document

    def get_company(self, conn: sqlite3.Connection, company_number: str) -> dict | None:
        """Profile with injected status and latest accounts. None if unknown."""
        profile = self.get_profile(conn, company_number)
        if profile is None:
            return None
        self.inject_business_status(conn, company_number, profile)
        profile["latest_accounts"] = self.get_latest_accounts(conn, company_number)
        return profile

    def list_filings(
        self,
        conn: sqlite3.Connection,
        company_number: str,
        *,
        page: int = 1,
        per_page: int = 25,
        category: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        sort_by: str = "filing_date",
        sort_order: str = "desc",
    ) -> PaginatedResult:
        """Filings for a company, newest first by default."""
        qb = QueryBuilder("filings")
        qb.filter_company(company_number)
        if category:
            qb.where("category = ?", category)
        qb.filter_date_range(date_from, date_to, column="filing_date")
        qb.sort(sort_by, sort_order, whitelist=FILING_SORT_WHITELIST, default="filing_date DESC")

        columns = "company_number, transaction_id, filing_date, category, description"
        return self._paginated_list(conn, qb, columns, page, per_page)

    def list_director_changes(
        self,
        conn: sqlite3.Connection,
        company_number: str,
        *,
        page: int = 1,
        per_page: int = 25,
    ) -> PaginatedResult:
        """Officer appointment/resignation events, normalized, newest first."""
        qb = QueryBuilder("director_changes")
        qb.filter_company(company_number)
        qb.order_by(f"{DIRECTOR_EVENT_DATE_SQL} DESC, id DESC")

        def map_change(row: sqlite3.Row) -> dict:
            document = self._load_json(row["document"], {})
            if not isinstance(document, dict):
                document = {}
            return normalize_director_change(document)

        return self._paginated_list(conn, qb, "id, document", page, per_page, row_mapper=map_change)

    def list_ccjs(
        self,
        conn: sqlite3.Connection,
        company_number: str,
        *,
        status: str | None = None,
    ) -> dict:
        """County court judgments, newest first, with an open/satisfied summary."""
        qb = QueryBuilder("ccj_details")
        qb.filter_company(company_number)
        qb.filter_ccj_status(status)
        qb.order_by("judgment_date DESC")
        sql, params = qb.build_select(
            "case_number, judgment_date, amount, court, status, satisfied_date"
        )
        items = [dict(row) for row in self._execute_many(conn, sql, params)]

        summary = self._execute_one(
            conn,
            """
            SELECT COUNT(*) AS total,
                   SUM(CASE WHEN status = 'open' THEN 1 ELSE 0 END) AS open_count,
                   SUM(CASE WHEN status = 'satisfied' THEN 1 ELSE 0 END) AS satisfied_count,
                   SUM(CASE WHEN status = 'open' THEN amount ELSE 0 END) AS open_amount
            FROM ccj_details
            WHERE company_number = ?
            """,
            (str(company_number),),
        )
        return {
            "data": items,
            "summary": {
                "total": summary["total"] or 0,
                "open_count": summary["open_count"] or 0,
                "satisfied_count": summary["satisfied_count"] or 0,
                "open_amount": summary["open_amount"] or 0,
            },
        }

    def list_insolvency_notices(
        self,
        conn: sqlite3.Connection,
        company_number: str,
        limit: int = INSOLVENCY_RESULT_LIMIT,
    ) -> list[dict]:
        rows = self._execute_many(
            conn,
            """
            SELECT notice_date, notice_type, url
            FROM insolvency_notices
            WHERE company_number = ?
            ORDER BY notice_date DESC
            LIMIT ?
            """,
            (str(company_number), limit),
        )
        return [dict(row) for row in rows]


# Singleton instance for router use
company_service = CompanyService()
