"""
QueryBuilder: fluent SQL query construction with parameterized queries.

Shared by every service that lists company records. All user inputs go
through ? placeholders; sort columns only come from a whitelist.
"""
from __future__ import annotations

from typing import Any

from ..config.constants import MAX_PAGE_SIZE

CCJ_STATUSES = {"open", "satisfied"}


def escape_like(value: str) -> str:
    """Backslash-escape LIKE wildcards for use with ESCAPE '\\'."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class QueryBuilder:
    """Fluent SQL query builder with safe parameterization."""

    def __init__(self, base_table: str):
        """
        Args:
            base_table: Table name, e.g. "filings"
        """
        self.base_table = base_table
        self._conditions: list[str] = []
        self._params: list[Any] = []
        self._order_by: str | None = None
        self._limit: int | None = None
        self._offset: int | None = None

    # --- Generic where ---

    def where(self, condition: str, *params: Any) -> QueryBuilder:
        """Add a WHERE condition with parameters."""
        self._conditions.append(condition)
        self._params.extend(params)
        return self

    # --- Domain-specific filters ---

    def filter_company(self, company_number: str | None, column: str = "company_number") -> QueryBuilder:
        """Filter by company number if provided. Numbers are always compared as text."""
        if company_number is not None:
            self._conditions.append(f"{column} = ?")
            self._params.append(str(company_number))
        return self

    def filter_sic(self, sic_code: str | None, column: str = "sic_code") -> QueryBuilder:
        if sic_code is not None:
            self._conditions.append(f"{column} = ?")
            self._params.append(str(sic_code))
        return self

    def filter_region(self, region: str | None, column: str = "region") -> QueryBuilder:
        if region is not None:
            self._conditions.append(f"{column} = ?")
            self._params.append(region)
        return self

    def filter_ccj_status(self, status: str | None, column: str = "status") -> QueryBuilder:
        """Filter CCJs by status. Validates against allowed values."""
        if status is not None:
            if status.lower() not in CCJ_STATUSES:
                raise ValueError(f"Invalid CCJ status '{status}'. Must be one of: {sorted(CCJ_STATUSES)}")
            self._conditions.append(f"{column} = ?")
            self._params.append(status.lower())
        return self

    def filter_date_range(
        self,
        date_from: str | None,
        date_to: str | None,
        column: str,
    ) -> QueryBuilder:
        """Inclusive ISO date range. Either bound may be omitted."""
        if date_from is not None:
            self._conditions.append(f"{column} >= ?")
            self._params.append(date_from)
        if date_to is not None:
            self._conditions.append(f"{column} <= ?")
            self._params.append(date_to)
        return self

    def filter_search(self, search: str | None, columns: list[str]) -> QueryBuilder:
        """Add case-insensitive LIKE search across multiple columns (OR).

        % and _ in the search term match literally.
        """
        if search and columns:
            pattern = f"%{escape_like(search)}%"
            like_clauses = [f"{col} LIKE ? ESCAPE '\\'" for col in columns]
            self._conditions.append(f"({' OR '.join(like_clauses)})")
            self._params.extend([pattern] * len(columns))
        return self

    # --- Sorting ---

    def sort(
        self,
        field: str | None,
        order: str = "desc",
        whitelist: dict[str, str] | None = None,
        default: str | None = None,
    ) -> QueryBuilder:
        """
        Set ORDER BY with SQL injection protection via whitelist.

        Args:
            field: User-provided sort field name
            order: 'asc' or 'desc'
            whitelist: Maps safe field names to actual SQL column expressions
                       e.g. {"date": "f.filing_date"}
            default: Default ORDER BY if field is None or not in whitelist
        """
        safe_order = "ASC" if order and order.lower() == "asc" else "DESC"

        if field and whitelist and field in whitelist:
            self._order_by = f"{whitelist[field]} {safe_order}"
        elif default:
            self._order_by = default
        return self

    def order_by(self, clause: str) -> QueryBuilder:
        """Set ORDER BY directly (use only with trusted input)."""
        self._order_by = clause
        return self

    # --- Pagination ---

    def paginate(self, page: int, per_page: int) -> QueryBuilder:
        """Set LIMIT/OFFSET for pagination."""
        page = max(1, page)
        per_page = max(1, min(per_page, MAX_PAGE_SIZE))
        self._limit = per_page
        self._offset = (page - 1) * per_page
        return self

    def limit(self, n: int) -> QueryBuilder:
        """Set LIMIT directly."""
        self._limit = n
        return self

    # --- Build methods ---

    def _build_from(self) -> str:
        return f"FROM {self.base_table}"

    def _build_where(self) -> str:
        if not self._conditions:
            return ""
        return "WHERE " + " AND ".join(self._conditions)

    def _build_tail(self) -> str:
        """Build ORDER BY + LIMIT + OFFSET."""
        parts = []
        if self._order_by:
            parts.append(f"ORDER BY {self._order_by}")
        if self._limit is not None:
            parts.append(f"LIMIT {self._limit}")
        if self._offset is not None:
            parts.append(f"OFFSET {self._offset}")
        return " ".join(parts)

    def build_count(self) -> tuple[str, list[Any]]:
        """Build a COUNT(*) query."""
        parts = ["SELECT COUNT(*)", self._build_from(), self._build_where()]
        sql = " ".join(p for p in parts if p)
        return sql, list(self._params)

    def build_select(self, columns: str) -> tuple[str, list[Any]]:
        """Build a full SELECT query."""
        parts = [
            f"SELECT {columns}",
            self._build_from(),
            self._build_where(),
            self._build_tail(),
        ]
        sql = " ".join(p for p in parts if p)
        return sql, list(self._params)
