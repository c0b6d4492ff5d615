"""
Service layer for the SBRI API.

Domain services encapsulate lookups, query construction and data mapping.
Routers stay thin: parse request -> call service -> return response.
"""
from .query_builder import QueryBuilder
from .pagination import paginate_query, PaginatedResult
from .company_service import company_service
from .sector_service import sector_service
from .risk_service import risk_service

__all__ = [
    "QueryBuilder",
    "paginate_query",
    "PaginatedResult",
    "company_service",
    "sector_service",
    "risk_service",
]
