# Pydantic models for API request/response
from .common import PaginationMeta, ErrorResponse
from .company import (
    CompanyProfile,
    CompanySearchResponse,
    CompanyFullResponse,
    FilingListResponse,
    DirectorChangeListResponse,
    CCJListResponse,
    InsolvencyListResponse,
)
from .risk import RiskResponse, ScoredCompanyResponse
from .sector import SectorStatsResponse, CompanyBenchmarkResponse

__all__ = [
    "PaginationMeta",
    "ErrorResponse",
    "CompanyProfile",
    "CompanySearchResponse",
    "CompanyFullResponse",
    "FilingListResponse",
    "DirectorChangeListResponse",
    "CCJListResponse",
    "InsolvencyListResponse",
    "RiskResponse",
    "ScoredCompanyResponse",
    "SectorStatsResponse",
    "CompanyBenchmarkResponse",
]
