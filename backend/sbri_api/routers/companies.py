"""
Company API endpoints.

Profile lookup, name search, risk scoring and the per-company record lists.
"""
from typing import Optional

from fastapi import APIRouter, Path, Query, Request

from ..config.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..dependencies import get_db
from ..limiter import RATE_LIMIT_SEARCH, limiter
from ..middleware.error_handler import NotFoundError
from ..models.common import ErrorResponse, PaginationMeta
from ..models.company import (
    CCJListResponse,
    CompanyFullResponse,
    CompanyProfile,
    CompanySearchResponse,
    DirectorChangeListResponse,
    FilingListResponse,
    InsolvencyListResponse,
)
from ..models.risk import ScoredCompanyResponse
from ..models.sector import CompanyBenchmarkResponse
from ..services.company_service import company_service
from ..services.risk_service import risk_service
from ..services.sector_service import sector_service

router = APIRouter(
    prefix="/companies",
    tags=["companies"],
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)

COMPANY_NUMBER_HELP = "Registered company number"


def _require_company(conn, company_number: str) -> dict:
    company = company_service.get_company(conn, company_number)
    if company is None:
        raise NotFoundError(f"Company {company_number} not found")
    return company


@router.get("/search", response_model=CompanySearchResponse)
@limiter.limit(RATE_LIMIT_SEARCH)
def search_companies(
    request: Request,
    name: Optional[str] = Query(None, max_length=200, description="Substring of the company name"),
):
    """Case-insensitive company name search (max 50 results)."""
    with get_db() as conn:
        results = company_service.search_companies(conn, (name or "").strip())
    return CompanySearchResponse(
        data=[CompanyProfile(**row) for row in results],
        total=len(results),
    )


@router.get("/{company_number}", response_model=CompanyProfile)
def get_company(
    company_number: str = Path(..., min_length=1, max_length=16, description=COMPANY_NUMBER_HELP),
):
    """Company profile with business status and latest accounts."""
    with get_db() as conn:
        return CompanyProfile(**_require_company(conn, company_number))


@router.get("/{company_number}/full", response_model=CompanyFullResponse)
def get_company_full(
    company_number: str = Path(..., min_length=1, max_length=16, description=COMPANY_NUMBER_HELP),
):
    with get_db() as conn:
        company = _require_company(conn, company_number)
    return CompanyFullResponse(
        company_number=company_number,
        profile=CompanyProfile(**company),
        latest_accounts=company.get("latest_accounts"),
    )


@router.get("/{company_number}/scored", response_model=ScoredCompanyResponse)
def get_company_scored(
    company_number: str = Path(..., min_length=1, max_length=16, description=COMPANY_NUMBER_HELP),
):
    """
    Profile plus risk score, level and reasons.

    A stored score, when present, is returned as-is with its level
    recomputed against the thresholds for the company's industry and region.
    """
    with get_db() as conn:
        result = risk_service.score(conn, company_number)
    if result is None:
        raise NotFoundError(f"Company {company_number} not found")
    return ScoredCompanyResponse(**result)


@router.get("/{company_number}/filings", response_model=FilingListResponse)
def list_filings(
    company_number: str = Path(..., min_length=1, max_length=16, description=COMPANY_NUMBER_HELP),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
    category: Optional[str] = Query(None, description="Filter by filing category"),
    date_from: Optional[str] = Query(None, description="Earliest filing date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="Latest filing date (YYYY-MM-DD)"),
    sort_by: str = Query("filing_date", description="Sort field"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$", description="Sort order"),
):
    """Filing history, newest first."""
    with get_db() as conn:
        result = company_service.list_filings(
            conn,
            company_number,
            page=page,
            per_page=per_page,
            category=category,
            date_from=date_from,
            date_to=date_to,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    return FilingListResponse(data=result.data, pagination=PaginationMeta(**result.pagination))


@router.get("/{company_number}/director-changes", response_model=DirectorChangeListResponse)
def list_director_changes(
    company_number: str = Path(..., min_length=1, max_length=16, description=COMPANY_NUMBER_HELP),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
):
    """Officer appointments, resignations and role changes, newest first."""
    with get_db() as conn:
        result = company_service.list_director_changes(
            conn, company_number, page=page, per_page=per_page
        )
    return DirectorChangeListResponse(data=result.data, pagination=PaginationMeta(**result.pagination))


@router.get("/{company_number}/ccjs", response_model=CCJListResponse)
def list_ccjs(
    company_number: str = Path(..., min_length=1, max_length=16, description=COMPANY_NUMBER_HELP),
    status: Optional[str] = Query(None, description="open or satisfied"),
):
    """County court judgments with an open/satisfied summary."""
    with get_db() as conn:
        return CCJListResponse(**company_service.list_ccjs(conn, company_number, status=status))


@router.get("/{company_number}/insolvency", response_model=InsolvencyListResponse)
def list_insolvency(
    company_number: str = Path(..., min_length=1, max_length=16, description=COMPANY_NUMBER_HELP),
):
    with get_db() as conn:
        notices = company_service.list_insolvency_notices(conn, company_number)
    return InsolvencyListResponse(data=notices, total=len(notices))


@router.get("/{company_number}/sector-benchmark", response_model=CompanyBenchmarkResponse)
def get_sector_benchmark(
    company_number: str = Path(..., min_length=1, max_length=16, description=COMPANY_NUMBER_HELP),
):
    with get_db() as conn:
        benchmark = sector_service.get_company_benchmark(conn, company_number)
    if benchmark is None:
        raise NotFoundError(f"No sector benchmark for company {company_number}")
    return CompanyBenchmarkResponse(**benchmark)
