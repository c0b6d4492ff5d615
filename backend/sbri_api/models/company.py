"""
Pydantic models for company endpoints.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .common import PaginationMeta


class CompanyProfile(BaseModel):
    """Company profile with business status and latest accounts folded in."""
    company_number: str
    company_name: Optional[str] = None
    status: Optional[str] = None
    incorporation_date: Optional[str] = None
    sic_codes: List[str] = Field(default_factory=list, description="Industry codes, primary first")
    region: Optional[str] = None
    address: Optional[Dict[str, Any]] = None
    jurisdiction: Optional[str] = None
    updated_at: Optional[str] = None
    latest_accounts: Optional[Dict[str, Any]] = Field(
        None, description="Most recent accounts document as stored"
    )


class CompanySearchResponse(BaseModel):
    data: List[CompanyProfile]
    total: int


class CompanyFullResponse(BaseModel):
    company_number: str
    profile: CompanyProfile
    latest_accounts: Optional[Dict[str, Any]] = None


class Filing(BaseModel):
    company_number: str
    transaction_id: Optional[str] = None
    filing_date: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class FilingListResponse(BaseModel):
    data: List[Filing]
    pagination: PaginationMeta


class DirectorChange(BaseModel):
    """Normalized officer appointment, resignation or role change."""
    date: Optional[str] = None
    type: Optional[str] = Field(None, description="Appointed, Resigned, RoleChanged, Other ...")
    name: Optional[str] = None
    role: Optional[str] = None
    details: Optional[str] = None


class DirectorChangeListResponse(BaseModel):
    data: List[DirectorChange]
    pagination: PaginationMeta


class CCJItem(BaseModel):
    """County court judgment."""
    case_number: Optional[str] = None
    judgment_date: Optional[str] = None
    amount: Optional[float] = None
    court: Optional[str] = None
    status: Optional[str] = None
    satisfied_date: Optional[str] = None


class CCJSummary(BaseModel):
    total: int
    open_count: int
    satisfied_count: int
    open_amount: float


class CCJListResponse(BaseModel):
    data: List[CCJItem]
    summary: CCJSummary


class InsolvencyNotice(BaseModel):
    notice_date: Optional[str] = None
    notice_type: Optional[str] = None
    url: Optional[str] = None


class InsolvencyListResponse(BaseModel):
    data: List[InsolvencyNotice]
    total: int
