"""
Pydantic models for the scored company endpoint.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from .company import CompanyProfile


class RiskResponse(BaseModel):
    """Risk verdict for one company."""
    score: int = Field(..., ge=0, le=100, description="Risk score, higher is riskier")
    level: Literal["low", "medium", "high"]
    reasons: List[str] = Field(default_factory=list)
    source: Literal["computed", "stored"] = Field(
        "computed", description="'stored' when a previously saved score was returned"
    )


class RiskThresholdsResponse(BaseModel):
    high: float
    medium: float


class IndustryContext(BaseModel):
    """Industry code, region and the thresholds resolved for them."""
    sic_code: Optional[str] = None
    region: Optional[str] = None
    thresholds: RiskThresholdsResponse


class ScoredCompanyResponse(BaseModel):
    profile: CompanyProfile
    industry: IndustryContext
    risk: RiskResponse
