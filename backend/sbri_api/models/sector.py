"""
Pydantic models for sector endpoints.
"""
from typing import Optional
from pydantic import BaseModel, Field


class SectorStatsResponse(BaseModel):
    """Latest statistics for an industry code."""
    sic_code: str
    region: Optional[str] = None
    period: Optional[str] = None
    avg_margin: Optional[float] = Field(None, description="Average gross margin, as a fraction")
    failure_rate: Optional[float] = Field(None, description="Historical failure rate")
    sample_size: Optional[int] = None
    updated_at: Optional[str] = None


class CompanyBenchmarkResponse(SectorStatsResponse):
    """Sector stats copied onto a single company."""
    sic_code: Optional[str] = None
    company_number: str
