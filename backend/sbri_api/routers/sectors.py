"""
Sector statistics endpoints.

Stats change only when a seeding run writes a new period, so lookups are
cached for a few minutes.
"""
from typing import Optional

from fastapi import APIRouter, Path, Query

from ..cache import app_cache
from ..dependencies import get_db
from ..middleware.error_handler import NotFoundError
from ..models.common import ErrorResponse
from ..models.sector import SectorStatsResponse
from ..services.sector_service import sector_service

router = APIRouter(
    prefix="/sectors",
    tags=["sectors"],
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)

SECTOR_CACHE = "sector_stats"
SECTOR_CACHE_TTL = 300  # 5 minutes


@router.get("/{sic_code}", response_model=SectorStatsResponse)
def get_sector(
    sic_code: str = Path(..., min_length=1, max_length=10, description="SIC industry code"),
    region: Optional[str] = Query(None, max_length=100, description="Preferred region"),
):
    """Latest stats for the industry code, region-specific row preferred."""
    cache_key = f"{sic_code}:{region or ''}"
    stats = app_cache.get(SECTOR_CACHE, cache_key)
    if stats is None:
        with get_db() as conn:
            stats = sector_service.get_sector_stats(conn, sic_code, region)
        if stats is None:
            raise NotFoundError(f"No sector stats for SIC {sic_code}")
        app_cache.set(SECTOR_CACHE, cache_key, stats, maxsize=256, ttl=SECTOR_CACHE_TTL)
    return SectorStatsResponse(**stats)
