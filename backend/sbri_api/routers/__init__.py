# API routers
from .companies import router as companies_router
from .sectors import router as sectors_router

__all__ = [
    "companies_router",
    "sectors_router",
]
