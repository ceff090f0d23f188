"""
API v1 module initialization.
"""

from fastapi import APIRouter
from .advisor import router as advisor_router
from .coverage import router as coverage_router

api_router = APIRouter()

# Include all v1 routers
api_router.include_router(coverage_router, prefix="/coverage", tags=["coverage"])
api_router.include_router(advisor_router, prefix="/advisor", tags=["advisor"])
