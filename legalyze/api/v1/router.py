from fastapi import APIRouter
from legalyze.api.v1.endpoints import analysis, documents

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(analysis.router, tags=["Analysis"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])

__all__ = ["api_router"]
