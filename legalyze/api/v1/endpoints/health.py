"""Health check API endpoints.

Reports database connectivity and whether the storage bucket and the
configured LLM provider have the credentials an analysis run needs.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from legalyze.core.config import settings
from legalyze.core.database import db_client
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()

CONFIGURED = "configured"
NOT_CONFIGURED = "not_configured"


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="healthy, or degraded if any dependency is unavailable")
    version: str = Field(..., description="Running application version")
    service: str = Field(..., description="Service name")
    database: str = Field(..., description="Database health status")
    storage: str = Field(..., description="Whether Supabase storage credentials are set")
    storage_bucket: str = Field(..., description="Bucket holding uploaded documents")
    llm_provider: str = Field(..., description="Configured LLM provider")
    llm: str = Field(..., description="Whether the LLM provider has an API key")


def storage_readiness() -> str:
    if settings.supabase_url and settings.supabase_service_role_key:
        return CONFIGURED
    return NOT_CONFIGURED


def llm_readiness() -> str:
    provider = settings.llm_provider.lower()
    if provider == "gemini":
        api_key = settings.llm.gemini_api_key
    elif provider == "openrouter":
        api_key = settings.llm.openrouter_api_key
    else:
        api_key = ""
    return CONFIGURED if api_key else NOT_CONFIGURED


@router.get(
    "/",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Health check endpoint",
    description="Check database connectivity and analysis pipeline readiness",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    db_health = await db_client.health_check()
    storage = storage_readiness()
    llm = llm_readiness()

    healthy = db_health["status"] == "healthy" and storage == CONFIGURED and llm == CONFIGURED
    if not healthy:
        LOGGER.warning(
            "Health check degraded",
            extra={"database": db_health["status"], "storage": storage, "llm": llm}
        )

    return HealthCheckResponse(
        status="healthy" if healthy else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        database=db_health["status"],
        storage=storage,
        storage_bucket=settings.storage_bucket,
        llm_provider=settings.llm_provider,
        llm=llm,
    )
