"""
Health check and monitoring endpoints.
"""
from fastapi import APIRouter, Depends

from ..config import settings
from ..dependencies import get_supabase_client
from ..models import HealthResponse
from ...supabase_sync.supabase_client import SupabaseClient


router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="Check if the API is running and whether Supabase is configured",
    responses={
        200: {"description": "Service is healthy"}
    }
)
async def health_check(client: SupabaseClient = Depends(get_supabase_client)) -> HealthResponse:
    """
    Health check endpoint for monitoring.

    Returns:
        Health status information; `degraded` when Supabase cannot be reached
        and writes go to the local store
    """
    supabase_ok = client.initialized or client.initialize()
    return HealthResponse(
        status="healthy" if supabase_ok else "degraded",
        version=settings.app_version,
        dependencies={"supabase": "connected" if supabase_ok else "unavailable"},
    )
