"""Liveness and database reachability."""
from fastapi import APIRouter, Depends

from mychangex.core.container import ApplicationContainer
from mychangex.interfaces.http.deps import get_app_container
from mychangex.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="Service and database status")
async def health(container: ApplicationContainer = Depends(get_app_container)) -> HealthResponse:
    database = await container.health_probe().is_healthy()
    return HealthResponse(status="ok" if database else "degraded", database=database)
