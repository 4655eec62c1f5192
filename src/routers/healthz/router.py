import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.config.table_names import TableNames
from src.invitations.dependencies import get_table_store
from src.invitations.dtos import StoreUnavailableError
from src.invitations.repository.store import TableStore

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    version: str = "0.1.0"


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """
    Liveness probe. Does not touch the store.
    """
    return HealthCheckResponse(status="healthy")


@router.get("/ready", response_model=HealthCheckResponse)
async def readiness_check(store: TableStore = Depends(get_table_store)) -> HealthCheckResponse:
    """
    Readiness probe. Fails with 503 while the store cannot be read.
    """
    try:
        await store.read_all_rows(TableNames.INVITATIONS)
    except StoreUnavailableError as e:
        logger.warning(f"Readiness check failed: {e}")
        raise HTTPException(status_code=503, detail="Store unavailable")
    return HealthCheckResponse(status="ready")
