from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder

from src.config.settings import Settings, get_settings
from src.invitations.dependencies import get_table_store
from src.invitations.dtos import InvitationError
from src.invitations.features.export_tables.read_model import (
    ExportKind,
    ExportReadModel,
    StoreExportReadModel,
)
from src.invitations.http_errors import to_http_exception
from src.invitations.repository.store import TableStore
from src.invitations.urls import EXPORT_TABLES_URL

router = APIRouter()


def get_export_read_model(store: TableStore = Depends(get_table_store)) -> ExportReadModel:
    """Dependency to get export read model instance."""
    return StoreExportReadModel(store=store)


@router.get(EXPORT_TABLES_URL)
async def export_tables(
    kind: ExportKind = ExportKind.ALL,
    read_model: ExportReadModel = Depends(get_export_read_model),
    config: Settings = Depends(get_settings),
) -> dict[str, list[dict]]:
    """
    Dump table rows for offline analysis. Only available when export is enabled.
    """
    if not config.export_enabled:
        raise HTTPException(status_code=404, detail="Not Found")

    try:
        exported = await read_model.export(kind)
    except InvitationError as e:
        raise to_http_exception(e)

    return jsonable_encoder(exported)
