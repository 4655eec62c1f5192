from fastapi import APIRouter

from .features.create_invitation.router import router as create_invitation_router
from .features.export_tables.router import router as export_tables_router
from .features.get_snapshot.router import router as get_snapshot_router
from .features.record_view.router import router as record_view_router
from .features.refresh_invitation.router import router as refresh_invitation_router
from .features.submit_response.router import router as submit_response_router

router = APIRouter()

router.include_router(create_invitation_router)
router.include_router(get_snapshot_router)
router.include_router(submit_response_router)
router.include_router(record_view_router)
router.include_router(refresh_invitation_router)
router.include_router(export_tables_router)
