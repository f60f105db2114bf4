"""
Admin endpoints.

Read-only overview of every family's groups and photos with storage
estimates.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from familylinx.api.dependencies import get_db_session, get_storage
from familylinx.api.models import AdminOverviewResponse, overview_to_response
from familylinx.services.admin import build_admin_overview
from familylinx.storage import BlobStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/overview", response_model=AdminOverviewResponse, summary="All groups and photos")
def admin_overview(
    q: str = Query("", description="Filter groups by family, name, slug or URL"),
    sort: str = Query("familyName", description="Group sort field"),
    direction: Literal["asc", "desc"] = Query("asc"),
    photo_sort: str = Query("memberName", description="Photo sort field"),
    db: Session = Depends(get_db_session),
    storage: BlobStorage = Depends(get_storage),
):
    overview = build_admin_overview(
        db,
        storage=storage,
        query=q,
        sort_field=sort,
        direction=direction,
        photo_sort_field=photo_sort,
    )
    logger.info(f"Admin overview: {len(overview.groups)} group(s), {overview.total_photos} photo(s)")
    return overview_to_response(overview)
