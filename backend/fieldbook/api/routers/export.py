from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pathlib import Path
from typing import Annotated
from pyproj.exceptions import CRSError
from sqlalchemy.orm import Session
import logging
import tempfile

from fieldbook.api.deps import get_current_identity
from fieldbook.db import get_db
from fieldbook.models.village import Village
from fieldbook.services.export.shapefile import export_village_points
from fieldbook.services.identity.tokens import Identity
from fieldbook.services.reporting.engine import flatten_village

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/villages/shapefile")
def villages_shapefile(
    target_epsg: Annotated[int, Query(ge=1, le=999999)] = 4326,
    community: str | None = None,
    encoding: str = "UTF-8",
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
):
    q = db.query(Village)
    if community:
        q = q.filter(Village.community_name == community)
    villages = [flatten_village(v) for v in q.order_by(Village.name.asc()).all()]

    with tempfile.TemporaryDirectory() as tmpdir:
        out = Path(tmpdir) / "villages.zip"
        try:
            written = export_village_points(villages, out, target_epsg, encoding)
        except CRSError:
            raise HTTPException(status_code=400, detail=f"unknown EPSG code {target_epsg}")
        data = out.read_bytes()
    logger.info("exported %d of %d villages to EPSG:%s", written, len(villages), target_epsg)
    headers = {
        "Content-Disposition": "attachment; filename=\"villages.zip\"",
        "Content-Type": "application/zip",
    }
    return Response(content=data, media_type="application/zip", headers=headers)
