from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pathlib import Path
from typing import Annotated
from sqlalchemy.orm import Session
import tempfile

from fieldbook.api.deps import get_current_identity
from fieldbook.db import get_db
from fieldbook.schemas.report import ReportOptionsOut, ReportOut
from fieldbook.services.identity.tokens import Identity
from fieldbook.services.report.word import render_report
from fieldbook.services.reporting.engine import Report, build_report, report_payload, year_options
from fieldbook.services.reporting.grouping import AXES

router = APIRouter()


def _build(db: Session, axis: str, group_by: str | None, year: int | None, search: str | None) -> Report:
    try:
        return build_report(db, axis, group_by, year, search)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/options")
def report_options(_: Identity = Depends(get_current_identity)) -> ReportOptionsOut:
    return ReportOptionsOut(axes={k: list(v) for k, v in AXES.items()}, years=year_options())


@router.get("")
@router.get("/")
def get_report(
    axis: str,
    group_by: str | None = None,
    year: Annotated[int | None, Query(ge=1, le=9999)] = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
) -> ReportOut:
    report = _build(db, axis, group_by, year, search)
    return ReportOut(**report_payload(report))


@router.get("/export/word")
def export_word(
    axis: str,
    group_by: str | None = None,
    year: Annotated[int | None, Query(ge=1, le=9999)] = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
):
    report = _build(db, axis, group_by, year, search)
    filename = f"{axis}_report.docx"
    # 一時ディレクトリに作成し、メモリに読み込んで返す（サーバ上に残さない）
    with tempfile.TemporaryDirectory() as tmpdir:
        out = render_report(report, Path(tmpdir) / filename)
        data = out.read_bytes()
    media_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    headers = {"Content-Disposition": f"attachment; filename=\"{filename}\""}
    return Response(content=data, media_type=media_type, headers=headers)
