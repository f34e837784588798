# backend/fieldbook/schemas/report.py
from pydantic import BaseModel
from typing import Any, Optional


class ColumnOut(BaseModel):
    key: str
    label: str
    kind: str


class ReportRow(BaseModel):
    record: dict[str, Any]
    display: dict[str, str]


class ReportGroup(BaseModel):
    key: str
    count: int
    rows: list[ReportRow]
    summary: dict[str, Any]


class ReportOut(BaseModel):
    axis: str
    group_by: Optional[str] = None
    year: Optional[int] = None
    search: Optional[str] = None
    columns: list[ColumnOut]
    rows: Optional[list[ReportRow]] = None
    groups: Optional[list[ReportGroup]] = None
    summary: dict[str, Any]


class ReportOptionsOut(BaseModel):
    axes: dict[str, list[str]]
    years: list[int]
