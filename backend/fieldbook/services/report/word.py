# backend/fieldbook/services/report/word.py
from docx import Document
from docx.shared import Mm
from pathlib import Path

from fieldbook.services.reporting.engine import Report
from fieldbook.services.reporting.formatting import render_row

AXIS_TITLES = {
    "community": "Communities",
    "village": "Villages",
    "beneficiary": "Beneficiaries",
    "vaccination": "Vaccination Records",
    "disease": "Disease Records",
    "predation": "Predation Records",
    "worker": "ECH Workers",
}


def _summary_lines(summary: dict) -> list[str]:
    lines = []
    for key, value in summary.items():
        label = key.replace("_", " ").capitalize()
        if isinstance(value, dict):
            value = ", ".join(f"{k}: {v}" for k, v in value.items())
        lines.append(f"{label}: {value}")
    return lines


def _table(doc, report: Report, rows: list[dict]):
    table = doc.add_table(rows=1, cols=len(report.columns))
    table.style = "Table Grid"
    for cell, col in zip(table.rows[0].cells, report.columns):
        cell.text = col.label
    for row in rows:
        display = render_row(report.axis, row)
        cells = table.add_row().cells
        for cell, col in zip(cells, report.columns):
            cell.text = display[col.key]
    return table


def render_report(report: Report, out_path: Path) -> Path:
    doc = Document()
    section = doc.sections[0]
    section.left_margin = section.right_margin = Mm(15)

    title = AXIS_TITLES.get(report.axis, report.axis)
    if report.group_by:
        title += f" grouped by {report.group_by.replace('_', ' ')}"
    doc.add_heading(title, level=1)
    if report.year is not None:
        doc.add_paragraph(f"Year: {report.year}")
    if report.search:
        doc.add_paragraph(f"Search: {report.search}")

    doc.add_heading("Summary", level=2)
    for line in _summary_lines(report.summary):
        doc.add_paragraph(line, style="List Bullet")

    if report.groups is None:
        _table(doc, report, report.rows or [])
    else:
        for g in report.groups:
            doc.add_heading(f"{g.key} ({g.count} records)", level=2)
            _table(doc, report, g.rows)

    doc.save(str(out_path))
    return out_path
