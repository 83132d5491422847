from __future__ import annotations

from io import BytesIO
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from cupos_admin.core.settings import MAX_LIMIT, Settings
from cupos_admin.db.column_resolver import ResolvedSchema
from cupos_admin.schemas.cupos import CupoRowOut
from cupos_admin.schemas.filters import ReportFilters
from cupos_admin.services.reports import report_rows

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Reporte"

# (header, row attribute, column width)
EXPORT_COLUMNS: list[tuple[str, str, int]] = [
    ("ID Cita", "cita_id", 12),
    ("Fecha", "fecha", 12),
    ("Hora", "hora", 10),
    ("Paciente", "paciente", 35),
    ("EPS", "eps", 12),
    ("ID Médico", "idmedico", 14),
    ("Médico", "medico", 35),
    ("Estado", "estado", 14),
    ("Tipo Cita (CUPS)", "tipo_cita", 18),
]


def export_filename(filters: ReportFilters) -> str:
    return f"reporte_{filters.desde.isoformat()}_a_{filters.hasta.isoformat()}.xlsx"


def build_workbook(rows: Iterable[CupoRowOut]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append([title for title, _key, _width in EXPORT_COLUMNS])

    header_font = Font(bold=True)
    for index, (_title, _key, width) in enumerate(EXPORT_COLUMNS, start=1):
        ws.cell(row=1, column=index).font = header_font
        ws.column_dimensions[get_column_letter(index)].width = width

    for row in rows:
        ws.append([getattr(row, key) for _title, key, _width in EXPORT_COLUMNS])

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def export_report(
    db: Session, schema: ResolvedSchema, filters: ReportFilters, config: Settings
) -> tuple[str, bytes]:
    """Full filtered set (capped at ``MAX_LIMIT``) as an xlsx download."""
    unbounded = filters.model_copy(update={"limit": MAX_LIMIT, "offset": 0})
    result = report_rows(db, schema, unbounded, config, batch_size=config.export_batch_size)
    return export_filename(filters), build_workbook(result.rows)
