from io import BytesIO

from openpyxl import load_workbook

from cupos_admin.schemas.cupos import CupoRowOut
from cupos_admin.schemas.filters import ReportFilters, parse_request
from cupos_admin.services.export_xlsx import (
    EXPORT_COLUMNS,
    SHEET_TITLE,
    build_workbook,
    export_filename,
)


def _sheet(content: bytes):
    wb = load_workbook(BytesIO(content))
    assert wb.sheetnames == [SHEET_TITLE]
    return wb[SHEET_TITLE]


def test_header_only_workbook_for_no_rows():
    ws = _sheet(build_workbook([]))
    rows = list(ws.iter_rows(values_only=True))
    assert rows == [tuple(title for title, _key, _width in EXPORT_COLUMNS)]
    assert rows[0][0] == "ID Cita"
    assert rows[0][-1] == "Tipo Cita (CUPS)"
    assert all(cell.font.bold for cell in ws[1])


def test_rows_follow_header_order():
    row = CupoRowOut(
        cita_id=42,
        fecha="2024-01-05",
        hora="09:30",
        idusuario="1",
        paciente="Ana Gómez",
        eps="EPS01",
        idmedico="M1",
        medico="Dr. House",
        estado="ASIGNADA",
        categoria="ASIGNADA",
        tipo_cita="890201",
    )
    ws = _sheet(build_workbook([row]))
    values = list(ws.iter_rows(min_row=2, values_only=True))
    assert values == [
        (42, "2024-01-05", "09:30", "Ana Gómez", "EPS01", "M1", "Dr. House", "ASIGNADA", "890201")
    ]


def test_export_filename_uses_date_range():
    filters = parse_request(ReportFilters, {"desde": "2024-01-01", "hasta": "2024-01-31"})
    assert export_filename(filters) == "reporte_2024-01-01_a_2024-01-31.xlsx"
