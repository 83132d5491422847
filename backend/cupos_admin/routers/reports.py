from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response
from sqlalchemy.orm import Session

from cupos_admin.core.settings import MAX_LIMIT, Settings
from cupos_admin.db.column_resolver import ResolvedSchema
from cupos_admin.db.session import get_db
from cupos_admin.deps import get_schema, get_settings
from cupos_admin.schemas.cupos import RowsOut
from cupos_admin.schemas.filters import ReportFilters, parse_request, query_to_payload
from cupos_admin.services.export_xlsx import XLSX_MEDIA_TYPE, export_report
from cupos_admin.services.reports import report_rows

router = APIRouter(prefix="/reportes", tags=["reportes"])


@router.post("/data", response_model=RowsOut)
def report_data(
    payload: dict[str, Any] | None = Body(default=None),
    db: Session = Depends(get_db),
    schema: ResolvedSchema = Depends(get_schema),
    config: Settings = Depends(get_settings),
):
    filters = parse_request(ReportFilters, payload)
    result = report_rows(db, schema, filters, config)
    return RowsOut(rows=result.rows)


@router.get("/export")
def report_export(
    request: Request,
    db: Session = Depends(get_db),
    schema: ResolvedSchema = Depends(get_schema),
    config: Settings = Depends(get_settings),
):
    # the export always covers the whole filtered set
    filters = parse_request(
        ReportFilters,
        query_to_payload(request.query_params),
        limit=MAX_LIMIT,
        offset=0,
        all=False,
    )
    filename, content = export_report(db, schema, filters, config)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=content, media_type=XLSX_MEDIA_TYPE, headers=headers)
