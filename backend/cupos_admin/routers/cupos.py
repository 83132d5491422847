from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from cupos_admin.core.settings import Settings
from cupos_admin.db.column_resolver import ResolvedSchema
from cupos_admin.db.session import get_db
from cupos_admin.deps import get_schema, get_settings
from cupos_admin.schemas.cupos import DeleteOut, DeleteRequest, RowsOut
from cupos_admin.schemas.filters import CuposListFilters, parse_request
from cupos_admin.services.bulk_delete import delete_unassigned
from cupos_admin.services.reports import list_rows

router = APIRouter(prefix="/cupos", tags=["cupos"])


@router.post("/list", response_model=RowsOut)
def list_cupos(
    payload: dict[str, Any] | None = Body(default=None),
    db: Session = Depends(get_db),
    schema: ResolvedSchema = Depends(get_schema),
    config: Settings = Depends(get_settings),
):
    filters = parse_request(CuposListFilters, payload)
    result = list_rows(db, schema, filters, config)
    return RowsOut(rows=result.rows)


@router.post("/delete", response_model=DeleteOut)
def delete_cupos(
    payload: dict[str, Any] | None = Body(default=None),
    db: Session = Depends(get_db),
    schema: ResolvedSchema = Depends(get_schema),
):
    request = parse_request(DeleteRequest, payload)
    result = delete_unassigned(db, schema, request.ids)
    return DeleteOut(ok=True, deleted=result.deleted, skipped=result.skipped)
