from __future__ import annotations

from sqlalchemy.orm import Session

from cupos_admin.core.settings import MAX_LIMIT, Settings
from cupos_admin.db.column_resolver import ResolvedSchema
from cupos_admin.schemas.filters import CuposListFilters, ReportFilters
from cupos_admin.services.retrieval import RetrievalResult, SlotQuery, SlotRetriever, SortOrder
from cupos_admin.services.specialties import resolve_cups


def build_slot_query(
    db: Session,
    schema: ResolvedSchema,
    filters: ReportFilters | CuposListFilters,
    *,
    order: SortOrder,
    cups_fallback: dict[str, str] | None = None,
) -> SlotQuery:
    return SlotQuery(
        desde=filters.desde,
        hasta=filters.hasta,
        estados=tuple(filters.estados),
        cups=resolve_cups(db, schema, filters.especialidades, cups_fallback),
        medicos=tuple(filters.medicos),
        eps=filters.eps,
        hora_desde=getattr(filters, "hora_desde", None),
        hora_hasta=getattr(filters, "hora_hasta", None),
        order=order,
    )


def _retriever(db: Session, schema: ResolvedSchema, config: Settings) -> SlotRetriever:
    return SlotRetriever(
        db,
        schema,
        eps_batch_size=config.eps_scan_batch_size,
        scan_cap=config.eps_scan_cap,
    )


def report_rows(
    db: Session,
    schema: ResolvedSchema,
    filters: ReportFilters,
    config: Settings,
    *,
    batch_size: int | None = None,
) -> RetrievalResult:
    """Reporting view: newest first, paginated by ``offset``/``limit``."""
    query = build_slot_query(
        db, schema, filters, order="desc", cups_fallback=config.specialty_cups_fallback
    )
    return _retriever(db, schema, config).retrieve(
        query, offset=filters.offset, limit=filters.limit, batch_size=batch_size
    )


def list_rows(
    db: Session, schema: ResolvedSchema, filters: CuposListFilters, config: Settings
) -> RetrievalResult:
    """Deletion listing: oldest first, whole range (capped at ``MAX_LIMIT``)."""
    query = build_slot_query(
        db, schema, filters, order="asc", cups_fallback=config.specialty_cups_fallback
    )
    return _retriever(db, schema, config).retrieve(query, offset=0, limit=MAX_LIMIT)
