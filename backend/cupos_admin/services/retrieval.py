from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from functools import partial
from typing import Literal, Sequence

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from cupos_admin.core.errors import SchemaResolutionError
from cupos_admin.db.column_resolver import ResolvedSchema
from cupos_admin.db.functions import hour_bound, slot_time
from cupos_admin.schemas.cupos import CupoRowOut
from cupos_admin.services.batch_scan import OffsetBatchSource, scan
from cupos_admin.services.hydration import Hydrator
from cupos_admin.services.status import StatusCategory, status_category, status_predicate

logger = logging.getLogger("cupos_admin.retrieval")

SortOrder = Literal["asc", "desc"]


@dataclass(frozen=True)
class SlotQuery:
    desde: date
    hasta: date
    estados: tuple[StatusCategory, ...] = ()
    cups: frozenset[str] | None = None
    medicos: tuple[str, ...] = ()
    eps: str | None = None
    hora_desde: str | None = None
    hora_hasta: str | None = None
    order: SortOrder = "desc"


@dataclass
class SlotRow:
    id: int
    fecha: date | None
    hora: str | None
    paciente: str | None
    medico: str | None
    estado: str | None
    cups: str | None = None
    eps: str | None = None


@dataclass
class RetrievalResult:
    rows: list[CupoRowOut] = field(default_factory=list)
    scanned: int | None = None
    capped: bool = False


def _format_date(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _format_hour(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (time, datetime)):
        return value.strftime("%H:%M")
    text = str(value).strip()
    return text or None


def _text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class SlotRetriever:
    def __init__(
        self,
        db: Session,
        schema: ResolvedSchema,
        *,
        eps_batch_size: int,
        scan_cap: int,
        hydrator: Hydrator | None = None,
    ) -> None:
        self._db = db
        self._schema = schema
        self.eps_batch_size = eps_batch_size
        self.scan_cap = scan_cap
        self.hydrator = hydrator or Hydrator(db, schema)

    @property
    def eps_in_sql(self) -> bool:
        return "eps" in self._schema.agenda.c

    def build_statement(self, query: SlotQuery) -> Select | None:
        """Filtered, ordered ``agenda`` select; ``None`` when nothing can match."""
        t = self._schema.agenda
        if query.cups is not None and not query.cups:
            return None

        columns = [t.c.id, t.c.fecha, t.c.paciente, t.c.medico, t.c.estado]
        columns.extend(t.c[name] for name in ("hora", "cups", "eps") if name in t.c)
        stmt = select(*(col.label(col.key) for col in columns)).where(
            t.c.fecha >= query.desde, t.c.fecha <= query.hasta
        )

        if query.estados:
            stmt = stmt.where(status_predicate(t.c.estado, query.estados))
        if query.cups is not None:
            if "cups" not in t.c:
                raise SchemaResolutionError(t.name, "cups", [])
            stmt = stmt.where(t.c.cups.in_(sorted(query.cups)))
        if query.medicos:
            stmt = stmt.where(t.c.medico.in_(list(query.medicos)))
        if "hora" in t.c:
            if query.hora_desde:
                stmt = stmt.where(slot_time(t.c.hora) >= hour_bound(query.hora_desde))
            if query.hora_hasta:
                stmt = stmt.where(slot_time(t.c.hora) <= hour_bound(query.hora_hasta))
        if query.eps and self.eps_in_sql:
            stmt = stmt.where(t.c.eps == query.eps)

        order_cols = [t.c.fecha]
        if "hora" in t.c:
            order_cols.append(t.c.hora)
        order_cols.append(t.c.id)
        if query.order == "asc":
            return stmt.order_by(*(col.asc() for col in order_cols))
        return stmt.order_by(*(col.desc() for col in order_cols))

    def fetch(self, stmt: Select, offset: int, limit: int) -> list[SlotRow]:
        rows = self._db.execute(stmt.offset(offset).limit(limit))
        slots: list[SlotRow] = []
        for row in rows:
            mapping = row._mapping
            slots.append(
                SlotRow(
                    id=int(mapping["id"]),
                    fecha=_format_date(mapping["fecha"]),
                    hora=_format_hour(mapping.get("hora")),
                    paciente=_text(mapping["paciente"]),
                    medico=_text(mapping["medico"]),
                    estado=_text(mapping["estado"]),
                    cups=_text(mapping.get("cups")),
                    eps=_text(mapping.get("eps")),
                )
            )
        return slots

    def _hydrate(self, slots: Sequence[SlotRow]) -> None:
        self.hydrator.load(
            (slot.paciente for slot in slots), (slot.medico for slot in slots)
        )

    def _keep_eps(self, batch: Sequence[SlotRow], *, eps: str) -> list[SlotRow]:
        self._hydrate(batch)
        kept: list[SlotRow] = []
        for slot in batch:
            patient = self.hydrator.patient_for(slot.paciente)
            if patient is not None and patient.eps == eps:
                kept.append(slot)
        return kept

    def to_out(self, slot: SlotRow) -> CupoRowOut:
        patient = self.hydrator.patient_for(slot.paciente)
        category = status_category(slot.estado)
        eps = slot.eps if self.eps_in_sql else (patient.eps if patient else None)
        return CupoRowOut(
            cita_id=slot.id,
            fecha=slot.fecha.isoformat() if slot.fecha else "",
            hora=slot.hora,
            idusuario=slot.paciente,
            paciente=patient.nombre if patient else None,
            eps=eps,
            idmedico=slot.medico,
            medico=self.hydrator.practitioner_name(slot.medico),
            estado=slot.estado,
            categoria=category.value if category else None,
            tipo_cita=slot.cups,
        )

    def retrieve(
        self,
        query: SlotQuery,
        *,
        offset: int = 0,
        limit: int,
        batch_size: int | None = None,
    ) -> RetrievalResult:
        stmt = self.build_statement(query)
        if stmt is None:
            return RetrievalResult()

        if not query.eps or self.eps_in_sql:
            slots = self.fetch(stmt, offset, limit)
            self._hydrate(slots)
            return RetrievalResult(rows=[self.to_out(slot) for slot in slots])

        source = OffsetBatchSource(partial(self.fetch, stmt), batch_size or self.eps_batch_size)
        result = scan(
            source,
            partial(self._keep_eps, eps=query.eps),
            target=offset + limit,
            scan_cap=self.scan_cap,
        )
        if result.capped:
            logger.warning(
                "EPS scan cap reached: eps=%s scanned=%s matched=%s wanted=%s",
                query.eps,
                result.scanned,
                len(result.matches),
                offset + limit,
            )
        page = result.matches[offset : offset + limit]
        return RetrievalResult(
            rows=[self.to_out(slot) for slot in page],
            scanned=result.scanned,
            capped=result.capped,
        )
