from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from cupos_admin.core.errors import IneligibleDeletionError, ValidationError
from cupos_admin.db.column_resolver import ResolvedSchema
from cupos_admin.services.hydration import chunked
from cupos_admin.services.status import StatusCategory, status_category, status_predicate

logger = logging.getLogger("cupos_admin.delete")

MAX_REPORTED_IDS = 10


@dataclass
class DeleteResult:
    requested: int
    deleted: int

    @property
    def skipped(self) -> int:
        return max(self.requested - self.deleted, 0)


def _format_ids(ids: list[int]) -> str:
    shown = ", ".join(str(value) for value in ids[:MAX_REPORTED_IDS])
    if len(ids) > MAX_REPORTED_IDS:
        shown += ", …"
    return shown


def delete_unassigned(db: Session, schema: ResolvedSchema, ids: list[int]) -> DeleteResult:
    """Delete the given slots only if every one of them is SIN_ASIGNAR.

    All-or-nothing: a single missing or ineligible id rejects the whole batch.
    The DELETE repeats the status predicate so a slot assigned between the check
    and the delete is left alone; the returned count reflects that.
    """
    if not ids:
        raise ValidationError("ids es obligatorio (array no vacío)")
    t = schema.agenda

    statuses: dict[int, str | None] = {}
    for chunk in chunked(ids):
        for slot_id, estado in db.execute(select(t.c.id, t.c.estado).where(t.c.id.in_(chunk))):
            statuses[int(slot_id)] = estado

    missing = [slot_id for slot_id in ids if slot_id not in statuses]
    if missing:
        raise IneligibleDeletionError(
            f"Cupos inexistentes: {_format_ids(missing)}", offending_ids=missing
        )
    ineligible = [
        slot_id
        for slot_id in ids
        if status_category(statuses[slot_id]) is not StatusCategory.sin_asignar
    ]
    if ineligible:
        raise IneligibleDeletionError(
            f"Solo se pueden eliminar cupos 'SIN ASIGNAR'. No elegibles: {_format_ids(ineligible)}",
            offending_ids=ineligible,
        )

    result = db.execute(
        delete(t).where(
            t.c.id.in_(ids), status_predicate(t.c.estado, [StatusCategory.sin_asignar])
        )
    )
    deleted = result.rowcount or 0
    db.commit()

    outcome = DeleteResult(requested=len(ids), deleted=deleted)
    if outcome.skipped:
        logger.warning(
            "Deleted %s of %s cupos; %s changed status before delete",
            deleted,
            len(ids),
            outcome.skipped,
        )
    else:
        logger.info("Deleted %s cupos: %s", deleted, _format_ids(ids))
    return outcome
