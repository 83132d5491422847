from __future__ import annotations

import re
from typing import Iterable, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from cupos_admin.db.column_resolver import ResolvedSchema

_CUPS_RE = re.compile(r"^\d{6}$")
_LABEL_CODE_RE = re.compile(r"^\s*(\d{6})\s*[-–]")
_LABEL_PREFIX_RE = re.compile(r"^\s*\d+\s*[-–]\s*", re.UNICODE)


def is_cups(value: str) -> bool:
    return bool(_CUPS_RE.match(value))


def clean_specialty_label(raw: str | None) -> str:
    """``"890201 - MEDICINA GENERAL"`` -> ``"MEDICINA GENERAL"``."""
    if not raw:
        return ""
    return _LABEL_PREFIX_RE.sub("", raw).strip()


def _cups_from_label(label: str | None) -> str | None:
    if not label:
        return None
    match = _LABEL_CODE_RE.match(label)
    return match.group(1) if match else None


def resolve_cups(
    db: Session,
    schema: ResolvedSchema,
    codes: Iterable[str],
    fallback: Mapping[str, str] | None = None,
) -> frozenset[str] | None:
    """Translate specialty codes to the CUPS set used to filter ``agenda``.

    Returns ``None`` when no codes were given (no filter) and an empty set when
    codes were given but none translated, which must yield zero rows.
    """
    requested = [code.strip() for code in codes if code and code.strip()]
    if not requested:
        return None

    cups: set[str] = {code for code in requested if is_cups(code)}
    specialty_codes = [code for code in requested if not is_cups(code)]
    if specialty_codes:
        table = schema.especialidades
        columns = [table.c.codigo, table.c.nombre]
        has_cups = "cups" in table.c
        if has_cups:
            columns.append(table.c.cups)
        found: dict[str, str] = {}
        stmt = select(*(col.label(col.key) for col in columns))
        for row in db.execute(stmt.where(table.c.codigo.in_(specialty_codes))):
            mapping = row._mapping
            value = (mapping["cups"] or "").strip() if has_cups else ""
            value = value or _cups_from_label(mapping["nombre"]) or ""
            if value:
                found[str(mapping["codigo"]).strip()] = value
        for code in specialty_codes:
            value = found.get(code) or (fallback or {}).get(code)
            if value:
                cups.add(value.strip())
    return frozenset(cups)
