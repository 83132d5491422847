from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from cupos_admin.db.column_resolver import ResolvedSchema

# Stays under the bound-parameter limit of every supported backend.
IN_CHUNK_SIZE = 900

NAME_FIELDS = ("primer_nombre", "segundo_nombre", "primer_apellido", "segundo_apellido")


def build_display_name(*parts: str | None) -> str | None:
    cleaned = [part.strip() for part in parts if part and part.strip()]
    name = " ".join(cleaned).strip()
    return name or None


def chunked(values: Sequence, size: int = IN_CHUNK_SIZE) -> Iterator[Sequence]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


def _clean_ref(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class PatientRecord:
    id: int | None
    documento: str | None
    eps: str | None
    nombre: str | None


@dataclass
class HydrationCache:
    """Per-request lookup results; construct one per request and pass it along."""

    patients_by_id: dict[int, PatientRecord] = field(default_factory=dict)
    patients_by_documento: dict[str, PatientRecord] = field(default_factory=dict)
    practitioners: dict[str, str | None] = field(default_factory=dict)
    seen_ids: set[int] = field(default_factory=set)
    seen_documentos: set[str] = field(default_factory=set)
    seen_practitioners: set[str] = field(default_factory=set)


class Hydrator:
    def __init__(self, db: Session, schema: ResolvedSchema, cache: HydrationCache | None = None):
        self._db = db
        self._schema = schema
        self.cache = cache or HydrationCache()

    def load(self, patient_refs: Iterable[object], practitioner_codes: Iterable[object]) -> None:
        refs = {ref for ref in map(_clean_ref, patient_refs) if ref}
        codes = {code for code in map(_clean_ref, practitioner_codes) if code}
        self._load_patients(refs)
        self._load_practitioners(codes)

    def patient_for(self, ref: object) -> PatientRecord | None:
        text = _clean_ref(ref)
        if text is None:
            return None
        if text.isdigit():
            patient = self.cache.patients_by_id.get(int(text))
            if patient is not None:
                return patient
        return self.cache.patients_by_documento.get(text)

    def practitioner_name(self, code: object) -> str | None:
        text = _clean_ref(code)
        if text is None:
            return None
        return self.cache.practitioners.get(text)

    def _patient_columns(self):
        table = self._schema.usuarios
        cols = [table.c.id]
        for name in ("documento", "eps", *NAME_FIELDS):
            if name in table.c:
                cols.append(table.c[name])
        return [col.label(col.key) for col in cols]

    def _to_record(self, row) -> PatientRecord:
        mapping = row._mapping
        return PatientRecord(
            id=mapping["id"],
            documento=_clean_ref(mapping.get("documento")),
            eps=_clean_ref(mapping.get("eps")),
            nombre=build_display_name(*(mapping.get(name) for name in NAME_FIELDS)),
        )

    def _store(self, record: PatientRecord) -> None:
        if record.id is not None:
            self.cache.patients_by_id[int(record.id)] = record
        if record.documento:
            self.cache.patients_by_documento.setdefault(record.documento, record)

    def _load_patients(self, refs: set[str]) -> None:
        table = self._schema.usuarios
        columns = self._patient_columns()

        numeric = sorted(
            int(ref) for ref in refs if ref.isdigit() and int(ref) not in self.cache.seen_ids
        )
        self.cache.seen_ids.update(numeric)
        for chunk in chunked(numeric):
            for row in self._db.execute(select(*columns).where(table.c.id.in_(chunk))):
                self._store(self._to_record(row))

        if "documento" not in table.c:
            return
        # Refs not already satisfied by a surrogate id fall back to national id.
        pending = sorted(
            ref
            for ref in refs
            if ref not in self.cache.seen_documentos
            and not (ref.isdigit() and int(ref) in self.cache.patients_by_id)
        )
        self.cache.seen_documentos.update(pending)
        for chunk in chunked(pending):
            for row in self._db.execute(select(*columns).where(table.c.documento.in_(chunk))):
                self._store(self._to_record(row))

    def _load_practitioners(self, codes: set[str]) -> None:
        table = self._schema.empleados
        pending = sorted(codes - self.cache.seen_practitioners)
        self.cache.seen_practitioners.update(pending)
        for chunk in chunked(pending):
            stmt = select(table.c.codigo, table.c.nombre).where(table.c.codigo.in_(chunk))
            for codigo, nombre in self._db.execute(stmt):
                self.cache.practitioners[str(codigo).strip()] = _clean_ref(nombre)
