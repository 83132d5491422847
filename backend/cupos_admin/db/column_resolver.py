from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Column, MetaData, Table, inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import NoSuchTableError

from cupos_admin.core.errors import SchemaResolutionError
from cupos_admin.core.text import fold
from cupos_admin.db.schema_map import (
    AGENDA,
    EMPLEADOS,
    ENTIDADES,
    ESPECIALIDAD_EMPLEADOS,
    ESPECIALIDADES,
    SCHEMA_MAP,
    SCHEMA_MAP_VERSION,
    USUARIOS,
    FieldSpec,
)

logger = logging.getLogger("cupos_admin.schema")


def pick_column(
    columns: list[str],
    candidates: tuple[str, ...] | list[str],
    *,
    required: bool = False,
    table: str = "",
    field: str = "",
) -> str | None:
    """Return the real spelling of the first candidate present in ``columns``.

    Names are compared accent- and case-insensitively, candidates are tried in
    the given order. Missing optional fields give ``None``; missing required
    fields raise :class:`SchemaResolutionError`.
    """
    by_folded: dict[str, str] = {}
    for name in columns:
        by_folded.setdefault(fold(name), name)
    for candidate in candidates:
        real = by_folded.get(fold(candidate))
        if real is not None:
            return real
    if required:
        raise SchemaResolutionError(table, field or candidates[0], list(candidates))
    return None


@dataclass(frozen=True)
class ResolvedSchema:
    """Core ``Table`` objects whose columns are keyed by logical field name."""

    agenda: Table
    usuarios: Table
    empleados: Table
    especialidades: Table
    entidades: Table
    especialidad_empleados: Table
    version: int = SCHEMA_MAP_VERSION

    def physical_names(self, table: Table) -> dict[str, str]:
        return {col.key: col.name for col in table.columns}


class ColumnResolver:
    def __init__(self, bind: Engine | Connection, schema_map=None) -> None:
        self._bind = bind
        self._map: dict[str, dict[str, FieldSpec]] = schema_map or SCHEMA_MAP
        self._metadata = MetaData()

    def resolve_table(self, table_name: str) -> Table:
        inspector = inspect(self._bind)
        try:
            reflected = inspector.get_columns(table_name)
        except NoSuchTableError as exc:
            raise SchemaResolutionError(table_name) from exc
        if not reflected:
            raise SchemaResolutionError(table_name)
        types = {col["name"]: col["type"] for col in reflected}
        names = list(types)

        columns: list[Column] = []
        for field, spec in self._map[table_name].items():
            physical = pick_column(
                names, spec.candidates, required=spec.required, table=table_name, field=field
            )
            if physical is None:
                continue
            columns.append(Column(physical, types[physical], key=field))
        return Table(table_name, self._metadata, *columns)

    def resolve(self) -> ResolvedSchema:
        schema = ResolvedSchema(
            agenda=self.resolve_table(AGENDA),
            usuarios=self.resolve_table(USUARIOS),
            empleados=self.resolve_table(EMPLEADOS),
            especialidades=self.resolve_table(ESPECIALIDADES),
            entidades=self.resolve_table(ENTIDADES),
            especialidad_empleados=self.resolve_table(ESPECIALIDAD_EMPLEADOS),
        )
        logger.info(
            "Schema map v%s resolved: agenda=%s usuarios=%s",
            SCHEMA_MAP_VERSION,
            schema.physical_names(schema.agenda),
            schema.physical_names(schema.usuarios),
        )
        return schema


def resolve_schema(bind: Engine | Connection) -> ResolvedSchema:
    return ColumnResolver(bind).resolve()
