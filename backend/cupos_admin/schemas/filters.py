"""Request filter parsing.

Every endpoint funnels its raw input (JSON body or query string) through the
models below, so the accepted input shapes (singular vs. plural keys, arrays vs.
comma-separated strings, ``k[]`` query keys) are handled in one place and the
services only ever see the canonical plural lists.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Iterable, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from cupos_admin.core.errors import ValidationError
from cupos_admin.core.settings import MAX_LIMIT, settings
from cupos_admin.services.status import ALL_CATEGORIES, StatusCategory

_HOUR_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")

# singular key -> plural key it folds into
_SINGULAR_ALIASES = {"especialidad": "especialidades", "medico": "medicos"}
_LIST_KEYS = ("especialidades", "medicos", "estados")
_SCALAR_QUERY_KEYS = ("desde", "hasta", "eps", "horaDesde", "horaHasta", "all", "limit", "offset")

F = TypeVar("F", bound=BaseModel)


def as_list(value: Any) -> list[str]:
    """Flatten ``None`` / scalar / CSV string / nested list input to trimmed strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        items: list[str] = []
        for item in value:
            items.extend(as_list(item))
        return items
    return [chunk.strip() for chunk in str(value).split(",") if chunk.strip()]


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            out.append(value)
    return out


def _parse_iso_date(value: Any, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if len(text) < 10:
        raise ValueError(f"{field_name} debe tener formato YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError:
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise ValueError(f"{field_name} debe tener formato YYYY-MM-DD") from None


class _SlotFilters(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    desde: date
    hasta: date
    eps: str | None = None
    especialidades: list[str] = Field(default_factory=list)
    medicos: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _fold_singular_aliases(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        for singular, plural in _SINGULAR_ALIASES.items():
            merged = as_list(data.get(plural)) + as_list(data.pop(singular, None))
            data[plural] = _dedupe(merged)
        if data.get("estados") is None:
            data.pop("estados", None)
        else:
            data["estados"] = _dedupe(value.upper() for value in as_list(data["estados"]))
        return data

    @field_validator("desde", "hasta", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any, info):
        return _parse_iso_date(value, info.field_name)

    @field_validator("eps", mode="before")
    @classmethod
    def _blank_eps(cls, value: Any):
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @model_validator(mode="after")
    def _check_date_order(self):
        if self.desde > self.hasta:
            raise ValueError("La fecha 'desde' no puede ser mayor a 'hasta'.")
        return self


class ReportFilters(_SlotFilters):
    """Canonical filters for ``/reportes/data`` and ``/reportes/export``."""

    estados: list[StatusCategory] = Field(default_factory=lambda: list(ALL_CATEGORIES))
    all_: bool = Field(default=False, alias="all")
    limit: int = Field(default_factory=lambda: settings.default_limit, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _expand_all(self):
        if self.all_:
            self.limit = MAX_LIMIT
        return self


class CuposListFilters(_SlotFilters):
    """Filters for the deletion listing; no status filter unless one is given."""

    hora_desde: str | None = Field(default=None, alias="horaDesde")
    hora_hasta: str | None = Field(default=None, alias="horaHasta")
    estados: list[StatusCategory] = Field(default_factory=list)

    @field_validator("hora_desde", "hora_hasta", mode="before")
    @classmethod
    def _parse_hour(cls, value: Any):
        if value is None or str(value).strip() == "":
            return None
        match = _HOUR_RE.match(str(value).strip())
        if not match:
            raise ValueError("la hora debe tener formato HH:MM")
        return f"{match.group(1)}:{match.group(2)}"

    @model_validator(mode="after")
    def _check_hour_order(self):
        if self.hora_desde and self.hora_hasta and self.hora_desde > self.hora_hasta:
            raise ValueError("La hora 'Desde' no puede ser mayor a 'Hasta'.")
        return self


def _describe(exc: PydanticValidationError) -> str:
    messages: list[str] = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
        msg = error.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        messages.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(messages) or "Filtros inválidos"


def parse_request(model: type[F], payload: Mapping[str, Any] | None, **overrides: Any) -> F:
    data = dict(payload or {})
    data.update(overrides)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc)) from exc


def query_to_payload(params) -> dict[str, Any]:
    """Turn a Starlette ``QueryParams`` (multi-dict) into a filter payload.

    ``?k=a&k=b``, ``?k[]=a&k[]=b`` and ``?k=a,b`` are equivalent for list keys;
    scalar keys take their first value.
    """
    payload: dict[str, Any] = {}
    for key in _SCALAR_QUERY_KEYS:
        value = params.get(key)
        if value is not None:
            payload[key] = value
    for key in (*_LIST_KEYS, *_SINGULAR_ALIASES):
        values = [*params.getlist(key), *params.getlist(f"{key}[]")]
        if values:
            payload[key] = as_list(values)
    return payload
