import enum
from typing import Iterable

from sqlalchemy import func, literal_column, or_

__all__ = [
    "StatusCategory",
    "ALL_CATEGORIES",
    "STATUS_PREFIXES",
    "status_category",
    "status_predicate",
]


class StatusCategory(str, enum.Enum):
    asignada = "ASIGNADA"
    atendida = "ATENDIDA"
    cumplida = "CUMPLIDA"
    sin_asignar = "SIN_ASIGNAR"


ALL_CATEGORIES: tuple[StatusCategory, ...] = tuple(StatusCategory)

# Upper-case prefixes as stored in agenda.Estado.
STATUS_PREFIXES: dict[StatusCategory, str] = {
    StatusCategory.asignada: "ASIGNAD",
    StatusCategory.atendida: "ATENDID",
    StatusCategory.cumplida: "CUMPLID",
    StatusCategory.sin_asignar: "SIN ASIGNAR",
}


# Accented letters folded before matching; applied identically in SQL and Python.
_ACCENT_PAIRS = tuple(
    zip(
        "ÁÀÂÄÉÈÊËÍÌÎÏÓÒÔÖÚÙÛÜÑÇáàâäéèêëíìîïóòôöúùûüñç",
        "AAAAEEEEIIIIOOOOUUUUNCaaaaeeeeiiiioooouuuunc",
    )
)
_ACCENT_TABLE = str.maketrans(dict(_ACCENT_PAIRS))


def _normalize(value: str | None) -> str:
    # Must stay equivalent to _status_expression.
    return (value or "").translate(_ACCENT_TABLE).strip(" ").upper()


def _status_expression(column):
    expr = column
    for accented, plain in _ACCENT_PAIRS:
        expr = func.replace(expr, literal_column(f"'{accented}'"), literal_column(f"'{plain}'"))
    return func.upper(func.trim(expr))


def status_category(value: str | None) -> StatusCategory | None:
    normalized = _normalize(value)
    if not normalized:
        return None
    for category, prefix in STATUS_PREFIXES.items():
        if normalized.startswith(prefix):
            return category
    return None


def status_predicate(column, categories: Iterable[StatusCategory]):
    """SQL filter matching exactly the rows ``status_category`` puts in ``categories``."""
    expr = _status_expression(column)
    return or_(*(expr.like(f"{STATUS_PREFIXES[category]}%") for category in categories))
