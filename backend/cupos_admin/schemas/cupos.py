from typing import Any, List, Optional

from pydantic import BaseModel, field_validator

from cupos_admin.schemas.filters import as_list


class CupoRowOut(BaseModel):
    cita_id: int
    fecha: str
    hora: Optional[str] = None
    idusuario: Optional[str] = None
    paciente: Optional[str] = None
    eps: Optional[str] = None
    idmedico: Optional[str] = None
    medico: Optional[str] = None
    estado: Optional[str] = None
    categoria: Optional[str] = None
    tipo_cita: Optional[str] = None


class RowsOut(BaseModel):
    rows: List[CupoRowOut]


def parse_ids(raw: Any) -> list[int]:
    """Coerce ``[1, "2", "3,4"]`` / ``"1,2"`` style input to unique positive ints."""
    ids: list[int] = []
    seen: set[int] = set()
    for chunk in as_list(raw):
        try:
            value = int(chunk)
        except ValueError:
            raise ValueError(f"id inválido: {chunk!r}") from None
        if value <= 0:
            raise ValueError(f"id inválido: {chunk!r}")
        if value not in seen:
            seen.add(value)
            ids.append(value)
    if not ids:
        raise ValueError("ids es obligatorio (array no vacío)")
    return ids


class DeleteRequest(BaseModel):
    ids: List[int]

    @field_validator("ids", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> list[int]:
        return parse_ids(value)


class DeleteOut(BaseModel):
    ok: bool
    deleted: int
    skipped: int = 0
