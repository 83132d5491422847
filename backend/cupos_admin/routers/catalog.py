from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from cupos_admin.core.settings import Settings
from cupos_admin.core.text import sort_key
from cupos_admin.db.column_resolver import ResolvedSchema
from cupos_admin.db.session import get_db
from cupos_admin.deps import get_schema, get_settings
from cupos_admin.schemas.catalog import OptionOut, OptionsOut
from cupos_admin.schemas.filters import as_list
from cupos_admin.services.specialties import clean_specialty_label

router = APIRouter(prefix="/catalog", tags=["catalog"])

_SPECIALTY_KEYS = ("especialidad", "especialidad[]", "especialidades", "especialidades[]")


def _sorted_options(options: list[OptionOut]) -> list[OptionOut]:
    return sorted(options, key=lambda option: sort_key(option.label))


@router.get("/eps", response_model=OptionsOut)
def list_eps(
    db: Session = Depends(get_db),
    schema: ResolvedSchema = Depends(get_schema),
):
    t = schema.entidades
    options = []
    for codigo, nombre in db.execute(select(t.c.codigo, t.c.nombre)):
        value = str(codigo).strip()
        label = (nombre or "").strip() or value
        options.append(OptionOut(value=value, label=label))
    return OptionsOut(options=_sorted_options(options))


@router.get("/especialidades", response_model=OptionsOut)
def list_especialidades(
    db: Session = Depends(get_db),
    schema: ResolvedSchema = Depends(get_schema),
):
    t = schema.especialidades
    options = []
    for codigo, nombre in db.execute(select(t.c.codigo, t.c.nombre)):
        value = str(codigo).strip()
        options.append(OptionOut(value=value, label=clean_specialty_label(nombre) or value))
    return OptionsOut(options=_sorted_options(options))


async def _specialty_codes(request: Request) -> list[str]:
    codes: list[str] = []
    if request.method == "POST":
        try:
            body: Any = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            raw = body.get("especialidades")
            if raw is None:
                raw = body.get("especialidad")
            codes.extend(as_list(raw))
    for key in _SPECIALTY_KEYS:
        codes.extend(as_list(request.query_params.getlist(key)))
    return list(dict.fromkeys(codes))


@router.api_route("/medicos", methods=["GET", "POST"], response_model=OptionsOut)
def list_medicos(
    especialidades: list[str] = Depends(_specialty_codes),
    db: Session = Depends(get_db),
    schema: ResolvedSchema = Depends(get_schema),
    config: Settings = Depends(get_settings),
):
    t = schema.empleados
    stmt = select(t.c.codigo, t.c.nombre)
    if "perfil" in t.c:
        stmt = stmt.where(t.c.perfil == config.medicos_perfil)
    if "centro" in t.c:
        stmt = stmt.where(t.c.centro == config.medicos_centro)

    if especialidades:
        link = schema.especialidad_empleados
        linked = [
            str(code).strip()
            for code in db.scalars(
                select(link.c.empleado)
                .where(link.c.especialidad.in_(especialidades))
                .distinct()
            )
            if code
        ]
        if not linked:
            return OptionsOut(options=[])
        stmt = stmt.where(t.c.codigo.in_(linked))

    stmt = stmt.order_by(t.c.nombre.asc(), t.c.codigo.asc())
    options = []
    for codigo, nombre in db.execute(stmt):
        value = str(codigo).strip()
        options.append(OptionOut(value=value, label=(nombre or "").strip() or value))
    return OptionsOut(options=options)
