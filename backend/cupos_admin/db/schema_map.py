"""Logical field -> physical column candidates for the scheduling database.

The agenda database is owned by the external scheduling system and its column
names differ between deployments (renames, accented vs. unaccented spellings).
Each entry lists the accepted physical names in priority order. Bump
``SCHEMA_MAP_VERSION`` whenever a candidate list changes.
"""

from __future__ import annotations

from dataclasses import dataclass

SCHEMA_MAP_VERSION = 3


@dataclass(frozen=True)
class FieldSpec:
    candidates: tuple[str, ...]
    required: bool = False


AGENDA = "agenda"
USUARIOS = "usuarios"
EMPLEADOS = "empleados"
ESPECIALIDADES = "tvespecialidades"
ENTIDADES = "tventidades"
ESPECIALIDAD_EMPLEADOS = "especialidad_empleados"

_EMPLOYEE_CODE = ("Código_empleado", "CodigoEmpleado")

SCHEMA_MAP: dict[str, dict[str, FieldSpec]] = {
    AGENDA: {
        "id": FieldSpec(("idagenda", "id", "idcita", "id_cita", "id_agenda"), required=True),
        "fecha": FieldSpec(
            ("fecha_cita", "fecha", "fechacita", "fec_cita", "fecha_programada"), required=True
        ),
        "hora": FieldSpec(("idhora", "hora", "hora_cita", "horacita", "hora_inicio")),
        "estado": FieldSpec(("Estado",), required=True),
        "cups": FieldSpec(("TipoCita", "tipo_cita", "cups")),
        "paciente": FieldSpec(("idusuario", "id_usuario"), required=True),
        "medico": FieldSpec(("idmedico", "id_medico", "cod_medico"), required=True),
        "eps": FieldSpec(("Codigo_eps", "eps")),
    },
    USUARIOS: {
        "id": FieldSpec(("IdUsuario", "id_usuario"), required=True),
        "documento": FieldSpec(
            ("NumeroDocumento", "numero_documento", "Documento", "Identificacion", "cedula")
        ),
        "eps": FieldSpec(("Codigo_eps",)),
        "primer_nombre": FieldSpec(("Primer_nombre",)),
        "segundo_nombre": FieldSpec(("Segundo_nombre",)),
        "primer_apellido": FieldSpec(("Primer_apellido",)),
        "segundo_apellido": FieldSpec(("Segundo_apellido",)),
    },
    EMPLEADOS: {
        "codigo": FieldSpec(_EMPLOYEE_CODE, required=True),
        "nombre": FieldSpec(("Nombre_empleado", "NombreEmpleado"), required=True),
        "perfil": FieldSpec(("Perfil",)),
        "centro": FieldSpec(("IdCentro", "id_centro")),
    },
    ESPECIALIDADES: {
        "codigo": FieldSpec(("CodigoEspecialidad", "codigo_especialidad"), required=True),
        "nombre": FieldSpec(("Especialidad", "nombre"), required=True),
        "cups": FieldSpec(("CUPS",)),
    },
    ENTIDADES: {
        "codigo": FieldSpec(("Codigo",), required=True),
        "nombre": FieldSpec(("NombreEntidad", "nombre_entidad", "Nombre"), required=True),
    },
    ESPECIALIDAD_EMPLEADOS: {
        "empleado": FieldSpec(_EMPLOYEE_CODE, required=True),
        "especialidad": FieldSpec(
            ("Código_especialidad", "especialidad"), required=True
        ),
    },
}
