from cupos_admin.models.base import Base
from cupos_admin.models.agenda import Agenda
from cupos_admin.models.usuario import Usuario
from cupos_admin.models.empleado import Empleado, EspecialidadEmpleado
from cupos_admin.models.catalog import Entidad, Especialidad

__all__ = [
    "Base",
    "Agenda",
    "Usuario",
    "Empleado",
    "EspecialidadEmpleado",
    "Entidad",
    "Especialidad",
]
