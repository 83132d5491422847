from __future__ import annotations

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cupos_admin.models.base import Base


class Empleado(Base):
    __tablename__ = "empleados"

    codigo_empleado: Mapped[str] = mapped_column("Código_empleado", String(30), primary_key=True)
    nombre_empleado: Mapped[str | None] = mapped_column("Nombre_empleado", String(200), nullable=True)
    perfil: Mapped[int | None] = mapped_column("Perfil", Integer, nullable=True)
    id_centro: Mapped[int | None] = mapped_column("IdCentro", BigInteger, nullable=True)


class EspecialidadEmpleado(Base):
    __tablename__ = "especialidad_empleados"

    codigo_empleado: Mapped[str] = mapped_column("Código_empleado", String(30), primary_key=True)
    codigo_especialidad: Mapped[str] = mapped_column(
        "Código_especialidad", String(3), primary_key=True
    )
