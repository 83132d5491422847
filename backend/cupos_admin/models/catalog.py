from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from cupos_admin.models.base import Base


class Especialidad(Base):
    __tablename__ = "tvespecialidades"

    codigo_especialidad: Mapped[str] = mapped_column("CodigoEspecialidad", String(3), primary_key=True)
    especialidad: Mapped[str | None] = mapped_column("Especialidad", String(200), nullable=True)
    cups: Mapped[str | None] = mapped_column("CUPS", String(10), nullable=True)


class Entidad(Base):
    __tablename__ = "tventidades"

    codigo: Mapped[str] = mapped_column("Codigo", String(10), primary_key=True)
    nombre_entidad: Mapped[str | None] = mapped_column("NombreEntidad", String(200), nullable=True)
