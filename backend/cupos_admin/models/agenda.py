from __future__ import annotations

from datetime import date

from sqlalchemy import Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cupos_admin.models.base import Base


class Agenda(Base):
    """Appointment slot table as deployed by the scheduling system."""

    __tablename__ = "agenda"

    idagenda: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fecha_cita: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    idhora: Mapped[str | None] = mapped_column(String(5), nullable=True)
    idusuario: Mapped[str | None] = mapped_column(String(30), nullable=True)
    idmedico: Mapped[str | None] = mapped_column(String(30), nullable=True)
    estado: Mapped[str | None] = mapped_column("Estado", String(60), nullable=True)
    tipo_cita: Mapped[str | None] = mapped_column("TipoCita", String(10), nullable=True)
