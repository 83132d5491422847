from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cupos_admin.models.base import Base


class Usuario(Base):
    __tablename__ = "usuarios"

    id_usuario: Mapped[int] = mapped_column("IdUsuario", Integer, primary_key=True)
    numero_documento: Mapped[str | None] = mapped_column(
        "NumeroDocumento", String(20), nullable=True, index=True
    )
    codigo_eps: Mapped[str | None] = mapped_column("Codigo_eps", String(10), nullable=True)
    primer_nombre: Mapped[str | None] = mapped_column("Primer_nombre", String(60), nullable=True)
    segundo_nombre: Mapped[str | None] = mapped_column("Segundo_nombre", String(60), nullable=True)
    primer_apellido: Mapped[str | None] = mapped_column("Primer_apellido", String(60), nullable=True)
    segundo_apellido: Mapped[str | None] = mapped_column(
        "Segundo_apellido", String(60), nullable=True
    )
