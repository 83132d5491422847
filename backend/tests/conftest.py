import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RESOLVE_SCHEMA_ON_STARTUP", "false")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cupos_admin.core.settings import Settings
from cupos_admin.db.column_resolver import resolve_schema
from cupos_admin.db.session import get_db
from cupos_admin.deps import get_schema, get_settings
from cupos_admin.main import app
from cupos_admin.models import (
    Agenda,
    Base,
    Empleado,
    Entidad,
    Especialidad,
    EspecialidadEmpleado,
    Usuario,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def schema(engine):
    return resolve_schema(engine)


@pytest.fixture
def test_settings():
    return Settings(
        eps_scan_batch_size=2,
        eps_scan_cap=10_000,
        export_batch_size=3,
        specialty_cups_fallback={"099": "890299"},
    )


@pytest.fixture
def api_client(db_session, schema, test_settings):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_schema] = lambda: schema
    app.dependency_overrides[get_settings] = lambda: test_settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def add_slot(db_session):
    def _add(
        slot_id: int,
        fecha: date,
        *,
        hora: str | None = "08:00",
        paciente: str | None = "1",
        medico: str | None = "M1",
        estado: str | None = "Sin asignar",
        cups: str | None = "890201",
    ) -> Agenda:
        slot = Agenda(
            idagenda=slot_id,
            fecha_cita=fecha,
            idhora=hora,
            idusuario=paciente,
            idmedico=medico,
            estado=estado,
            tipo_cita=cups,
        )
        db_session.add(slot)
        db_session.commit()
        return slot

    return _add


@pytest.fixture
def add_patient(db_session):
    def _add(
        patient_id: int,
        *,
        eps: str | None = "EPS01",
        documento: str | None = None,
        primer_nombre: str | None = "Ana",
        segundo_nombre: str | None = None,
        primer_apellido: str | None = "Gómez",
        segundo_apellido: str | None = None,
    ) -> Usuario:
        patient = Usuario(
            id_usuario=patient_id,
            numero_documento=documento,
            codigo_eps=eps,
            primer_nombre=primer_nombre,
            segundo_nombre=segundo_nombre,
            primer_apellido=primer_apellido,
            segundo_apellido=segundo_apellido,
        )
        db_session.add(patient)
        db_session.commit()
        return patient

    return _add


@pytest.fixture
def add_medico(db_session):
    def _add(
        codigo: str,
        nombre: str | None,
        *,
        perfil: int | None = 2,
        centro: int | None = 900018045,
        especialidades: tuple[str, ...] = (),
    ) -> Empleado:
        medico = Empleado(
            codigo_empleado=codigo, nombre_empleado=nombre, perfil=perfil, id_centro=centro
        )
        db_session.add(medico)
        for code in especialidades:
            db_session.add(EspecialidadEmpleado(codigo_empleado=codigo, codigo_especialidad=code))
        db_session.commit()
        return medico

    return _add


@pytest.fixture
def add_especialidad(db_session):
    def _add(codigo: str, nombre: str | None, cups: str | None = None) -> Especialidad:
        row = Especialidad(codigo_especialidad=codigo, especialidad=nombre, cups=cups)
        db_session.add(row)
        db_session.commit()
        return row

    return _add


@pytest.fixture
def add_entidad(db_session):
    def _add(codigo: str, nombre: str | None) -> Entidad:
        row = Entidad(codigo=codigo, nombre_entidad=nombre)
        db_session.add(row)
        db_session.commit()
        return row

    return _add
