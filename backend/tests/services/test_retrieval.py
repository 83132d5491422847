from datetime import date

from cupos_admin.services.hydration import Hydrator
from cupos_admin.services.retrieval import SlotQuery, SlotRetriever
from cupos_admin.services.status import StatusCategory


def _retriever(db_session, schema, **kwargs):
    kwargs.setdefault("eps_batch_size", 2)
    kwargs.setdefault("scan_cap", 1000)
    return SlotRetriever(db_session, schema, **kwargs)


def test_rows_are_hydrated_with_patient_and_practitioner_names(
    db_session, schema, add_slot, add_patient, add_medico
):
    add_patient(1, eps="EPS01", primer_nombre="Ana", primer_apellido="Gómez")
    add_medico("M1", "Dr. House")
    add_slot(10, date(2024, 1, 5), hora="09:30", paciente="1", medico="M1", estado="ASIGNADA")

    result = _retriever(db_session, schema).retrieve(
        SlotQuery(desde=date(2024, 1, 1), hasta=date(2024, 1, 31)), limit=10
    )
    [row] = result.rows
    assert row.cita_id == 10
    assert row.fecha == "2024-01-05"
    assert row.hora == "09:30"
    assert row.paciente == "Ana Gómez"
    assert row.eps == "EPS01"
    assert row.medico == "Dr. House"
    assert row.estado == "ASIGNADA"
    assert row.categoria == "ASIGNADA"
    assert row.tipo_cita == "890201"


def test_missing_references_hydrate_to_nulls(db_session, schema, add_slot):
    add_slot(1, date(2024, 1, 5), paciente="404", medico="NOPE")
    add_slot(2, date(2024, 1, 5), paciente=None, medico=None)

    result = _retriever(db_session, schema).retrieve(
        SlotQuery(desde=date(2024, 1, 5), hasta=date(2024, 1, 5)), limit=10
    )
    assert len(result.rows) == 2
    for row in result.rows:
        assert row.paciente is None
        assert row.eps is None
        assert row.medico is None


def test_patient_reference_falls_back_to_documento(db_session, schema, add_slot, add_patient):
    add_patient(7, documento="1032456789", primer_nombre="Luis", primer_apellido="Pérez")
    add_slot(1, date(2024, 1, 5), paciente="1032456789")

    hydrator = Hydrator(db_session, schema)
    result = _retriever(db_session, schema, hydrator=hydrator).retrieve(
        SlotQuery(desde=date(2024, 1, 5), hasta=date(2024, 1, 5)), limit=10
    )
    assert result.rows[0].paciente == "Luis Pérez"
    assert "1032456789" in hydrator.cache.patients_by_documento


def test_orderings(db_session, schema, add_slot):
    add_slot(1, date(2024, 1, 2), hora="10:00")
    add_slot(2, date(2024, 1, 1), hora="08:00")
    add_slot(3, date(2024, 1, 2), hora="07:00")
    retriever = _retriever(db_session, schema)
    window = dict(desde=date(2024, 1, 1), hasta=date(2024, 1, 31))

    asc = retriever.retrieve(SlotQuery(**window, order="asc"), limit=10)
    desc = retriever.retrieve(SlotQuery(**window, order="desc"), limit=10)
    assert [row.cita_id for row in asc.rows] == [2, 3, 1]
    assert [row.cita_id for row in desc.rows] == [1, 3, 2]


def test_status_and_hour_filters(db_session, schema, add_slot):
    add_slot(1, date(2024, 1, 1), hora="07:00", estado="Sin asignar")
    add_slot(2, date(2024, 1, 1), hora="09:00", estado="Asignada")
    add_slot(3, date(2024, 1, 1), hora="11:00", estado="Sin asignar")
    add_slot(4, date(2024, 1, 1), hora="09:30", estado="Cancelada")
    retriever = _retriever(db_session, schema)

    query = SlotQuery(
        desde=date(2024, 1, 1),
        hasta=date(2024, 1, 1),
        estados=(StatusCategory.sin_asignar, StatusCategory.asignada),
        hora_desde="08:00",
        hora_hasta="12:00",
        order="asc",
    )
    assert [row.cita_id for row in retriever.retrieve(query, limit=10).rows] == [2, 3]


def test_empty_cups_set_short_circuits(db_session, schema, add_slot):
    add_slot(1, date(2024, 1, 1))
    query = SlotQuery(desde=date(2024, 1, 1), hasta=date(2024, 1, 1), cups=frozenset())
    retriever = _retriever(db_session, schema)
    assert retriever.build_statement(query) is None
    assert retriever.retrieve(query, limit=10).rows == []


def test_eps_filter_scans_in_batches(db_session, schema, add_slot, add_patient):
    add_patient(1, eps="EPS01")
    add_patient(2, eps="EPS02")
    for slot_id in range(1, 9):
        add_slot(slot_id, date(2024, 1, slot_id), paciente="1" if slot_id % 2 else "2")

    retriever = _retriever(db_session, schema)
    assert not retriever.eps_in_sql
    query = SlotQuery(desde=date(2024, 1, 1), hasta=date(2024, 1, 31), eps="EPS01", order="asc")

    result = retriever.retrieve(query, offset=1, limit=2)
    assert [row.cita_id for row in result.rows] == [3, 5]
    assert all(row.eps == "EPS01" for row in result.rows)
    assert not result.capped


def test_eps_scan_cap_returns_partial_page(db_session, schema, add_slot, add_patient):
    add_patient(1, eps="EPS01")
    add_patient(2, eps="EPS02")
    for slot_id in range(1, 9):
        add_slot(slot_id, date(2024, 1, slot_id), paciente="2" if slot_id < 8 else "1")

    retriever = _retriever(db_session, schema, scan_cap=4)
    query = SlotQuery(desde=date(2024, 1, 1), hasta=date(2024, 1, 31), eps="EPS01", order="asc")
    result = retriever.retrieve(query, limit=5)
    assert result.rows == []
    assert result.capped
    assert result.scanned == 4


def test_hour_bounds_compare_times_inclusively(db_session, schema, add_slot):
    add_slot(1, date(2024, 1, 1), hora="09:00:00")
    add_slot(2, date(2024, 1, 1), hora="08:30")
    add_slot(3, date(2024, 1, 1), hora="8:15")
    add_slot(4, date(2024, 1, 1), hora="08:00")
    add_slot(5, date(2024, 1, 1), hora="7:59")
    add_slot(6, date(2024, 1, 1), hora="09:01")
    add_slot(7, date(2024, 1, 1), hora=None)

    query = SlotQuery(
        desde=date(2024, 1, 1),
        hasta=date(2024, 1, 1),
        hora_desde="08:00",
        hora_hasta="09:00",
        order="asc",
    )
    ids = {row.cita_id for row in _retriever(db_session, schema).retrieve(query, limit=10).rows}
    assert ids == {1, 2, 3, 4}


def test_status_filter_agrees_with_row_category(db_session, schema, add_slot):
    add_slot(1, date(2024, 1, 1), estado=" Sin asignar")
    add_slot(2, date(2024, 1, 1), estado="Sin  asignar")
    add_slot(3, date(2024, 1, 1), estado="asignada ")
    add_slot(4, date(2024, 1, 1), estado="Atendída")

    retriever = _retriever(db_session, schema)
    window = dict(desde=date(2024, 1, 1), hasta=date(2024, 1, 1), order="asc")
    everything = retriever.retrieve(SlotQuery(**window), limit=10).rows
    for category in (StatusCategory.sin_asignar, StatusCategory.asignada, StatusCategory.atendida):
        filtered = retriever.retrieve(SlotQuery(**window, estados=(category,)), limit=10).rows
        expected = [row.cita_id for row in everything if row.categoria == category.value]
        assert [row.cita_id for row in filtered] == expected
    assert [row.categoria for row in everything] == ["SIN_ASIGNAR", None, "ASIGNADA", "ATENDIDA"]
