import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from medicontrol.core.exceptions import ConflictError, ValidationError
from medicontrol.repositories import categories, medications
from medicontrol.schemas.medication import MedicationCreate, MedicationUpdate
from medicontrol.services.movements import record_movement


def test_add_and_get_roundtrip(storage):
    with storage.transaction() as db:
        category_id = categories.add(db, "Analgésicos")
        medication_id = medications.add(
            db,
            MedicationCreate(
                name="Dipirona",
                manufacturer="Sanofi",
                form="Comprimido",
                registry_code="1.0047.0118",
                quantity=10,
                expiry="2026-12-31",
                price=5.0,
                category_id=category_id,
            ),
        )

    with storage.connect() as db:
        medication = medications.get(db, medication_id)

    assert medication.name == "Dipirona"
    assert medication.quantity == 10
    assert medication.expiry == "2026-12-31"
    assert medication.category.name == "Analgésicos"
    assert medication.category_id == category_id
    assert medication.created_at is not None


def test_null_columns_decode_to_empty_values(storage):
    with storage.transaction() as db:
        db.connection.exec_driver_sql(
            "INSERT INTO medications (id, name, quantity, created_at, price)"
            " VALUES ('bare', 'Soro', 1, '2024-01-01T00:00:00', NULL)"
        )

    with storage.connect() as db:
        medication = medications.get(db, "bare")

    assert medication.manufacturer == ""
    assert medication.form == ""
    assert medication.registry_code == ""
    assert medication.expiry == ""
    assert medication.price == 0.0
    assert medication.category.id == ""


def test_get_by_registry_code(storage, make_medication):
    medication_id = make_medication(name="Amoxicilina", registry_code="1004307270013")

    with storage.connect() as db:
        assert medications.get_by_registry_code(db, "1004307270013").id == medication_id
        assert medications.get_by_registry_code(db, "000") is None


def test_search_is_case_insensitive_across_fields(storage, make_medication):
    dipirona = make_medication(name="Dipirona", manufacturer="Sanofi", registry_code="1.0047.0118")
    losartana = make_medication(name="Losartana", manufacturer="Medley", registry_code="1781700780021")

    with storage.connect() as db:
        assert [m.id for m in medications.search(db, "DIPI")] == [dipirona]
        assert [m.id for m in medications.search(db, "medley")] == [losartana]
        assert [m.id for m in medications.search(db, "0047")] == [dipirona]
        assert medications.search(db, "paracetamol") == []
        assert {m.id for m in medications.search(db, "")} == {dipirona, losartana}


def test_unknown_category_is_rejected(storage):
    with pytest.raises(ValidationError):
        with storage.transaction() as db:
            medications.add(db, MedicationCreate(name="X", category_id="missing"))


def test_blank_name_is_rejected(storage):
    with pytest.raises(ValidationError):
        with storage.transaction() as db:
            medications.add(db, MedicationCreate(name="  "))


def test_update_never_touches_quantity(storage, make_medication):
    medication_id = make_medication(quantity=7, price=1.0)

    with storage.transaction() as db:
        updated = medications.update(
            db,
            medication_id,
            MedicationUpdate(name="Dipirona Sódica", manufacturer="EMS", price=3.5),
        )
        assert medications.update(db, "missing", MedicationUpdate(name="Y")) is False

    assert updated is True
    with storage.connect() as db:
        medication = medications.get(db, medication_id)

    assert medication.quantity == 7
    assert medication.name == "Dipirona Sódica"
    assert medication.price == 3.5


def test_delete_unreferenced_medication(storage, make_medication):
    medication_id = make_medication()

    with storage.transaction() as db:
        assert medications.delete(db, medication_id) is True
        assert medications.delete(db, medication_id) is False


def test_delete_with_history_is_refused(storage, make_medication):
    medication_id = make_medication(quantity=5)
    record_movement(storage, medication_id, "exit", 1)

    with pytest.raises(ConflictError):
        with storage.transaction() as db:
            medications.delete(db, medication_id)

    with storage.connect() as db:
        assert medications.get(db, medication_id) is not None


def test_low_stock_threshold_is_strict(storage, make_medication):
    low = make_medication(name="Baixo", quantity=3)
    make_medication(name="Alto", quantity=80)

    with storage.connect() as db:
        assert [m.id for m in medications.list_low_stock(db, 5)] == [low]
        assert medications.list_low_stock(db, 3) == []


# Plain ASCII plus a few accented letters whose casefold is a single character
LETTERS = "abcdeABCDEéÉçÇ01"


@settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(
    rows=st.lists(
        st.tuples(
            st.text(LETTERS, min_size=1, max_size=8),
            st.text(LETTERS, max_size=6),
            st.text(LETTERS, max_size=6),
        ),
        max_size=8,
    ),
    term=st.text(LETTERS, min_size=1, max_size=3),
)
def test_search_returns_exactly_the_matching_rows(storage, rows, term):
    with storage.transaction() as db:
        db.connection.exec_driver_sql("DELETE FROM medications")
        ids = {}
        for name, manufacturer, code in rows:
            medication_id = medications.add(
                db,
                MedicationCreate(name=name, manufacturer=manufacturer, registry_code=code),
            )
            ids[medication_id] = (name, manufacturer, code)

    with storage.connect() as db:
        found = {m.id for m in medications.search(db, term)}

    needle = term.casefold()
    expected = {
        medication_id
        for medication_id, fields in ids.items()
        if any(needle in field.casefold() for field in fields)
    }
    assert found == expected
