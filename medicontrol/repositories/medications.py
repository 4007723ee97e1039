# medicontrol/repositories/medications.py

import logging
import uuid
from datetime import datetime, timezone

from medicontrol.core.exceptions import ConflictError, ValidationError
from medicontrol.database import DbSession
from medicontrol.repositories import categories
from medicontrol.schemas.category import Category
from medicontrol.schemas.medication import Medication, MedicationCreate, MedicationUpdate

logger = logging.getLogger("app")


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _from_row(row) -> Medication:
    # LEFT JOIN and legacy rows leave most columns nullable
    m = row._mapping
    category_id = m.get("category_id") or ""
    return Medication(
        id=m["id"],
        name=m["name"] or "",
        manufacturer=m.get("manufacturer") or "",
        form=m.get("form") or "",
        registry_code=m.get("registry_code") or "",
        quantity=m["quantity"] or 0,
        expiry=m.get("expiry") or "",
        price=m.get("price") or 0.0,
        created_at=m.get("created_at"),
        category_id=category_id,
        category=Category(id=category_id, name=m.get("category_name") or ""),
    )


def _category_param(db: DbSession, category_id: str | None) -> str | None:
    if not category_id:
        return None
    if categories.get(db, category_id) is None:
        raise ValidationError(f"Category {category_id} does not exist")
    return category_id


def add(
    db: DbSession,
    data: MedicationCreate,
    medication_id: str | None = None,
    created_at: str | None = None,
) -> str:
    if not data.name.strip():
        raise ValidationError("Medication name is required")

    medication_id = medication_id or str(uuid.uuid4())
    db.execute(
        "insert_medication",
        {
            "id": medication_id,
            "name": data.name.strip(),
            "manufacturer": data.manufacturer,
            "form": data.form,
            "registry_code": data.registry_code,
            "quantity": data.quantity,
            "expiry": data.expiry,
            "created_at": created_at or utcnow_iso(),
            "price": data.price,
            "category_id": _category_param(db, data.category_id),
        },
    )
    return medication_id


def update(db: DbSession, medication_id: str, data: MedicationUpdate) -> bool:
    result = db.execute(
        "update_medication",
        {
            "id": medication_id,
            "name": data.name.strip(),
            "manufacturer": data.manufacturer,
            "form": data.form,
            "registry_code": data.registry_code,
            "expiry": data.expiry,
            "price": data.price,
            "category_id": _category_param(db, data.category_id),
        },
    )
    return result.rowcount > 0


def delete(db: DbSession, medication_id: str) -> bool:
    """Remove a medication that has no stock history.

    Movements and sale items keep pointing at their medication so that
    historical totals stay computable; a referenced medication is refused.
    """
    references = db.scalar("count_medication_references", {"id": medication_id}) or 0
    if references:
        raise ConflictError(
            "Medication has stock movements or sales and cannot be deleted"
        )
    result = db.execute("delete_medication", {"id": medication_id})
    return result.rowcount > 0


def get(db: DbSession, medication_id: str) -> Medication | None:
    row = db.fetch_one("select_medication_by_id", {"id": medication_id})
    return _from_row(row) if row else None


def get_by_registry_code(db: DbSession, registry_code: str) -> Medication | None:
    row = db.fetch_one("select_medication_by_registry_code", {"registry_code": registry_code})
    return _from_row(row) if row else None


def search(db: DbSession, term: str = "") -> list[Medication]:
    """Medications whose name, manufacturer or registry code contain ``term``.

    Matching is a case-insensitive substring test; an empty term returns
    the whole catalog.
    """
    term = term or ""
    if not term:
        rows = db.fetch_all("select_all_medications")
    else:
        rows = db.fetch_all("search_medications", {"term": term})
    return [_from_row(row) for row in rows]


def count(db: DbSession) -> int:
    return db.scalar("count_medications") or 0


def list_low_stock(db: DbSession, limit: int) -> list[Medication]:
    rows = db.fetch_all("select_low_stock_medications", {"limit": limit})
    return [
        Medication(
            id=row.id,
            name=row.name or "",
            manufacturer=row.manufacturer or "",
            quantity=row.quantity or 0,
        )
        for row in rows
    ]
