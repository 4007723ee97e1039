# medicontrol/services/reports.py

from medicontrol.core.exceptions import NotFoundError
from medicontrol.database import DbSession
from medicontrol.repositories import medications
from medicontrol.schemas.medication import Medication
from medicontrol.schemas.movement import MovementWithMedication
from medicontrol.schemas.sale import SaleDetail, SaleItem, SaleSummary


def total_units_sold(db: DbSession) -> int:
    return int(db.scalar("total_units_sold") or 0)


def _summary(row) -> dict:
    return {
        "id": row.id,
        "created_at": row.created_at,
        "user_id": row.user_id,
        "item_count": row.item_count or 0,
        "total_amount": float(row.total_amount or 0),
    }


def list_sales_summary(db: DbSession) -> list[SaleSummary]:
    return [SaleSummary(**_summary(row)) for row in db.fetch_all("select_sales_summary")]


def get_sale(db: DbSession, sale_id: int) -> SaleDetail:
    row = db.fetch_one("select_sale_by_id", {"id": sale_id})
    if row is None:
        raise NotFoundError(f"Sale {sale_id} not found")

    items = [
        SaleItem(
            id=item.id,
            medication_id=item.medication_id,
            medication_name=item.medication_name or "",
            quantity=item.quantity,
            unit_price=item.unit_price or 0.0,
            line_total=item.quantity * (item.unit_price or 0.0),
        )
        for item in db.fetch_all("select_sale_items", {"sale_id": sale_id})
    ]
    return SaleDetail(**_summary(row), items=items)


def list_movements(db: DbSession) -> list[MovementWithMedication]:
    """Every movement with its medication's name and form, newest first."""
    return [
        MovementWithMedication(
            id=row.id,
            medication_id=row.medication_id,
            kind=row.kind,
            quantity=row.quantity,
            created_at=row.created_at,
            note=row.note or "",
            medication_name=row.medication_name or "",
            medication_form=row.medication_form or "",
        )
        for row in db.fetch_all("select_all_movements")
    ]


def list_low_stock(db: DbSession, limit: int) -> list[Medication]:
    return medications.list_low_stock(db, limit)
