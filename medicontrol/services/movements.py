"""Stock movement engine: one entry/exit plus the stock update, atomically."""

import logging
import uuid

from medicontrol.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from medicontrol.database import Storage
from medicontrol.repositories.medications import utcnow_iso
from medicontrol.schemas.movement import Movement, MovementKind, parse_kind

logger = logging.getLogger("app")


def record_movement(
    storage: Storage,
    medication_id: str,
    kind: MovementKind | str,
    quantity: int,
    note: str = "",
) -> Movement:
    movement_kind = parse_kind(kind)
    if movement_kind is None:
        raise ValidationError(f"Unknown movement kind '{kind}'; use 'entry' or 'exit'")
    if quantity is None or quantity <= 0:
        raise ValidationError("Movement quantity must be greater than zero")

    with storage.transaction() as db:
        row = db.fetch_one("select_medication_by_id", {"id": medication_id})
        if row is None:
            raise NotFoundError(
                f"Medication {medication_id} not found for movement",
                status_code=400,
            )

        current = row.quantity or 0
        if movement_kind is MovementKind.ENTRY:
            new_quantity = current + quantity
        else:
            if current < quantity:
                logger.warning(
                    f"Exit rejected for '{row.name}': {current} available, {quantity} requested"
                )
                raise InsufficientStockError(row.name, current, quantity)
            new_quantity = current - quantity

        db.execute("update_medication_quantity", {"quantity": new_quantity, "id": medication_id})

        movement = Movement(
            id=str(uuid.uuid4()),
            medication_id=medication_id,
            kind=movement_kind,
            quantity=quantity,
            created_at=utcnow_iso(),
            note=note or "",
        )
        db.execute(
            "insert_movement",
            {
                "id": movement.id,
                "medication_id": movement.medication_id,
                "kind": movement.kind.value,
                "quantity": movement.quantity,
                "created_at": movement.created_at.isoformat(),
                "note": movement.note,
            },
        )

    logger.info(
        f"Movement {movement.kind.value} of {quantity} for '{row.name}': "
        f"stock {current} -> {new_quantity}"
    )
    return movement
