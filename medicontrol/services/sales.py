# =========================================================
# SALES ENGINE
#
# A sale is one header plus one item per submitted line.
# Every line is checked against stock, priced with the
# medication's current price (frozen on the item) and
# deducted from stock inside ONE write transaction.
# Any failing line rolls the whole sale back.
# =========================================================

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from medicontrol.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from medicontrol.database import Storage
from medicontrol.repositories.medications import utcnow_iso

logger = logging.getLogger("app")


@dataclass(frozen=True)
class SaleLine:
    medication_id: str
    quantity: int


def _as_line(line) -> SaleLine:
    if isinstance(line, SaleLine):
        return line
    if isinstance(line, tuple):
        return SaleLine(*line)
    return SaleLine(medication_id=line.medication_id, quantity=line.quantity)


def record_sale(
    storage: Storage,
    lines: Iterable,
    user_id: int,
) -> int:
    """Record a sale for ``user_id`` and return its id.

    Callers pass the authenticated user; tokens without a user id fall
    back to ``Settings.DEFAULT_SALE_USER_ID`` in ``core.auth``.
    """
    sale_lines = [_as_line(line) for line in lines]

    if not sale_lines:
        raise ValidationError("A sale must contain at least one item")

    for line in sale_lines:
        if line.quantity is None or line.quantity <= 0:
            raise ValidationError("Item quantity must be greater than zero")

    with storage.transaction() as db:
        result = db.execute(
            "insert_sale",
            {
                "created_at": utcnow_iso(),
                "user_id": user_id,
            },
        )
        sale_id = result.lastrowid

        # Lines apply in submitted order; a repeated medication sees the
        # stock left by the earlier line.
        for line in sale_lines:
            medication = db.fetch_one("select_medication_by_id", {"id": line.medication_id})

            if medication is None:
                raise NotFoundError(
                    f"Medication {line.medication_id} not found",
                    status_code=400,
                )

            unit_price = medication.price or 0.0
            available = medication.quantity or 0

            if available < line.quantity:
                logger.warning(
                    f"Sale rejected: '{medication.name}' has {available}, "
                    f"{line.quantity} requested"
                )
                raise InsufficientStockError(medication.name, available, line.quantity)

            db.execute(
                "insert_sale_item",
                {
                    "sale_id": sale_id,
                    "medication_id": line.medication_id,
                    "quantity": line.quantity,
                    "unit_price": unit_price,
                },
            )
            db.execute(
                "update_medication_quantity",
                {"quantity": available - line.quantity, "id": line.medication_id},
            )

            logger.info(
                f"Item sold: {medication.name} | Quantity: {line.quantity} | "
                f"Unit price: {unit_price:.2f}"
            )

    logger.info(f"Sale {sale_id} recorded with {len(sale_lines)} item(s)")
    return sale_id
