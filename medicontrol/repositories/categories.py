# medicontrol/repositories/categories.py

import logging
import uuid

from medicontrol.core.exceptions import ValidationError
from medicontrol.database import DbSession
from medicontrol.schemas.category import Category

logger = logging.getLogger("app")


def _from_row(row) -> Category:
    return Category(id=row.id, name=row.name)


def get_by_name(db: DbSession, name: str) -> Category | None:
    row = db.fetch_one("select_category_by_name", {"name": name})
    return _from_row(row) if row else None


def get(db: DbSession, category_id: str) -> Category | None:
    row = db.fetch_one("select_category_by_id", {"id": category_id})
    return _from_row(row) if row else None


def add(db: DbSession, name: str) -> str:
    """Return the id of category ``name``, creating it if needed.

    Names are matched case-sensitively; adding an existing name is not an
    error and yields the existing id.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name cannot be empty")

    existing = get_by_name(db, name)
    if existing:
        logger.info(f"Category '{name}' already exists with id {existing.id}")
        return existing.id

    category_id = str(uuid.uuid4())
    db.execute("insert_category", {"id": category_id, "name": name})
    logger.info(f"Category '{name}' added with id {category_id}")
    return category_id


def list_all(db: DbSession) -> list[Category]:
    return [_from_row(row) for row in db.fetch_all("select_all_categories")]
