"""
Schema manager.

Creates every table that does not exist yet and then applies additive
column migrations. Both steps are idempotent and run on every startup.
"""

import logging

from sqlalchemy import inspect

from medicontrol.database import DbSession, Storage

logger = logging.getLogger("app")

TABLE_QUERIES = (
    "create_table_categories",
    "create_table_medications",
    "create_table_movements",
    "create_table_sales",
    "create_table_sale_items",
)

INDEX_QUERIES = (
    "create_index_medications_registry_code",
    "create_index_medications_category_id",
    "create_index_movements_medication_id",
    "create_index_sale_items_sale_id",
    "create_index_sale_items_medication_id",
)

# (table, column, declared type and default) added to databases created
# before the column existed
COLUMN_MIGRATIONS = (
    ("medications", "price", "REAL DEFAULT 0.0"),
    ("medications", "category_id", "TEXT REFERENCES categories(id)"),
    ("movements", "note", "TEXT NOT NULL DEFAULT ''"),
    ("sales", "user_id", "INTEGER NOT NULL DEFAULT 1"),
)


def column_names(db: DbSession, table: str) -> set[str]:
    return {col["name"].lower() for col in inspect(db.connection).get_columns(table)}


def add_column_if_missing(db: DbSession, table: str, column: str, column_type: str) -> bool:
    if column.lower() in column_names(db, table):
        return False

    db.connection.exec_driver_sql(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
    logger.info(f"Column '{column}' added to table '{table}'")
    return True


def ensure_schema(storage: Storage) -> list[tuple[str, str]]:
    """Create missing tables, then add missing columns. Returns the columns added."""
    added = []
    with storage.transaction() as db:
        for name in TABLE_QUERIES:
            db.execute(name)

        for table, column, column_type in COLUMN_MIGRATIONS:
            if add_column_if_missing(db, table, column, column_type):
                added.append((table, column))

        for name in INDEX_QUERIES:
            db.execute(name)

    logger.info("Database schema verified")
    return added
