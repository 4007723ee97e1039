# =========================================================
# STARTUP / SEED
#
# 1. Load named SQL and check the critical queries exist
# 2. Create or migrate the schema
# 3. Import the seed catalog when no medication exists yet
# 4. Back-fill prices left at zero from the same seed file
#
# Steps 3 and 4 never abort startup.
# Run once from the command line with:
#   python -m medicontrol.services.bootstrap
# =========================================================

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from medicontrol.core.config import Settings
from medicontrol.core.exceptions import MediControlError
from medicontrol.database import Storage
from medicontrol.db.queries import QueryRegistry
from medicontrol.db.schema import INDEX_QUERIES, TABLE_QUERIES, ensure_schema
from medicontrol.repositories import medications
from medicontrol.schemas.medication import MedicationCreate

logger = logging.getLogger("app")

CRITICAL_QUERIES = (
    *TABLE_QUERIES,
    *INDEX_QUERIES,
    "insert_medication",
    "select_medication_by_id",
    "update_medication_quantity",
    "insert_movement",
    "insert_sale",
    "insert_sale_item",
    "count_medications",
)


class SeedRecord(BaseModel):
    """One seed catalog entry. English and legacy Portuguese keys are both accepted."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field("", validation_alias=AliasChoices("name", "nome"))
    registry_code: str = Field("", validation_alias=AliasChoices("registry_code", "codigo_anvisa"))
    stock: int = Field(0, ge=0, validation_alias=AliasChoices("stock", "quantidade_estoque"))
    price: float = Field(0.0, ge=0, validation_alias=AliasChoices("price", "preco_venda"))
    manufacturer: str = Field("", validation_alias=AliasChoices("manufacturer", "fabricante"))
    expiry: str = Field("", validation_alias=AliasChoices("expiry", "data_validade"))
    entry_date: str = Field("", validation_alias=AliasChoices("entry_date", "data_entrada"))

    @field_validator("name", "registry_code", "manufacturer", "expiry", "entry_date", mode="before")
    @classmethod
    def _text(cls, value):
        return "" if value is None else str(value)

    def created_at(self) -> str | None:
        """Entry date as a UTC ISO timestamp; None lets the insert stamp now.

        Dates without an offset are taken as UTC.
        """
        value = self.entry_date.strip()
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            logger.warning(f"Unreadable entry date '{value}' for '{self.name}'; using current time")
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc).isoformat()

    def to_medication(self) -> MedicationCreate:
        return MedicationCreate(
            name=self.name,
            manufacturer=self.manufacturer,
            registry_code=self.registry_code,
            quantity=self.stock,
            expiry=self.expiry,
            price=self.price,
        )


def load_seed_file(path: Path) -> list:
    """Raw entries of the seed file, or an empty list when it is unusable."""
    try:
        with open(path, encoding="utf-8") as fh:
            entries = json.load(fh)
    except FileNotFoundError:
        logger.info(f"Seed file not found at {path}; skipping")
        return []
    except (OSError, ValueError) as exc:
        logger.warning(f"Seed file {path} could not be read: {exc}")
        return []

    if not isinstance(entries, list):
        logger.warning(f"Seed file {path} does not contain a list of medications")
        return []

    return entries


def import_seed_catalog(storage: Storage, path: Path) -> int:
    with storage.connect() as db:
        existing = medications.count(db)

    if existing:
        logger.info(f"Catalog already has {existing} medications; seed import skipped")
        return 0

    entries = load_seed_file(path)
    imported = 0

    for position, raw in enumerate(entries):
        try:
            record = SeedRecord.model_validate(raw)
            created_at = record.created_at()
            with storage.transaction() as db:
                medications.add(db, record.to_medication(), created_at=created_at)
        except (ValueError, TypeError, MediControlError) as exc:
            # pydantic's ValidationError is a ValueError
            logger.warning(f"Seed entry #{position} skipped: {exc}")
            continue
        imported += 1

    logger.info(f"Seed import finished: {imported} of {len(entries)} medications added")
    return imported


def backfill_prices(storage: Storage, path: Path) -> int:
    """Set a price on medications still priced at zero, matched by registry code.

    Only zero-priced rows are touched, so running it again changes nothing.
    """
    prices = {}
    for raw in load_seed_file(path):
        try:
            record = SeedRecord.model_validate(raw)
        except ValueError:
            continue
        if record.registry_code and record.price > 0:
            prices[record.registry_code] = record.price

    if not prices:
        return 0

    corrected = 0
    with storage.transaction() as db:
        for row in db.fetch_all("select_zero_price_medications"):
            price = prices.get(row.registry_code or "")
            if not price:
                continue
            db.execute("update_medication_price", {"price": price, "id": row.id})
            logger.info(f"Price for '{row.name}' ({row.registry_code}) set to {price:.2f}")
            corrected += 1

    logger.info(f"Price back-fill finished: {corrected} medications corrected")
    return corrected


def init_storage(settings: Settings) -> Storage:
    queries = QueryRegistry.from_directory(settings.sql_dir)
    queries.ensure(CRITICAL_QUERIES)
    logger.info(f"{len(queries)} SQL queries loaded from {settings.sql_dir}")

    storage = Storage(
        settings.DATABASE_URL,
        queries,
        busy_timeout=settings.DB_BUSY_TIMEOUT_SECONDS,
    )

    ensure_schema(storage)

    if settings.SEED_ON_STARTUP:
        import_seed_catalog(storage, settings.seed_file)

    if settings.BACKFILL_PRICES_ON_STARTUP:
        backfill_prices(storage, settings.seed_file)

    return storage


if __name__ == "__main__":
    from medicontrol.core.config import settings

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    storage = init_storage(
        settings.model_copy(update={"SEED_ON_STARTUP": True, "BACKFILL_PRICES_ON_STARTUP": True})
    )
    storage.dispose()
