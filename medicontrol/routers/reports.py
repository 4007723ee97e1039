from typing import Optional

from fastapi import APIRouter, Depends, Query

from medicontrol.core.auth import get_current_user, get_settings
from medicontrol.core.config import Settings
from medicontrol.database import Storage, get_storage
from medicontrol.schemas.medication import Medication
from medicontrol.schemas.report import UnitsSoldResponse
from medicontrol.services import reports

router = APIRouter(prefix="/api/relatorios", tags=["Reports"])


@router.get("/vendas", response_model=UnitsSoldResponse)
def units_sold_report(
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.connect() as db:
        total = reports.total_units_sold(db)

    return UnitsSoldResponse(total_units_sold=total)


@router.get("/baixo-estoque", response_model=list[Medication])
def low_stock_report(
    limite: Optional[int] = Query(None, ge=0),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
    current_user=Depends(get_current_user),
):
    limit = settings.LOW_STOCK_DEFAULT_LIMIT if limite is None else limite

    with storage.connect() as db:
        return reports.list_low_stock(db, limit)
