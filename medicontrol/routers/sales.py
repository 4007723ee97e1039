# =========================================================
# SALES ROUTER
#
# POST   /api/vendas        record a multi-item sale
# GET    /api/vendas        sale summaries, newest first
# GET    /api/vendas/{id}   one sale with its items
# =========================================================

from fastapi import APIRouter, Depends, Request, status

from medicontrol.core.auth import CurrentUser, get_current_user
from medicontrol.core.rate_limiter import limiter
from medicontrol.database import Storage, get_storage
from medicontrol.schemas.sale import SaleCreate, SaleCreated, SaleDetail, SaleSummary
from medicontrol.services import reports
from medicontrol.services.sales import record_sale

router = APIRouter(prefix="/api/vendas", tags=["Sales"])


# =========================================================
# CREATE SALE
# =========================================================
@router.post("", response_model=SaleCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_sale(
    request: Request,
    sale_data: SaleCreate,
    storage: Storage = Depends(get_storage),
    current_user: CurrentUser = Depends(get_current_user),
):
    sale_id = record_sale(storage, sale_data.items, user_id=current_user.user_id)
    return SaleCreated(sale_id=sale_id)


# =========================================================
# LIST SALES
# =========================================================
@router.get("", response_model=list[SaleSummary])
def list_sales(
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.connect() as db:
        return reports.list_sales_summary(db)


# =========================================================
# GET SINGLE SALE
# =========================================================
@router.get("/{sale_id}", response_model=SaleDetail)
def get_sale(
    sale_id: int,
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.connect() as db:
        return reports.get_sale(db, sale_id)
