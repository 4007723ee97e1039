from fastapi import APIRouter, Depends

from medicontrol.core.auth import get_current_user
from medicontrol.database import Storage, get_storage
from medicontrol.schemas.movement import Movement, MovementCreate, MovementWithMedication
from medicontrol.services import reports
from medicontrol.services.movements import record_movement

router = APIRouter(prefix="/api/movimentacoes", tags=["Movements"])


@router.post("", response_model=Movement)
def create_movement(
    movement_data: MovementCreate,
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    return record_movement(
        storage,
        medication_id=movement_data.medication_id,
        kind=movement_data.kind,
        quantity=movement_data.quantity,
        note=movement_data.note,
    )


@router.get("", response_model=list[MovementWithMedication])
def list_movements(
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.connect() as db:
        return reports.list_movements(db)
