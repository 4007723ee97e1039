from fastapi import APIRouter, Depends

from medicontrol.core.auth import get_current_user
from medicontrol.database import Storage, get_storage
from medicontrol.repositories import medications
from medicontrol.schemas.medication import RegistryLookupResponse
from medicontrol.services import registry_lookup

router = APIRouter(prefix="/api/anvisa", tags=["Registry"])


@router.get("/{code}", response_model=RegistryLookupResponse)
def lookup_registry_code(
    code: str,
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    # A medication already in the catalog wins over the registry table
    with storage.connect() as db:
        local = medications.get_by_registry_code(db, code)

    if local is not None:
        return RegistryLookupResponse(
            name=local.name,
            manufacturer=local.manufacturer,
            exists=True,
        )

    record = registry_lookup.lookup(code)
    return RegistryLookupResponse(
        name=record.name,
        manufacturer=record.manufacturer,
        exists=False,
    )
