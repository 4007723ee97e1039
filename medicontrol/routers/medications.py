# medicontrol/routers/medications.py

import logging

from fastapi import APIRouter, Depends, Response, status

from medicontrol.core.auth import get_current_user
from medicontrol.core.exceptions import NotFoundError
from medicontrol.database import Storage, get_storage
from medicontrol.repositories import medications
from medicontrol.schemas.medication import Medication, MedicationCreate, MedicationUpdate
from medicontrol.services import registry_lookup

logger = logging.getLogger("app")

router = APIRouter(
    prefix="/api/medicamentos",
    tags=["Medications"],
)


@router.get("", response_model=list[Medication])
def list_medications(
    search: str = "",
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.connect() as db:
        return medications.search(db, search)


@router.get("/{medication_id}", response_model=Medication)
def get_medication(
    medication_id: str,
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.connect() as db:
        medication = medications.get(db, medication_id)

    if medication is None:
        raise NotFoundError("Medication not found")

    return medication


@router.post(
    "",
    response_model=Medication,
    status_code=status.HTTP_201_CREATED,
)
def create_medication(
    medication_data: MedicationCreate,
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    # Name and manufacturer can be filled from the regulatory registry
    if not medication_data.name.strip() or not medication_data.manufacturer.strip():
        record = registry_lookup.lookup(medication_data.registry_code)
        medication_data = medication_data.model_copy(
            update={
                "name": medication_data.name.strip() or record.name,
                "manufacturer": medication_data.manufacturer.strip() or record.manufacturer,
            }
        )

    with storage.transaction() as db:
        medication_id = medications.add(db, medication_data)
        medication = medications.get(db, medication_id)

    logger.info(f"Medication created: {medication.name} (id={medication.id})")
    return medication


@router.put("/{medication_id}", response_model=Medication)
def update_medication(
    medication_id: str,
    medication_data: MedicationUpdate,
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.transaction() as db:
        if not medications.update(db, medication_id, medication_data):
            raise NotFoundError("Medication not found")
        medication = medications.get(db, medication_id)

    return medication


@router.delete("/{medication_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medication(
    medication_id: str,
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.transaction() as db:
        if not medications.delete(db, medication_id):
            raise NotFoundError("Medication not found")

    logger.info(f"Medication deleted: id={medication_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
