from fastapi import APIRouter, Depends, Response, status

from medicontrol.core.auth import get_current_user
from medicontrol.database import Storage, get_storage
from medicontrol.repositories import categories
from medicontrol.schemas.category import Category, CategoryCreate

router = APIRouter(prefix="/api/categorias", tags=["Categories"])


@router.get("", response_model=list[Category])
def list_categories(
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.connect() as db:
        return categories.list_all(db)


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    response: Response,
    storage: Storage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    with storage.transaction() as db:
        existed = categories.get_by_name(db, category_data.name.strip()) is not None
        category_id = categories.add(db, category_data.name)
        category = categories.get(db, category_id)

    if existed:
        response.status_code = status.HTTP_200_OK

    return category
