"""Category API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ourmap.database import get_db
from ourmap.schemas.category import CategoryCreate, CategoryOut
from ourmap.services import categories as category_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return category_service.list_categories(db)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    """Add a top-level category or a subcategory of one."""
    try:
        return category_service.create_category(db, **payload.model_dump())
    except category_service.CategoryTreeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
