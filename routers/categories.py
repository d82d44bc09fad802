from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth.deps import get_current_user
from db.database import get_db
from schemas.category import CategoryResponse
from services.category_service import list_categories

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=List[CategoryResponse])
def get_categories(db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    # カテゴリは全ユーザー共通
    return list_categories(db)
