# schemas/category.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class CategoryResponse(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime]
    created_by: Optional[str]

    class Config:
        from_attributes = True
