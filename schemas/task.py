# schemas/task.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class SubtaskCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    is_completed: bool = False


class RecurrenceCreate(BaseModel):
    interval: str = Field(min_length=1)


class TaskCreate(BaseModel):
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None  # 省略時はサーバー側で付与
    due_date: Optional[datetime] = None
    priority: Optional[str] = None
    is_completed: bool = False
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    subtasks: List[SubtaskCreate] = []
    recurrence: Optional[RecurrenceCreate] = None


class TaskUpdate(BaseModel):
    """
    PUT 用（全置換）
    送られなかった項目はクリア扱い。is_completed と created_at だけは現状維持
    """
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    due_date: Optional[datetime] = None
    priority: Optional[str] = None
    is_completed: Optional[bool] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None


class SubtaskResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    due_date: Optional[datetime]
    is_completed: bool

    class Config:
        from_attributes = True


class RecurrenceResponse(BaseModel):
    id: int
    interval: str

    class Config:
        from_attributes = True


class AttachmentResponse(BaseModel):
    id: int
    file_name: str
    path: str
    content_type: Optional[str]

    class Config:
        from_attributes = True


class TaskResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    created_at: datetime
    due_date: Optional[datetime]
    priority: Optional[str]
    is_completed: bool
    user_id: str
    category_id: Optional[int]
    category_name: Optional[str] = None
    subtasks: List[SubtaskResponse] = []
    recurrence: Optional[RecurrenceResponse] = None
    attachments: List[AttachmentResponse] = []

    class Config:
        from_attributes = True  # pydantic v2


class TaskListResponse(BaseModel):
    count: int
    items: List[TaskResponse]
