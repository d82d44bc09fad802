# routers/tasks.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from auth.deps import get_current_user
from db.database import get_db
from schemas.task import TaskCreate, TaskListResponse, TaskResponse, TaskUpdate
from services.attachment_store import AttachmentStore, AttachmentUpload
from services.errors import (
    AttachmentStorageError,
    TaskNotFoundError,
    TaskServiceError,
    TaskValidationError,
    UnauthorizedError,
)
from services.task_repository import StatusFilter
from services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


# -------------------------
# dependencies
# -------------------------
def get_attachment_store() -> AttachmentStore:
    return AttachmentStore()


def get_task_service(
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
) -> TaskService:
    return TaskService(db, store)


def to_http_error(e: TaskServiceError) -> HTTPException:
    """サービス層の例外を HTTP ステータスに変換する"""
    if isinstance(e, TaskNotFoundError):
        return HTTPException(status_code=404, detail="Task not found")
    if isinstance(e, UnauthorizedError):
        return HTTPException(status_code=401, detail="Not authenticated")
    if isinstance(e, TaskValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, AttachmentStorageError):
        logger.error("attachment storage failed: %s", e)
        return HTTPException(status_code=500, detail="Could not store attachment")
    logger.exception("unexpected task service error")
    return HTTPException(status_code=500, detail="Internal server error")


# -------------------------
# endpoints
# -------------------------
@router.get("/", response_model=TaskListResponse)
def get_tasks(
    status: Optional[StatusFilter] = None,
    service: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user),
):
    try:
        tasks, count = service.list_tasks(user_id, status)
    except TaskServiceError as e:
        raise to_http_error(e)
    return {"count": count, "items": tasks}


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user),
):
    try:
        return service.get_task(user_id, task_id)
    except TaskServiceError as e:
        raise to_http_error(e)


@router.post("/", response_model=TaskResponse, status_code=201)
def create_task(
    task: TaskCreate,
    service: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user),
):
    try:
        return service.create_task(user_id, task)
    except TaskServiceError as e:
        raise to_http_error(e)


@router.post("/with-attachments", response_model=TaskResponse, status_code=201)
def create_task_with_attachments(
    data: str = Form(...),
    files: List[UploadFile] = File(default=[]),
    service: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user),
):
    """
    multipart で本体（data: JSON 文字列）と添付ファイルを同時に受け取る
    """
    try:
        task = TaskCreate.model_validate_json(data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    uploads = [
        AttachmentUpload(
            file_name=f.filename or "",
            content=f.file.read(),
            content_type=f.content_type,
        )
        for f in files
    ]

    try:
        return service.create_task(user_id, task, uploads)
    except TaskServiceError as e:
        raise to_http_error(e)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    service: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user),
):
    try:
        return service.update_task(user_id, task_id, task_update)
    except TaskServiceError as e:
        raise to_http_error(e)


@router.delete("/{task_id}", status_code=204)
def delete_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user),
):
    try:
        service.delete_task(user_id, task_id)
    except TaskServiceError as e:
        raise to_http_error(e)
    return Response(status_code=204)
