import logging
import os
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from models.recurrence import Recurrence
from models.subtask import Subtask
from models.task import Task
from schemas.task import TaskCreate, TaskUpdate
from services.attachment_store import AttachmentDescriptor, AttachmentStore, AttachmentUpload
from services.category_service import resolve_category
from services.errors import TaskNotFoundError, TaskValidationError, UnauthorizedError
from services.task_patch import TaskPatch
from services.task_repository import StatusFilter, TaskRepository
from services.time_utils import to_naive_utc, utcnow

load_dotenv()

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


ENFORCE_DUE_DATE_NOT_PAST = _env_flag("ENFORCE_DUE_DATE_NOT_PAST", "true")
PURGE_ATTACHMENTS_ON_DELETE = _env_flag("PURGE_ATTACHMENTS_ON_DELETE", "false")


class TaskService:
    """
    タスク集約のユースケース（作成 / 取得 / 一覧 / 更新 / 削除）

    すべての操作は呼び出し元の user_id でスコープされる
    """

    def __init__(
        self,
        db: Session,
        store: AttachmentStore,
        enforce_due_date_not_past: bool = ENFORCE_DUE_DATE_NOT_PAST,
        purge_attachments_on_delete: bool = PURGE_ATTACHMENTS_ON_DELETE,
    ):
        self.db = db
        self.store = store
        self.repo = TaskRepository(db)
        self.enforce_due_date_not_past = enforce_due_date_not_past
        self.purge_attachments_on_delete = purge_attachments_on_delete

    # -------------------------
    # validation
    # -------------------------
    @staticmethod
    def _require_user(user_id: Optional[str]) -> str:
        if not user_id:
            raise UnauthorizedError("caller identity is required")
        return user_id

    @staticmethod
    def _require_name(name: Optional[str]) -> str:
        if name is None or not name.strip():
            raise TaskValidationError("Task name is required")
        return name

    def _check_due_date(self, due_date: Optional[datetime]) -> None:
        if not self.enforce_due_date_not_past or due_date is None:
            return
        if due_date.date() < utcnow().date():
            raise TaskValidationError("Please choose a due date that is not earlier than today")

    # -------------------------
    # attachments
    # -------------------------
    def _store_uploads(self, uploads: Iterable[AttachmentUpload]) -> List[AttachmentDescriptor]:
        """
        全ファイルを先に保存する。途中で失敗したら、このリクエストで保存した分は消して再送出
        """
        descriptors: List[AttachmentDescriptor] = []
        try:
            for upload in uploads:
                descriptor = self.store.store(upload.file_name, upload.content, upload.content_type)
                if descriptor is not None:
                    descriptors.append(descriptor)
        except Exception:
            self.store.discard(d.storage_path for d in descriptors)
            raise
        return descriptors

    # -------------------------
    # use cases
    # -------------------------
    def create_task(
        self,
        user_id: str,
        data: TaskCreate,
        uploads: Iterable[AttachmentUpload] = (),
    ) -> Task:
        user_id = self._require_user(user_id)
        name = self._require_name(data.name)
        due_date = to_naive_utc(data.due_date)
        self._check_due_date(due_date)

        # 1. カテゴリ解決（ここで即コミットされることがある）
        category_id = resolve_category(self.db, user_id, data.category_id, data.category_name)

        # 2. ファイルを先に保存（行より先に書く）
        descriptors = self._store_uploads(uploads)

        # 3. 集約を組み立てて保存
        task = Task(
            user_id=user_id,
            name=name,
            description=data.description,
            created_at=to_naive_utc(data.created_at) or utcnow(),
            due_date=due_date,
            priority=data.priority,
            is_completed=data.is_completed,
            category_id=category_id,
        )
        subtasks = [
            Subtask(
                name=s.name,
                description=s.description,
                due_date=to_naive_utc(s.due_date),
                is_completed=s.is_completed,
            )
            for s in data.subtasks
        ]
        recurrence = Recurrence(interval=data.recurrence.interval) if data.recurrence else None

        try:
            return self.repo.create(task, subtasks, recurrence, descriptors)
        except Exception:
            # 行が書けなかったので、参照されないファイルは消しておく
            self.store.discard(d.storage_path for d in descriptors)
            raise

    def get_task(self, user_id: str, task_id: int) -> Task:
        task = self.repo.get_by_id(self._require_user(user_id), task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        return task

    def list_tasks(
        self,
        user_id: str,
        status: Optional[StatusFilter] = None,
    ) -> Tuple[List[Task], int]:
        return self.repo.list_by_owner(self._require_user(user_id), status)

    def update_task(self, user_id: str, task_id: int, data: TaskUpdate) -> Task:
        user_id = self._require_user(user_id)
        self._require_name(data.name)

        current = self.repo.get_by_id(user_id, task_id)
        if current is None:
            raise TaskNotFoundError(f"Task {task_id} not found")

        due_date = to_naive_utc(data.due_date)
        if due_date != current.due_date:
            self._check_due_date(due_date)

        # id が無く名前だけ送られた場合はカテゴリを解決する
        category_id = None
        if data.category_id is None and data.category_name:
            category_id = resolve_category(self.db, user_id, None, data.category_name)

        patch = TaskPatch.from_update(data, category_id=category_id)
        values = dict(patch.values)
        for key in ("due_date", "created_at"):
            if key in values:
                values[key] = to_naive_utc(values[key])
        patch = TaskPatch.of(**values)

        task = self.repo.update(user_id, task_id, patch)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        return task

    def delete_task(self, user_id: str, task_id: int) -> None:
        paths = self.repo.delete(self._require_user(user_id), task_id)
        if paths is None:
            raise TaskNotFoundError(f"Task {task_id} not found")

        # 既定ではファイルは残す（行だけ消える）
        if self.purge_attachments_on_delete and paths:
            self.store.discard(paths)
