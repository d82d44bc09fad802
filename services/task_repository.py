import enum
import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from models.attachment import Attachment
from models.category import Category  # noqa: F401  (Task.category の解決に必要)
from models.recurrence import Recurrence
from models.subtask import Subtask
from models.task import Task
from services.attachment_store import AttachmentDescriptor
from services.task_patch import TaskPatch

logger = logging.getLogger(__name__)


class StatusFilter(str, enum.Enum):
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"


class TaskRepository:
    """
    タスクと従属行（サブタスク / 繰り返し / 添付）をひとまとまりで読み書きする
    """

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, user_id: str):
        return (
            self.db.query(Task)
            .options(
                selectinload(Task.subtasks),
                selectinload(Task.recurrence),
                selectinload(Task.attachments),
                selectinload(Task.category),
            )
            .filter(Task.user_id == user_id)
        )

    def create(
        self,
        task: Task,
        subtasks: Iterable[Subtask] = (),
        recurrence: Optional[Recurrence] = None,
        attachments: Iterable[AttachmentDescriptor] = (),
    ) -> Task:
        task.subtasks = list(subtasks)
        task.recurrence = recurrence
        task.attachments = [
            Attachment(
                file_name=d.original_file_name,
                path=d.storage_path,
                content_type=d.content_type,
            )
            for d in attachments
        ]

        self.db.add(task)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(task)

        logger.info(
            "task created id=%s user=%s subtasks=%d recurrence=%s attachments=%d",
            task.id,
            task.user_id,
            len(task.subtasks),
            task.recurrence is not None,
            len(task.attachments),
        )
        return task

    def get_by_id(self, user_id: str, task_id: int) -> Optional[Task]:
        # 他人のタスクも「存在しない」として扱う
        return self._owned(user_id).filter(Task.id == task_id).first()

    def list_by_owner(
        self,
        user_id: str,
        status: Optional[StatusFilter] = None,
    ) -> Tuple[List[Task], int]:
        query = self._owned(user_id)
        if status == StatusFilter.INCOMPLETE:
            query = query.filter(Task.is_completed.is_(False))
        elif status == StatusFilter.COMPLETE:
            query = query.filter(Task.is_completed.is_(True))

        tasks = query.order_by(Task.id).all()
        return tasks, len(tasks)

    def update(self, user_id: str, task_id: int, patch: TaskPatch) -> Optional[Task]:
        task = self.get_by_id(user_id, task_id)
        if task is None:
            return None

        # 全置換。省略された項目はクリア（is_completed / created_at だけは維持）
        task.name = patch.resolved("name", task.name)
        task.description = patch.resolved("description", task.description)
        task.due_date = patch.resolved("due_date", task.due_date)
        task.priority = patch.resolved("priority", task.priority)
        task.category_id = patch.resolved("category_id", task.category_id)
        task.is_completed = patch.resolved("is_completed", task.is_completed)
        task.created_at = patch.resolved("created_at", task.created_at)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(task)
        return task

    def delete(self, user_id: str, task_id: int) -> Optional[List[str]]:
        """
        タスクと従属行をまとめて削除する

        Returns:
            削除した添付行の保存先パス。タスクが無ければ None
            （ファイル自体はここでは消さない）
        """
        task = self.get_by_id(user_id, task_id)
        if task is None:
            return None

        paths = [a.path for a in task.attachments]

        # cascade で subtasks / recurrence / attachments → tasks の順に消える
        self.db.delete(task)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("task deleted id=%s user=%s attachments=%d", task_id, user_id, len(paths))
        return paths
