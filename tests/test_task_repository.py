# tests/test_task_repository.py

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from models.attachment import Attachment
from models.category import Category
from models.recurrence import Recurrence
from models.subtask import Subtask
from models.task import Task
from services.attachment_store import AttachmentDescriptor
from services.errors import TaskValidationError
from services.task_patch import TaskPatch
from services.task_repository import StatusFilter, TaskRepository


def _new_task(user_id: str = "u1", name: str = "Write report", **kwargs) -> Task:
    return Task(user_id=user_id, name=name, created_at=datetime(2030, 1, 1, 9, 0), **kwargs)


def test_create_and_read_back_full_aggregate(db) -> None:
    repo = TaskRepository(db)
    created = repo.create(
        _new_task(priority="High", description="quarterly"),
        subtasks=[Subtask(name="Draft"), Subtask(name="Review", is_completed=True)],
        recurrence=Recurrence(interval="weekly"),
        attachments=[AttachmentDescriptor("notes.txt", "/tmp/x/abc.txt", "text/plain")],
    )

    assert created.id is not None
    assert all(s.id is not None and s.task_id == created.id for s in created.subtasks)

    loaded = repo.get_by_id("u1", created.id)
    assert loaded is not None
    assert [(s.name, s.is_completed) for s in loaded.subtasks] == [("Draft", False), ("Review", True)]
    assert loaded.recurrence.interval == "weekly"
    assert [(a.file_name, a.path, a.content_type) for a in loaded.attachments] == [
        ("notes.txt", "/tmp/x/abc.txt", "text/plain")
    ]
    assert loaded.is_completed is False


def test_get_by_id_hides_other_users_tasks(db) -> None:
    repo = TaskRepository(db)
    task = repo.create(_new_task(user_id="owner"))

    assert repo.get_by_id("intruder", task.id) is None
    assert repo.get_by_id("owner", task.id + 100) is None


def test_list_by_owner_scopes_and_filters(db) -> None:
    repo = TaskRepository(db)
    a1 = repo.create(_new_task(user_id="a", name="one"))
    a2 = repo.create(_new_task(user_id="a", name="two", is_completed=True))
    for i in range(3):
        repo.create(_new_task(user_id="b", name=f"b-{i}"))

    tasks, count = repo.list_by_owner("a")
    assert [t.id for t in tasks] == [a1.id, a2.id]
    assert count == 2

    open_tasks, open_count = repo.list_by_owner("a", StatusFilter.INCOMPLETE)
    assert [t.name for t in open_tasks] == ["one"]
    assert open_count == 1

    done_tasks, done_count = repo.list_by_owner("a", StatusFilter.COMPLETE)
    assert [t.name for t in done_tasks] == ["two"]
    assert done_count == 1

    assert repo.list_by_owner("nobody") == ([], 0)


def test_update_clears_omitted_fields_but_preserves_completion_and_created_at(db) -> None:
    repo = TaskRepository(db)
    task = repo.create(
        _new_task(priority="High", description="desc", due_date=datetime(2030, 2, 1), category_id=7),
        subtasks=[Subtask(name="keep me")],
        recurrence=Recurrence(interval="daily"),
    )

    updated = repo.update("u1", task.id, TaskPatch.of(name="Renamed"))

    assert updated.name == "Renamed"
    assert updated.priority == ""
    assert updated.description is None
    assert updated.due_date is None
    assert updated.category_id is None
    assert updated.is_completed is False
    assert updated.created_at == datetime(2030, 1, 1, 9, 0)
    # dependents are not touched by an update
    assert [s.name for s in updated.subtasks] == ["keep me"]
    assert updated.recurrence.interval == "daily"


def test_update_applies_sent_values(db) -> None:
    repo = TaskRepository(db)
    task = repo.create(_new_task())

    updated = repo.update(
        "u1",
        task.id,
        TaskPatch.of(name="Done", priority="Low", is_completed=True, created_at=datetime(2029, 5, 5)),
    )
    assert updated.priority == "Low"
    assert updated.is_completed is True
    assert updated.created_at == datetime(2029, 5, 5)

    # completion stays Done when omitted, and can be toggled back
    again = repo.update("u1", task.id, TaskPatch.of(name="Done"))
    assert again.is_completed is True
    reopened = repo.update("u1", task.id, TaskPatch.of(name="Done", is_completed=False))
    assert reopened.is_completed is False


def test_update_of_missing_or_foreign_task_returns_none(db) -> None:
    repo = TaskRepository(db)
    task = repo.create(_new_task(user_id="owner"))

    assert repo.update("intruder", task.id, TaskPatch.of(name="hijack")) is None
    assert repo.get_by_id("owner", task.id).name == "Write report"


def test_delete_removes_dependents_but_keeps_category(db) -> None:
    category = Category(name="Finance")
    db.add(category)
    db.commit()

    repo = TaskRepository(db)
    task = repo.create(
        _new_task(category_id=category.id),
        subtasks=[Subtask(name="a"), Subtask(name="b")],
        recurrence=Recurrence(interval="monthly"),
        attachments=[AttachmentDescriptor("a.pdf", "uploads/1.pdf", "application/pdf")],
    )
    task_id = task.id
    subtask_ids = [s.id for s in task.subtasks]
    recurrence_id = task.recurrence.id

    paths = repo.delete("u1", task_id)

    assert paths == ["uploads/1.pdf"]
    assert repo.get_by_id("u1", task_id) is None
    assert db.query(Subtask).filter(Subtask.id.in_(subtask_ids)).count() == 0
    assert db.get(Recurrence, recurrence_id) is None
    assert db.query(Attachment).filter(Attachment.task_id == task_id).count() == 0
    assert db.get(Category, category.id).name == "Finance"


def test_delete_of_foreign_task_returns_none_and_keeps_rows(db) -> None:
    repo = TaskRepository(db)
    task = repo.create(_new_task(user_id="owner"), subtasks=[Subtask(name="x")])

    assert repo.delete("intruder", task.id) is None
    assert repo.get_by_id("owner", task.id) is not None
    assert db.query(Subtask).count() == 1


def test_only_one_recurrence_per_task(db) -> None:
    repo = TaskRepository(db)
    task = repo.create(_new_task(), recurrence=Recurrence(interval="daily"))

    db.add(Recurrence(task_id=task.id, interval="weekly"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_dangling_category_id_reads_back_without_name(db) -> None:
    repo = TaskRepository(db)
    task = repo.create(_new_task(category_id=424242))

    loaded = repo.get_by_id("u1", task.id)
    assert loaded.category_id == 424242
    assert loaded.category_name is None


def test_update_without_name_is_rejected_before_writing(db) -> None:
    repo = TaskRepository(db)
    task = repo.create(_new_task(priority="High"))

    with pytest.raises(TaskValidationError):
        repo.update("u1", task.id, TaskPatch.of(priority="Low"))
    with pytest.raises(TaskValidationError):
        repo.update("u1", task.id, TaskPatch.of(name="  ", priority="Low"))

    db.rollback()
    stored = repo.get_by_id("u1", task.id)
    assert stored.name == "Write report"
    assert stored.priority == "High"
