# services/task_patch.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet

from schemas.task import TaskUpdate
from services.errors import TaskValidationError

PATCH_FIELDS = (
    "name",
    "description",
    "created_at",
    "due_date",
    "priority",
    "is_completed",
    "category_id",
)

# 省略時に「クリア」する項目とその空値（name は省略不可）
CLEARED_VALUES = {
    "description": None,
    "due_date": None,
    "priority": "",
    "category_id": None,
}

# 省略時は保存済みの値を維持する項目
PRESERVED_FIELDS = ("created_at", "is_completed")


@dataclass(frozen=True)
class TaskPatch:
    """
    PUT の内容を「値」と「送られたかどうか」の組で持つ

    provided に含まれない項目は省略扱い。None が明示的に送られた場合と区別できる
    """
    values: dict = field(default_factory=dict)
    provided: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, **values: Any) -> "TaskPatch":
        unknown = set(values) - set(PATCH_FIELDS)
        if unknown:
            raise ValueError(f"unknown patch fields: {sorted(unknown)}")
        return cls(values=dict(values), provided=frozenset(values))

    @classmethod
    def from_update(cls, data: TaskUpdate, category_id: int | None = None) -> "TaskPatch":
        sent = {name: getattr(data, name) for name in PATCH_FIELDS if name in data.model_fields_set}
        if category_id is not None:
            sent["category_id"] = category_id
        return cls.of(**sent)

    def has(self, name: str) -> bool:
        return name in self.provided

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def resolved(self, name: str, current: Any) -> Any:
        """全置換ルールで最終的に保存する値を返す"""
        if name in PRESERVED_FIELDS:
            value = self.values.get(name) if self.has(name) else None
            return current if value is None else value
        if name == "name":
            value = self.values.get("name")
            if value is None or not str(value).strip():
                raise TaskValidationError("Task name is required")
            return value
        if not self.has(name):
            return CLEARED_VALUES[name]
        value = self.values[name]
        if value is None:
            return CLEARED_VALUES[name]
        return value
