from sqlalchemy import Column, String, Integer, DateTime, Boolean
from sqlalchemy.orm import relationship
from db.database import Base
from services.time_utils import utcnow


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    due_date = Column(DateTime)
    priority = Column(String)  # Low / Medium / High など自由文字列
    is_completed = Column(Boolean, default=False, nullable=False)

    # DB 側の FK 制約は張らない（存在しない id もそのまま受け付ける）
    category_id = Column(Integer, index=True)

    subtasks = relationship(
        "Subtask",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Subtask.id",
    )
    recurrence = relationship(
        "Recurrence",
        back_populates="task",
        cascade="all, delete-orphan",
        uselist=False,
    )
    attachments = relationship(
        "Attachment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Attachment.id",
    )
    category = relationship(
        "Category",
        primaryjoin="foreign(Task.category_id) == Category.id",
        viewonly=True,
    )

    @property
    def category_name(self):
        return self.category.name if self.category is not None else None
