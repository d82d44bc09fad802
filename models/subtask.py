from sqlalchemy import Column, String, Integer, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from db.database import Base


class Subtask(Base):
    __tablename__ = "subtasks"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String)
    due_date = Column(DateTime)
    # 親タスクの完了フラグとは独立
    is_completed = Column(Boolean, default=False, nullable=False)

    task = relationship("Task", back_populates="subtasks")
