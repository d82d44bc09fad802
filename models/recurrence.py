from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from db.database import Base


class Recurrence(Base):
    __tablename__ = "recurrences"

    id = Column(Integer, primary_key=True, index=True)
    # 1タスクにつき最大1行
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), unique=True, nullable=False)
    interval = Column(String, nullable=False)  # daily / weekly など

    task = relationship("Task", back_populates="recurrence")
