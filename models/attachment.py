from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from db.database import Base


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String, nullable=False)  # アップロード時の元ファイル名
    path = Column(String, nullable=False)  # 保存先パス
    content_type = Column(String)

    task = relationship("Task", back_populates="attachments")
