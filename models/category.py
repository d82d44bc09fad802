from sqlalchemy import Column, String, Integer, DateTime
from db.database import Base
from services.time_utils import utcnow


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    # ユーザー単位ではなく全体で一意
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    created_by = Column(String)  # 作成者（参考情報のみ）
