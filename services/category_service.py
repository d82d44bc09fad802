import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.category import Category
from services.time_utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Work",
    "Personal",
    "Health",
    "Shopping",
    "Fitness",
    "Education",
    "Finance",
    "Social",
    "Family",
    "Hobbies",
    "Projects",
    "Self-Care",
    "Errands",
    "Goals",
]


def normalize_category_name(name: Optional[str]) -> str:
    """前後の空白だけ落とす（大文字小文字は区別したまま）"""
    return (name or "").strip()


def find_category_by_name(db: Session, name: str) -> Optional[Category]:
    return db.query(Category).filter(Category.name == name).first()


def resolve_category(
    db: Session,
    user_id: str,
    category_id: Optional[int] = None,
    category_name: Optional[str] = None,
) -> Optional[int]:
    """
    カテゴリ id を決める

    - id が指定されていればそのまま使う（存在チェックはしない）
    - 名前が指定されていれば全体から完全一致で検索し、無ければその場で作成してコミット
    - どちらも無ければ None
    """
    if category_id is not None:
        return category_id

    name = normalize_category_name(category_name)
    if not name:
        return None

    existing = find_category_by_name(db, name)
    if existing is not None:
        return existing.id

    category = Category(name=name, created_by=user_id, created_at=utcnow())
    db.add(category)
    try:
        # タスク本体とは別に即コミットする
        db.commit()
    except IntegrityError:
        # 同名カテゴリを別リクエストが先に作った
        db.rollback()
        winner = find_category_by_name(db, name)
        if winner is None:
            raise
        logger.info("category %r created concurrently, reusing id=%s", name, winner.id)
        return winner.id

    db.refresh(category)
    logger.info("category created id=%s name=%r by user=%s", category.id, name, user_id)
    return category.id


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.id).all()


def seed_default_categories(db: Session) -> int:
    """
    カテゴリが1件も無い場合だけ初期カテゴリを投入する

    Returns:
        int: 追加した件数
    """
    if db.query(Category).first() is not None:
        return 0

    db.add_all([Category(name=name, created_at=utcnow()) for name in DEFAULT_CATEGORIES])
    db.commit()
    logger.info("seeded %d default categories", len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)
