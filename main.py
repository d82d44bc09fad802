import logging
import os
import time
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from db.database import engine, Base, SessionLocal

# models を import しておく（create_all がテーブルを認識するため）
from models.task import Task  # noqa: F401
from models.subtask import Subtask  # noqa: F401
from models.recurrence import Recurrence  # noqa: F401
from models.attachment import Attachment  # noqa: F401
from models.category import Category  # noqa: F401

from routers import auth, tasks, categories
from services.category_service import seed_default_categories

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("todo")

app = FastAPI(title="Todo Backend")

STARTED_AT = time.time()

# --- CORS設定（CORS_ORIGINS をカンマ区切りで指定。未設定なら全許可）---
origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- ルーター ---
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(categories.router)


@app.on_event("startup")
def _startup():
    """
    起動時に1回だけ実行される処理
    - DBテーブル作成
    - 初期カテゴリ投入
    """
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_default_categories(db)
    finally:
        db.close()
    logger.info("startup complete")


# --- 死活監視用：DB に触らない軽量エンドポイント ---
@app.get("/ping", include_in_schema=False)
def ping():
    return {
        "ok": True,
        "service": "todo-backend",
        "ts": datetime.now(timezone.utc).isoformat(),
        "uptime_sec": round(time.time() - STARTED_AT, 2),
    }
