from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from fastapi import Request
from pathlib import Path
import logging
import os

# モデル定義側の Base を利用してメタデータを統一（registry で全モデル登録済み）
from fieldbook.models.registry import Base

logger = logging.getLogger(__name__)


def default_database_url() -> str:
    # 1) DATABASE_URL が指定されていれば優先（例: postgresql+psycopg://...）
    # 2) それ以外は SQLite を使用
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    _container_data = Path("/app/data")
    if _container_data.exists():
        db_path = _container_data / "app.db"
    else:
        # backend/fieldbook/db.py → ../../.. = <repo root>
        repo_root = Path(__file__).resolve().parents[2]
        db_path = repo_root / "data" / "app.db"
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def make_engine(url: str | None = None, **kwargs) -> Engine:
    url = url or default_database_url()
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("database schema ready on %s", engine.url.render_as_string(hide_password=True))


def get_db(request: Request):
    # セッションファクトリは create_app() で app.state に注入される
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
