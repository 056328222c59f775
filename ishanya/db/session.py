# ishanya/db/session.py
import os
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from .base import Base
from ..core.config import settings

log = logging.getLogger("db")

# URL from settings / .env, SQLite file as the last resort
DB_URL = getattr(settings, "DB_URL", None) or os.getenv("DB_URL") or "sqlite:///./ishanya.db"

def _make_engine(url_str: str):
    url = make_url(url_str)
    connect_args = {}
    kwargs = {}
    backend = url.get_backend_name()
    if backend.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if url.database in (None, "", ":memory:"):
            # in-memory DB must live on a single shared connection
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
        kwargs["pool_recycle"] = 3600
        if backend.startswith("mysql"):
            connect_args["charset"] = "utf8mb4"

    return create_engine(url_str, connect_args=connect_args, future=True, **kwargs)

# engine built from the configured URL
engine = _make_engine(DB_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def init_db():
    """Create tables; fall back to SQLite when the main server is down and FALLBACK_SQLITE=1."""
    global engine

    # make sure every model is registered on Base.metadata
    from .. import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        log.info("DB init OK with %s", engine.url.render_as_string(hide_password=True))
        return
    except OperationalError as e:
        backend = make_url(DB_URL).get_backend_name()
        log.error("DB init failed on %s: %s", backend, e)

        allow_fallback = os.getenv("FALLBACK_SQLITE", "0") == "1"
        if not backend.startswith("sqlite") and allow_fallback:
            fallback_url = "sqlite:///./ishanya.db"
            log.warning("Falling back to SQLite: %s", fallback_url)
            engine = _make_engine(fallback_url)
            SessionLocal.configure(bind=engine)
            Base.metadata.create_all(bind=engine)
        else:
            raise

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
