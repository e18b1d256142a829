from __future__ import annotations
import os
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from .config import settings

# sqlite: ensure directory exists
_url = make_url(settings.db_url)
if _url.get_backend_name() == "sqlite" and _url.database and _url.database != ":memory:":
    os.makedirs(os.path.dirname(os.path.abspath(_url.database)), exist_ok=True)

engine = create_engine(settings.db_url, future=True, echo=False)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
