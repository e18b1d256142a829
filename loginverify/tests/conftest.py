# loginverify/tests/conftest.py
import os
# in-memory DB for the module-level engine; no developer runtime config
os.environ.setdefault("DB_URL", "sqlite://")
os.environ["RUNTIME_CONFIG"] = os.path.join(os.path.dirname(__file__), "missing-runtimeconfig.json")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from loginverify.app import app, get_mailer
from loginverify.config import Settings, get_settings
from loginverify.db import get_db
from loginverify.db_models import Base

class FakeMailer:
    def __init__(self):
        self.sent = []
        self.error = None

    async def send(self, message):
        self.sent.append(message)
        if self.error is not None:
            raise self.error

@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()

@pytest.fixture
def mailer():
    return FakeMailer()

@pytest.fixture
def app_settings():
    return Settings(
        sendgrid_api_key="SG.test-key",
        mail_from="auth@example.org",
        verify_base_url="https://verify.example.org/decide",
    )

@pytest.fixture
def client(session_factory, mailer, app_settings):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
