import datetime as dt
import os
from decimal import Decimal

os.environ["ENV"] = "test"
os.environ["SEED_DEMO"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.crud.wbs import list_children
from app.db.base import Base
from app.db import models  # noqa: F401
from app.schemas.project import ProjectCreate
from app.schemas.wbs import WbsItemCreate
from app.services.projects import create_project_with_wbs
from app.services.wbs.service import validate_and_create


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # let SQLAlchemy emit BEGIN itself so SAVEPOINTs behave on pysqlite
    @event.listens_for(eng, "connect")
    def _connect(dbapi_conn, _record):
        dbapi_conn.isolation_level = None

    @event.listens_for(eng, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def project(db):
    return create_project_with_wbs(
        db,
        ProjectCreate(
            name="Tower A",
            start_date=dt.date(2024, 1, 1),
            end_date=dt.date(2024, 12, 31),
            budget=Decimal("100000.00"),
        ),
    )


@pytest.fixture
def top_level(db, project):
    """code -> seeded top-level Summary."""
    return {it.code: it for it in list_children(db, project.id, None)}


@pytest.fixture
def add_item(db):
    def _add(project_id, parent_id, type, budget="0", name=None, start=None, end=None):
        return validate_and_create(
            db,
            WbsItemCreate(
                project_id=project_id,
                parent_id=parent_id,
                name=name or f"{type} item",
                type=type,
                budgeted_cost=Decimal(budget),
                start_date=start,
                end_date=end,
            ),
        )
    return _add


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient
    from app.core.deps import get_db
    from app.main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
