"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time; keep the test run off PostgreSQL.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from intake.adapters.persistence.database import Base  # noqa: E402
from intake.adapters.persistence.models import (  # noqa: E402
    CounselorModel,
    CounselorSpecializationModel,
    CrisisRuleModel,
    TicketCategoryModel,
)
from intake.domain.entities.crisis_rule import CrisisRule  # noqa: E402
from intake.domain.value_objects.enums import MatchMode, Severity  # noqa: E402


@pytest.fixture
def crisis_text():
    return "I want to kill myself tonight"


@pytest.fixture
def default_rules() -> list[CrisisRule]:
    return [
        CrisisRule(id=1, keyword="kill myself", severity=Severity.CRITICAL, match_mode=MatchMode.EXACT),
        CrisisRule(id=2, keyword="suicide", severity=Severity.CRITICAL),
        CrisisRule(id=3, keyword="self-harm", severity=Severity.HIGH),
        CrisisRule(id=4, keyword="depressed", severity=Severity.MEDIUM),
        CrisisRule(id=5, keyword="hopeless", severity=Severity.MEDIUM),
        CrisisRule(id=6, keyword="stressed", severity=Severity.LOW),
    ]


# ─── Database ───────────────────────────────────────────────────────


async def _sqlite_engine(url: str, **kwargs):
    """Async SQLite engine with the schema created and SAVEPOINT support."""
    engine = create_async_engine(url, connect_args={"check_same_thread": False}, **kwargs)

    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; take over.
    @event.listens_for(engine.sync_engine, "connect")
    def _no_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest_asyncio.fixture
async def db_session():
    """Fresh in-memory SQLite schema per test."""
    engine = await _sqlite_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """File-backed SQLite so separate sessions get separate connections."""
    engine = await _sqlite_engine(f"sqlite+aiosqlite:///{tmp_path / 'intake.db'}")
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def routing_data(db_session):
    """Two categories, three counselors, their specializations and a few rules.

    Returns a dict of ids for the tests to reference.
    """
    mental = TicketCategoryModel(name="Mental Health", slug="mental-health",
                                 sla_response_hours=2, max_priority_level=4)
    manual = TicketCategoryModel(name="General Inquiry", slug="general-inquiry",
                                 auto_assign=False, crisis_detection_enabled=False)
    ana = CounselorModel(name="Ana", email="ana@campus.test")
    ben = CounselorModel(name="Ben", email="ben@campus.test", role="advisor")
    cleo = CounselorModel(name="Cleo", email="cleo@campus.test", status="inactive")
    db_session.add_all([mental, manual, ana, ben, cleo])
    await db_session.flush()

    ana_spec = CounselorSpecializationModel(
        counselor_id=ana.id, category_id=mental.id, priority_level="primary",
        current_workload=8, max_workload=10, expertise_rating=5.0,
    )
    ben_spec = CounselorSpecializationModel(
        counselor_id=ben.id, category_id=mental.id, priority_level="secondary",
        current_workload=0, max_workload=2, expertise_rating=5.0,
    )
    cleo_spec = CounselorSpecializationModel(
        counselor_id=cleo.id, category_id=mental.id, priority_level="primary",
        current_workload=0, max_workload=10, expertise_rating=5.0,
    )
    db_session.add_all([ana_spec, ben_spec, cleo_spec])

    db_session.add_all([
        CrisisRuleModel(keyword="kill myself", severity_level="critical", match_mode="exact"),
        CrisisRuleModel(keyword="depressed", severity_level="medium"),
        CrisisRuleModel(keyword="hopeless", severity_level="medium"),
        CrisisRuleModel(keyword="retired phrase", severity_level="high", is_active=False),
        CrisisRuleModel(keyword="exam", severity_level="high", category_id=manual.id),
    ])
    await db_session.commit()

    return {
        "mental": mental.id,
        "manual": manual.id,
        "ana": ana.id,
        "ben": ben.id,
        "cleo": cleo.id,
        "ana_spec": ana_spec.id,
        "ben_spec": ben_spec.id,
        "cleo_spec": cleo_spec.id,
    }
