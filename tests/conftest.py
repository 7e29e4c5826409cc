"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# --- Config env par défaut
os.environ.setdefault("DATABASE_URL", "sqlite:///./milestone_escrow_test.db")
os.environ.setdefault("ESCROW_ENV", "test")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

from milestone_escrow.main import app  # noqa: E402
from milestone_escrow.db import get_db  # noqa: E402
from milestone_escrow.models import Escrow  # noqa: E402
from milestone_escrow.schemas.escrow import EscrowCreate  # noqa: E402
from milestone_escrow.services import escrow as escrow_service  # noqa: E402

DB_PATH = Path("./milestone_escrow_test.db")


def _run_migrations() -> None:
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("script_location", str(Path(__file__).resolve().parents[1] / "alembic"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Reset DB fichier au début de la session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False,
                                   future=True, expire_on_commit=False)

# --- (2) Construire le schéma via Alembic uniquement
_run_migrations()


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def owner() -> str:
    return f"0xowner{uuid4().hex[:12]}"


@pytest.fixture
def developer() -> str:
    return f"0xdev{uuid4().hex[:12]}"


@pytest.fixture
def stranger() -> str:
    return f"0xstranger{uuid4().hex[:8]}"


@pytest.fixture
def make_escrow(db_session: Session, owner: str, developer: str) -> Callable[..., Escrow]:
    """Factory creating an escrow owned by ``owner`` and funded in full."""

    def _factory(total: str = "100.00", *, name: str = "Bridge retrofit") -> Escrow:
        return escrow_service.create_escrow(
            db_session,
            EscrowCreate(
                project_name=name,
                project_description="Seismic retrofit of the east span",
                developer=developer,
                total_capital=Decimal(total),
                deposited_amount=Decimal(total),
            ),
            owner=owner,
        )

    return _factory
