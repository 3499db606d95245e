from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from shopfloor.core.config import settings

# Tables must be imported before metadata.create_all
from shopfloor.infrastructure.database import models  # noqa: F401


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across sessions."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


@lru_cache
def get_engine() -> Engine:
    return build_engine(settings.DATABASE_URL, echo=settings.LOG_SQL)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def session_factory(engine: Engine):
    """Return a zero-argument callable producing sessions bound to ``engine``."""

    def _factory() -> Session:
        return Session(engine, expire_on_commit=False)

    return _factory
