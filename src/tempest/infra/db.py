"""
Database engine and session factories for the platform content catalog.
"""

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.schema import MetaData

from tempest.infra.settings import settings

# Deterministic constraint/index names
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def _engine_kwargs(url: str) -> dict[str, Any]:
    connect_args: dict[str, object] = {}
    kwargs: dict[str, Any] = {"pool_pre_ping": True, "future": True}
    if "sqlite" in url:
        connect_args["check_same_thread"] = False
    elif "postgresql" in url:
        connect_args["connect_timeout"] = settings.connect_timeout
        kwargs["pool_timeout"] = settings.pool_timeout
    kwargs["connect_args"] = connect_args
    return kwargs


engine = create_engine(settings.database_url, echo=settings.echo_sql, **_engine_kwargs(settings.database_url))


if "postgresql" in settings.database_url:

    @event.listens_for(engine, "connect")
    def _set_search_path(dbapi_conn, _):
        with dbapi_conn.cursor() as cur:
            cur.execute("SET search_path TO public")


SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
)


def get_engine(db_url: str | None = None) -> Engine:
    """Get or create a database engine.

    Returns the global engine for the default ``settings.database_url`` to
    avoid unnecessary engine creation.
    """
    if not db_url or db_url == settings.database_url:
        return engine
    return create_engine(db_url, echo=settings.echo_sql, **_engine_kwargs(db_url))


def get_sessionmaker(db_url: str | None = None) -> sessionmaker:
    """Get a session factory bound to the engine chosen by :func:`get_engine`."""
    if not db_url or db_url == settings.database_url:
        return SessionLocal
    return sessionmaker(
        bind=get_engine(db_url),
        autoflush=False,
        autocommit=False,
        future=True,
    )
