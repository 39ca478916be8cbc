"""
Unit of Work boundary for Tempest database access.

The scheduler only reads from the content catalog, but every read still goes
through a session opened here so transaction handling stays consistent with
the rest of the platform.
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Generator

from sqlalchemy.orm import Session

from .db import SessionLocal


@contextlib.contextmanager
def session(factory: Callable[[], Session] | None = None) -> Generator[Session, None, None]:
    """
    Database session context manager.

    Provides Unit of Work semantics:
    - Opens a DB session (from ``factory`` or the global SessionLocal)
    - Yields it for use
    - On success: commits the transaction
    - On exception: rolls back and re-raises the exception
    - Always closes the session

    Usage:
        with session() as db:
            rows = db.scalars(select(ContentRecord)).all()
    """
    db = (factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
