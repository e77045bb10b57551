from __future__ import annotations

from quoteboard.infrastructure.db.base import Base
from quoteboard.infrastructure.db.session import engine

# Ensure models are registered with SQLAlchemy metadata.
from quoteboard.infrastructure.db import models  # noqa: F401


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
