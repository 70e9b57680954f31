from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from .config import get_settings


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    engine_kwargs: dict = {"echo": settings.DATABASE_ECHO}

    if settings.is_sqlite:
        # Handlers run on a thread pool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update(
            {
                "pool_pre_ping": True,  # Verify connections before use
                "pool_recycle": 3600,  # Recycle connections every hour
                "pool_size": 10,
                "max_overflow": 20,
            }
        )

    return create_engine(settings.DATABASE_URL, **engine_kwargs)


def init_db(engine: Engine | None = None) -> None:
    # make sure all SQLModel models are imported before creating tables
    from line_balancing.infrastructure.database import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
