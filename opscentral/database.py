"""Engine, session factory and declarative base shared by every model."""
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from opscentral.core.config import settings


def build_engine(url: str, *, echo: bool = False) -> Engine:
    # sqlite connections are handed to worker threads by the store calls
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)


engine = build_engine(settings.sqlalchemy_url, echo=settings.SQL_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def check_database_connection(bind=None) -> bool:
    with (bind or engine).connect() as connection:
        connection.execute(text("SELECT 1"))
    return True
