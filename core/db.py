from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import database_url

engine = create_engine(database_url(), pool_size=10, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
Base = declarative_base()


def get_session():
    return SessionLocal()


def get_db():
    s = get_session()
    try:
        yield s
    finally:
        s.close()


def create_tables(bind=None):
    from models import User  # noqa: F401  registers the mapped tables

    Base.metadata.create_all(bind=bind or engine)

