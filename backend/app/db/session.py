"""Database session configuration."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from app.core.config import Settings, get_settings


def build_engine(settings: Settings) -> Engine:
    url = make_url(settings.DATABASE_URL)
    options: dict = {"pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_MAX_OVERFLOW
    return create_engine(url, **options)


engine = build_engine(get_settings())

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
