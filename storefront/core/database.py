from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .config import settings

DEFAULT_DATABASE_URL = "sqlite:///./storefront.db"
# Bare postgres schemes are served by psycopg 3 (the `postgres` extra)
_PG_SCHEMES = ("postgres", "postgresql")


def database_url(raw_url: str | None) -> str:
    """Empty means the local SQLite file; a bare postgres scheme gets the psycopg driver."""
    raw_url = (raw_url or "").strip()
    if not raw_url:
        return DEFAULT_DATABASE_URL
    scheme, sep, rest = raw_url.partition("://")
    if sep and scheme in _PG_SCHEMES:
        return f"postgresql+psycopg://{rest}"
    return raw_url


def engine_options(url: str) -> dict:
    """create_engine keyword arguments for ``url``."""
    if not url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url:
        # One shared connection, otherwise every session sees its own empty database
        options["poolclass"] = StaticPool
    return options


DATABASE_URL = database_url(settings.database_url)
engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))


def get_db():
    with Session(engine) as session:
        yield session


def init_db():
    # Table classes must be registered on the metadata before create_all
    import storefront.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
