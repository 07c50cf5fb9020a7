# storefront/data/database.py
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.utils.logging import get_logger
from storefront.utils.retry import db_retry
from storefront.utils.settings import DATABASE_URL

logger = get_logger(__name__)


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    #in-memory db must be a single connection, otherwise every thread sees an empty db
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=True)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@db_retry()
def init_db():
    """
    Creates every table registered on Base.metadata.
    Retried with backoff so the API can start before the database accepts connections.
    """
    import storefront.data.models  # noqa: F401

    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def ping() -> bool:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return True
