"""Database configuration and connection setup"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from courtside.config.settings import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    # SQLite (local runs) does not accept pool sizing arguments
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


def serialize_sqlite_transactions(engine: Engine) -> Engine:
    """
    Open every SQLite transaction with BEGIN IMMEDIATE.

    SQLite ignores SELECT ... FOR UPDATE, so the facility lock taken before
    the conflict check does nothing there. Taking the database write lock at
    BEGIN makes concurrent creators queue behind each other instead.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        # pysqlite would otherwise emit its own deferred BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


# Create database engine with connection pooling
engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    **_engine_options(settings.DATABASE_URL),
)

if engine.dialect.name == "sqlite":
    serialize_sqlite_transactions(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create all tables that do not exist yet (development helper)"""
    import courtside.models  # noqa: F401  registers every model on Base
    from courtside.models.base import Base

    print("Creating all tables...")
    Base.metadata.create_all(bind=engine)
    print("Database tables created successfully!")


if __name__ == "__main__":
    create_tables()
