from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from case_manager.config import settings


def _engine_options() -> dict:
    """
    Pool and statement-timeout options for the configured backend.

    Cancellation is delegated to the store: PostgreSQL aborts statements
    after DB_STATEMENT_TIMEOUT_MS, SQLite gives up waiting on a locked
    database after the same interval.
    """
    if settings.is_sqlite:
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DB_STATEMENT_TIMEOUT_MS / 1000,
            }
        }
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "connect_args": {
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
        },
    }


# Create SQLAlchemy engine
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using
    echo=settings.DEBUG,  # Log SQL queries in debug mode
    **_engine_options(),
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """
    FastAPI dependency for database sessions.

    Yields a database session and ensures it's closed after use.

    Usage:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return RecordService(db).list_records(principal, entity)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
