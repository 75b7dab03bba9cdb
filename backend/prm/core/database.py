from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from prm.core.config import settings


def _engine_kwargs(url: str) -> dict:
    """Extra engine arguments needed by SQLite URLs."""
    if not url.startswith("sqlite"):
        return {}
    # FastAPI may run a request's dependencies and handler on different
    # threads, so SQLite's same-thread check has to be off
    kwargs = {"connect_args": {"check_same_thread": False}}
    # An in-memory database lives inside one connection, so every session
    # must share it
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


# Create database engine - manages connection pool
# Connection string comes from settings (env var or .env file)
engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit (prevents accidental commits)
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
# All models inherit from this so create_all can find their tables
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    Provides a database session to route handlers and closes it after the
    request completes, even if the handler raised. FastAPI caches the
    dependency per request, so the service, the session store and the route
    all share this one session.
    """
    db = SessionLocal()
    try:
        # Yield session to route handler
        # Code after yield runs when request completes
        yield db
    finally:
        # Always close session - returns the connection to the pool
        db.close()
