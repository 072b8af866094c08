import math

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from event_locator.config import get_settings

settings = get_settings()

# Base model class
Base = declarative_base()


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    """Provide the math functions PostgreSQL has built in."""
    dbapi_connection.create_function("radians", 1, math.radians)
    dbapi_connection.create_function("sin", 1, math.sin)
    dbapi_connection.create_function("cos", 1, math.cos)
    dbapi_connection.create_function("acos", 1, math.acos)
    dbapi_connection.create_function("least", 2, min)
    dbapi_connection.create_function("greatest", 2, max)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL.

    SQLite URLs (local development and tests) share a single in-process
    connection and get the trigonometric functions used by radius search.
    """
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(engine.sync_engine, "connect", _register_sqlite_functions)
        return engine

    return create_async_engine(
        database_url,
        echo=echo,
        future=True,
        pool_pre_ping=True,
    )


# Create async engine for the database
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create sessionmaker
async_session = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

async def create_db_and_tables(bind: AsyncEngine = None):
    """Create database tables."""
    # Register the models on Base.metadata
    from event_locator.models import event as _event_models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
