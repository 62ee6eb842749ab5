"""
Database session management with SQLAlchemy async
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from core.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    poolclass=NullPool,
    future=True
)

# Create session factory (the capture fetcher opens one session per source table)
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


async def get_session() -> AsyncSession:
    """Get database session"""
    async with async_session_maker() as session:
        yield session


# ============================================================================
# Error classification
# ============================================================================

MISSING_RELATION_SQLSTATE = "42P01"
INVALID_COLUMN_REFERENCE_SQLSTATE = "42P10"
ON_CONFLICT_CONSTRAINT_MESSAGE = (
    "there is no unique or exclusion constraint matching the on conflict specification"
)


def get_sqlstate(error: BaseException) -> Optional[str]:
    """
    Return the SQLSTATE carried by a database error.
    
    SQLAlchemy wraps the DBAPI error in ``.orig``; the asyncpg adapter in turn
    chains the native asyncpg exception as ``__cause__``. Walk the chain and
    return the first ``sqlstate``/``pgcode`` found.
    """
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        for attr in ("sqlstate", "pgcode"):
            code = getattr(current, attr, None)
            if isinstance(code, str) and code:
                return code
        current = getattr(current, "orig", None) or current.__cause__
    return None


def is_missing_relation_error(error: BaseException) -> bool:
    """True when the error reports an undefined table"""
    return get_sqlstate(error) == MISSING_RELATION_SQLSTATE


def is_on_conflict_constraint_error(error: BaseException) -> bool:
    """True when an upsert has no unique constraint matching its conflict target"""
    if ON_CONFLICT_CONSTRAINT_MESSAGE in str(error).lower():
        return True
    return get_sqlstate(error) == INVALID_COLUMN_REFERENCE_SQLSTATE
