"""
Async engine (asyncpg) used by the track store.
"""
import structlog
from superhitz.config import settings
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

log = structlog.get_logger()


class Base(DeclarativeBase):
    pass


# ── URL helpers ────────────────────────────────────────────────────────────

def _raw_url() -> str:
    url = settings.DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    # Normalise postgres:// → postgresql://
    return url.replace("postgres://", "postgresql://")

def _async_url() -> str:
    url = _raw_url()
    if "+asyncpg" in url:
        return url
    return url.replace("postgresql://", "postgresql+asyncpg://")


# ── Engine ─────────────────────────────────────────────────────────────────

_async_engine  = None
_async_factory = None


def get_async_engine() -> AsyncEngine:
    global _async_engine
    if _async_engine is None:
        _async_engine = create_async_engine(_async_url(), echo=False, pool_size=5, max_overflow=10)
    return _async_engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _async_factory
    if _async_factory is None:
        _async_factory = async_sessionmaker(get_async_engine(), class_=AsyncSession, expire_on_commit=False)
    return _async_factory


# ── Startup migration ──────────────────────────────────────────────────────

async def init_db():
    engine = get_async_engine()

    from superhitz.models import track  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        log.info("tables_created")


async def close_db():
    global _async_engine, _async_factory
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_factory = None
