"""Async engine and sessions for the conversation message log."""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.config.settings import settings
from app.models import Base

logger = logging.getLogger(__name__)

_SCHEMA_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def normalise_schema_name(raw_schema: str | None) -> str | None:
    """Return a usable schema name, or None to stay on the default search_path."""

    schema = (raw_schema or "").strip()
    if not schema:
        return None
    if not _SCHEMA_NAME_PATTERN.fullmatch(schema):
        logger.warning("Ignoring invalid schema name '%s'", raw_schema)
        return None
    return schema


# Tables carry no schema of their own; the session search_path places them.
SCHEMA_NAME = normalise_schema_name(settings.database.schema_name)


def _create_engine() -> AsyncEngine:
    engine_options: dict[str, Any] = {"echo": settings.debug, "pool_pre_ping": True}
    if settings.database.serverless:
        engine_options["poolclass"] = NullPool
    return create_async_engine(settings.database.url, **engine_options)


engine: AsyncEngine = _create_engine()

SessionFactory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def _use_schema(target: Any) -> None:
    if SCHEMA_NAME:
        await target.execute(text(f'SET search_path TO "{SCHEMA_NAME}", public'))


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield a session bound to the configured schema."""

    async with SessionFactory() as session:
        await _use_schema(session)
        yield session


async def init_models() -> None:
    """Create the schema (when configured) and the ``messages`` table."""

    async with engine.begin() as conn:
        if SCHEMA_NAME:
            await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{SCHEMA_NAME}"'))
        await _use_schema(conn)
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Ensured message log table in schema '%s'", SCHEMA_NAME or "public")


async def dispose_engine() -> None:
    await engine.dispose()
