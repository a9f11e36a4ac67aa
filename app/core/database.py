# app/core/database.py

import ssl
from typing import AsyncGenerator

from fastapi import Request
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.pool import NullPool
from sqlalchemy import text
from loguru import logger

from app.core.config import Settings


# ----------------------------------------------------
# SSL for hosted Postgres
# ----------------------------------------------------
def make_ssl(verify: bool):
    ctx = ssl.create_default_context()
    if not verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


# ----------------------------------------------------
# Engine (built from the settings handed to create_app)
# ----------------------------------------------------
def create_engine(settings: Settings) -> AsyncEngine:
    url = settings.DATABASE_URL

    if url.startswith("postgresql+asyncpg"):
        logger.info("Configuring database (asyncpg, no client pooling)")
        return create_async_engine(
            url,
            echo=False,
            connect_args={
                "ssl": make_ssl(settings.DB_SSL_VERIFY),
                "statement_cache_size": 0,  # disable prepared statements
            },
            pool_pre_ping=True,
            poolclass=NullPool,
        )

    logger.info(f"Configuring database ({url.split(':', 1)[0]})")
    return create_async_engine(url, echo=False)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


# ----------------------------------------------------
# Create tables
# ----------------------------------------------------
async def init_db(engine: AsyncEngine):
    # Registers the table on SQLModel.metadata
    from app.models.submission import FormSubmission  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


# ----------------------------------------------------
# Test Connection
# ----------------------------------------------------
async def test_connection(engine: AsyncEngine):
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


# ----------------------------------------------------
# Request-scoped session
# ----------------------------------------------------
async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.sessionmaker() as session:
        yield session
