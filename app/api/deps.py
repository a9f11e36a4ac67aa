# app/api/deps.py

from typing import AsyncGenerator
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.database import get_session


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session(request):
        yield session


# ------------------------------------------------------------
# Settings handed to create_app()
# ------------------------------------------------------------
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
