"""
Unit tests for the session dependency.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.database import get_db


def make_request():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()

    session_context = MagicMock()
    session_context.__aenter__ = AsyncMock(return_value=session)
    session_context.__aexit__ = AsyncMock(return_value=False)

    database = SimpleNamespace(session_factory=MagicMock(return_value=session_context))
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(database=database)))
    return request, session


def test_get_db_rolls_back_on_error():
    request, session = make_request()

    async def run():
        dependency = get_db(request)
        assert await dependency.__anext__() is session
        with pytest.raises(RuntimeError):
            await dependency.athrow(RuntimeError("handler failed"))

    asyncio.run(run())

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


def test_get_db_leaves_committing_to_the_handler():
    request, session = make_request()

    async def run():
        dependency = get_db(request)
        await dependency.__anext__()
        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()

    asyncio.run(run())

    session.commit.assert_not_awaited()
    session.rollback.assert_not_awaited()
