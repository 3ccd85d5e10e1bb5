# This project was developed with assistance from AI tools.
"""Mock database utilities for functional tests.

Provides an AsyncMock session that handles the two result patterns used by
the loaders:
  1. ``.scalar_one_or_none()`` -- single lead / condition lookups
  2. ``.scalars().all()`` -- condition lists
"""

from unittest.mock import AsyncMock, MagicMock

from db import get_db

from src.routes._deps import get_clock, get_notifier, get_store


def make_mock_session(
    single: object | None = None,
    items: list | None = None,
) -> AsyncMock:
    """Build an AsyncMock session that returns predictable query results.

    Args:
        single: ORM object for ``.scalar_one_or_none()``.
        items: List of ORM objects for ``.scalars().all()``.
    """
    session = AsyncMock()

    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = single
    mock_result.scalars.return_value.all.return_value = items or []

    session.execute = AsyncMock(return_value=mock_result)
    return session


def configure_app(app, session: AsyncMock, store, clock, notifier) -> None:
    """Override the session, store, clock and notification hook on the real app."""

    async def fake_db():
        yield session

    app.dependency_overrides[get_db] = fake_db
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
