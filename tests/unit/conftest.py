"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.services.profile_service import ProfileService
from tests.conftest import FakeImageStore


class FakeUnitOfWork:
    """Fake Unit of Work with a mocked profile repository."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.profiles.find_one.return_value = None
        self.profiles.insert.side_effect = lambda profile: profile
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type:
            await self.rollback()


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def service(uow: FakeUnitOfWork, image_store: FakeImageStore) -> ProfileService:
    return ProfileService(lambda: uow, image_store)
