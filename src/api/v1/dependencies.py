"""Dependency injection factories for API v1."""

from typing import Callable

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from domain.services.profile_service import ProfileService
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.storage.provider import IImageStore


def build_uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


def build_profile_service(
    session_factory: async_sessionmaker[AsyncSession],
    image_store: IImageStore,
) -> ProfileService:
    """Wire a Profile service from its collaborators."""
    return ProfileService(build_uow_factory(session_factory), image_store)


def get_profile_service(request: Request) -> ProfileService:
    """Get the Profile service built at application startup."""
    return request.app.state.profile_service  # type: ignore[no-any-return]
