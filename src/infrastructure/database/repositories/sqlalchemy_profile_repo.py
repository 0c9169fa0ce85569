"""SQLAlchemy implementation of Profile repository."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import ColumnElement, func, literal, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ProfileStoreError, UsernameTakenError
from domain.entities.profile import Profile, ProfileData, SocialLinks
from infrastructure.database.models import ProfileModel

DUPLICATE_KEY_MESSAGE = "Profile key or username already exists."


@contextmanager
def translate_store_errors(username: str) -> Iterator[None]:
    """Map SQLAlchemy failures onto the domain error taxonomy."""
    try:
        yield
    except IntegrityError as e:
        raise UsernameTakenError(username, message=DUPLICATE_KEY_MESSAGE) from e
    except SQLAlchemyError as e:
        raise ProfileStoreError(str(e)) from e


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_one(self, username: str, ignore_case: bool = False) -> Profile | None:
        """Get the profile whose username equals ``username``."""
        with translate_store_errors(username):
            model = await self._first_match(username, ignore_case)
        return self._to_entity(model) if model else None

    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile."""
        model = self._to_model(profile)
        with translate_store_errors(profile.username):
            self._session.add(model)
            await self._session.flush()
            await self._session.refresh(model)
        return self._to_entity(model)

    async def find_one_and_update(
        self, username: str, data: ProfileData, ignore_case: bool = True
    ) -> Profile | None:
        """Replace every field of the matching profile.

        Fields missing from ``data`` are cleared, not preserved.
        """
        with translate_store_errors(data.username or username):
            model = await self._first_match(username, ignore_case)
            if not model:
                return None

            model.username = data.username or ""
            model.name = data.name or ""
            model.job_title = data.job_title or ""
            model.profile_image = data.profile_image
            model.header_image = data.header_image
            model.phone = data.phone
            model.email = data.email
            model.is_verified = data.is_verified
            model.is_company = data.is_company
            model.social_links = data.social_links.to_dict()

            await self._session.flush()
            await self._session.refresh(model)
        return self._to_entity(model)

    async def find_one_and_delete(
        self, username: str, ignore_case: bool = True
    ) -> Profile | None:
        """Delete the matching profile and return it."""
        with translate_store_errors(username):
            model = await self._first_match(username, ignore_case)
            if not model:
                return None

            profile = self._to_entity(model)
            await self._session.delete(model)
            await self._session.flush()
        return profile

    async def _first_match(self, username: str, ignore_case: bool) -> ProfileModel | None:
        stmt = select(ProfileModel).where(_username_matches(username, ignore_case)).limit(1)
        result = await self._session.execute(stmt)
        return result.scalars().first()

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            username=model.username,
            name=model.name,
            job_title=model.job_title,
            profile_image=model.profile_image,
            header_image=model.header_image,
            phone=model.phone,
            email=model.email,
            is_verified=model.is_verified,
            is_company=model.is_company,
            social_links=SocialLinks.from_dict(model.social_links),
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            username=entity.username,
            name=entity.name,
            job_title=entity.job_title,
            profile_image=entity.profile_image,
            header_image=entity.header_image,
            phone=entity.phone,
            email=entity.email,
            is_verified=entity.is_verified,
            is_company=entity.is_company,
            social_links=entity.social_links.to_dict(),
        )


def _username_matches(username: str, ignore_case: bool) -> ColumnElement[bool]:
    # Literal comparison: the key is never treated as a pattern. Both sides go
    # through the database's lower() so case folding agrees outside ASCII.
    if ignore_case:
        return func.lower(ProfileModel.username) == func.lower(literal(username))
    return ProfileModel.username == username
