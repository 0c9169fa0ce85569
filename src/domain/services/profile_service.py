"""Profile service layer: validation, image staging and persistence."""

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Callable, Optional

import structlog

from core.exceptions import ImageUploadError, ProfileNotFoundError, UsernameTakenError
from domain.entities.profile import (
    CreatedProfile,
    Profile,
    ProfileData,
    delete_lookup_key,
    derive_profile_key,
    validate_required_fields,
)
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.storage.provider import IImageStore, ImageUpload

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class StagedImages:
    """URLs produced by phase one of a write.

    ``uploaded`` lists the URLs that were created by this request, i.e.
    the objects left orphaned in the image store if phase two fails.
    """

    profile_image: str
    header_image: str
    uploaded: tuple[str, ...] = ()


class ProfileService:
    """Service layer for Profile business logic.

    Writes run in two phases that are NOT atomic together:

    1. ``stage_images`` uploads attached files to the image store.
    2. The profile document is written through the unit of work.

    If phase two fails, images uploaded in phase one stay in the image
    store. They are logged as ``orphaned_image_upload`` and never
    deleted; the caller only sees the phase-two error.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        image_store: IImageStore,
    ) -> None:
        self._uow_factory = uow_factory
        self._image_store = image_store

    async def create(
        self,
        data: ProfileData,
        profile_image: Optional[ImageUpload] = None,
        header_image: Optional[ImageUpload] = None,
    ) -> CreatedProfile:
        """Create a profile. Fails if the username is already taken.

        URL strings in ``data.profile_image``/``data.header_image`` are
        ignored: a new profile only gets images that were uploaded.
        """
        validate_required_fields(data)
        username = data.username or ""
        profile_key = derive_profile_key(username)

        # Pre-check before paying for uploads. Not atomic with the insert;
        # the unique constraint settles concurrent creates.
        async with self._uow_factory() as uow:
            if await uow.profiles.find_one(username):
                raise UsernameTakenError(username)

        staged = await self.stage_images(
            profile_image, header_image, fallback_profile="", fallback_header=""
        )

        profile = Profile.from_data(data)
        profile.profile_image = staged.profile_image
        profile.header_image = staged.header_image

        with _report_orphans(staged, "create", username):
            async with self._uow_factory() as uow:
                saved = await uow.profiles.insert(profile)
                await uow.commit()

        logger.info("profile_created", username=saved.username, profile_key=profile_key)
        return CreatedProfile(profile=saved, profile_key=profile_key)

    async def get_by_key(self, profile_key: str) -> Profile:
        """Get a profile whose username matches ``profile_key`` exactly."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.find_one(profile_key)
            if not profile:
                raise ProfileNotFoundError(profile_key)
            return profile

    async def update(
        self,
        profile_key: str,
        data: ProfileData,
        profile_image: Optional[ImageUpload] = None,
        header_image: Optional[ImageUpload] = None,
    ) -> Profile:
        """Replace every field of the profile matching ``profile_key``.

        The key is matched ignoring case. Nothing is merged: optional fields
        absent from ``data`` are cleared. Image fields keep the URL strings
        passed in ``data`` unless a new file is attached.
        """
        validate_required_fields(data)

        staged = await self.stage_images(
            profile_image,
            header_image,
            fallback_profile=data.profile_image,
            fallback_header=data.header_image,
        )
        data = replace(
            data,
            profile_image=staged.profile_image,
            header_image=staged.header_image,
        )

        with _report_orphans(staged, "update", profile_key):
            async with self._uow_factory() as uow:
                updated = await uow.profiles.find_one_and_update(profile_key, data)
                if not updated:
                    raise ProfileNotFoundError(profile_key)
                await uow.commit()

        logger.info("profile_updated", profile_key=profile_key, username=updated.username)
        return updated

    async def delete(self, profile_key: str) -> Profile:
        """Delete the profile matching ``profile_key``.

        Only the first hyphen of the key is turned into a space before the
        case-insensitive match (see ``delete_lookup_key``).
        """
        username = delete_lookup_key(profile_key)
        async with self._uow_factory() as uow:
            deleted = await uow.profiles.find_one_and_delete(username)
            if not deleted:
                raise ProfileNotFoundError(profile_key)
            await uow.commit()

        logger.info("profile_deleted", profile_key=profile_key, username=deleted.username)
        return deleted

    async def stage_images(
        self,
        profile_image: Optional[ImageUpload],
        header_image: Optional[ImageUpload],
        fallback_profile: str = "",
        fallback_header: str = "",
    ) -> StagedImages:
        """Phase one: upload attached images, fall back to the given URLs.

        Both uploads run concurrently; their completion order is not
        defined. Any failure fails the whole write. An upload that already
        finished when its sibling failed is not rolled back.
        """
        fields = {"profileImage": profile_image, "headerImage": header_image}
        pending = {name: image for name, image in fields.items() if image is not None}
        if not pending:
            return StagedImages(profile_image=fallback_profile, header_image=fallback_header)

        results = await asyncio.gather(
            *(self._upload(name, image) for name, image in pending.items()),
            return_exceptions=True,
        )

        urls: dict[str, str] = {}
        failure: Optional[BaseException] = None
        for name, result in zip(pending, results):
            if isinstance(result, BaseException):
                failure = failure or result
            else:
                urls[name] = result

        if failure is not None:
            if urls:
                logger.warning(
                    "orphaned_image_upload",
                    operation="stage_images",
                    urls=list(urls.values()),
                )
            raise failure

        return StagedImages(
            profile_image=urls.get("profileImage", fallback_profile),
            header_image=urls.get("headerImage", fallback_header),
            uploaded=tuple(urls.values()),
        )

    async def _upload(self, field: str, image: ImageUpload) -> str:
        try:
            return await self._image_store.upload(image)
        except ImageUploadError as e:
            if e.details is None:
                e.details = {"field": field}
            raise


@contextmanager
def _report_orphans(staged: StagedImages, operation: str, key: str) -> Iterator[None]:
    """Log images staged in phase one when phase two raises."""
    try:
        yield
    except Exception as e:
        if staged.uploaded:
            logger.warning(
                "orphaned_image_upload",
                operation=operation,
                key=key,
                urls=list(staged.uploaded),
                error_type=type(e).__name__,
            )
        raise
