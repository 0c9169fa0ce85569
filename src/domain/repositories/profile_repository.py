"""Profile repository protocol."""

from typing import Protocol

from domain.entities.profile import Profile, ProfileData


class IProfileRepository(Protocol):
    """Repository interface for Profile entities.

    ``username`` is unique. A write that would break that raises
    ``UsernameTakenError``; any other store failure raises
    ``ProfileStoreError``.
    """

    async def find_one(self, username: str, ignore_case: bool = False) -> Profile | None:
        """Get the profile whose username equals ``username``."""
        ...

    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile."""
        ...

    async def find_one_and_update(
        self, username: str, data: ProfileData, ignore_case: bool = True
    ) -> Profile | None:
        """Replace every field of the matching profile, return the new state."""
        ...

    async def find_one_and_delete(
        self, username: str, ignore_case: bool = True
    ) -> Profile | None:
        """Delete the matching profile and return it."""
        ...
