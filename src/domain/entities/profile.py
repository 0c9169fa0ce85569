"""Profile domain entity."""

import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional
from uuid import UUID, uuid4

from core.exceptions import ProfileValidationError

MIN_USERNAME_LENGTH = 3

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass
class SocialLinks:
    """Fixed set of optional social/contact links shown on a profile card."""

    website: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    telegram: Optional[str] = None
    tiktok: Optional[str] = None
    youtube: Optional[str] = None
    whatsapp: Optional[str] = None
    maps: Optional[str] = None
    snapchat: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SocialLinks":
        """Build from a mapping, ignoring keys that are not known link names."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def to_dict(self) -> dict[str, Optional[str]]:
        return asdict(self)


@dataclass
class ProfileData:
    """Field set submitted by a create or update request.

    ``profile_image``/``header_image`` hold URL strings passed through by
    the client. Create ignores them; update keeps them unless a new file
    replaces them.
    """

    username: Optional[str] = None
    name: Optional[str] = None
    job_title: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_verified: bool = False
    is_company: bool = False
    social_links: SocialLinks = field(default_factory=SocialLinks)
    profile_image: str = ""
    header_image: str = ""


@dataclass
class Profile:
    """Domain entity for a stored profile card."""

    username: str
    name: str
    job_title: str
    id: UUID = field(default_factory=uuid4)
    profile_image: str = ""
    header_image: str = ""
    phone: Optional[str] = None
    email: Optional[str] = None
    is_verified: bool = False
    is_company: bool = False
    social_links: SocialLinks = field(default_factory=SocialLinks)

    @classmethod
    def from_data(cls, data: ProfileData) -> "Profile":
        """Build a new profile from validated submitted data."""
        return cls(
            username=data.username or "",
            name=data.name or "",
            job_title=data.job_title or "",
            profile_image=data.profile_image,
            header_image=data.header_image,
            phone=data.phone,
            email=data.email,
            is_verified=data.is_verified,
            is_company=data.is_company,
            social_links=data.social_links,
        )


@dataclass(frozen=True, slots=True)
class CreatedProfile:
    """Read-only value object: a freshly saved profile and its URL key."""

    profile: Profile
    profile_key: str


def derive_profile_key(username: str) -> str:
    """URL-safe key returned on create: lower-cased, whitespace runs -> '-'.

    The key is not persisted and is not checked for uniqueness.
    """
    return _WHITESPACE_RUN.sub("-", username.lower())


def delete_lookup_key(profile_key: str) -> str:
    """Username lookup value used by the delete endpoint.

    Only the FIRST hyphen becomes a space: ``john-smith-jr`` looks up
    ``john smith-jr``. Known quirk kept as-is until product decides whether
    keys with several hyphens should map back to several spaces.
    """
    return profile_key.replace("-", " ", 1)


def validate_required_fields(data: ProfileData) -> None:
    """Reject submissions missing required fields.

    The username check runs first so its message wins when several fields
    are wrong.
    """
    if not data.username or len(data.username.strip()) < MIN_USERNAME_LENGTH:
        raise ProfileValidationError(
            "Username must be at least 3 characters long.", field="username"
        )
    if not data.name or not data.name.strip():
        raise ProfileValidationError("Name is required.", field="name")
    if not data.job_title or not data.job_title.strip():
        raise ProfileValidationError("Job title is required.", field="jobTitle")
