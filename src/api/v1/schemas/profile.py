"""Pydantic schemas for Profile API."""

import json
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from domain.entities.profile import Profile, ProfileData, SocialLinks

_FALSE_STRINGS = {"", "false", "0", "off", "no"}
_TRUE_STRINGS = {"true", "1", "on", "yes"}


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SocialLinksSchema(CamelModel):
    """Social links attached to a profile."""

    model_config = ConfigDict(extra="ignore")

    website: str | None = None
    instagram: str | None = None
    facebook: str | None = None
    telegram: str | None = None
    tiktok: str | None = None
    youtube: str | None = None
    whatsapp: str | None = None
    maps: str | None = None
    snapchat: str | None = None

    @classmethod
    def from_entity(cls, links: SocialLinks) -> "SocialLinksSchema":
        return cls(**links.to_dict())

    def to_entity(self) -> SocialLinks:
        return SocialLinks(**self.model_dump())


class ProfileFields(CamelModel):
    """Text fields of a create/update submission.

    Required fields are optional here on purpose: the service validates
    them so the username rule is always checked first.
    """

    model_config = ConfigDict(extra="ignore")

    username: str | None = None
    name: str | None = None
    job_title: str | None = None
    phone: str | None = None
    email: str | None = None
    is_verified: bool = False
    is_company: bool = False
    social_links: SocialLinksSchema = Field(default_factory=SocialLinksSchema)
    profile_image: str = ""
    header_image: str = ""

    @field_validator("is_verified", "is_company", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> Any:
        if v is None:
            return False
        if isinstance(v, str):
            lowered = v.strip().lower()
            if lowered in _FALSE_STRINGS:
                return False
            if lowered in _TRUE_STRINGS:
                return True
        return v

    @field_validator("social_links", mode="before")
    @classmethod
    def parse_social_links(cls, v: Any) -> Any:
        """Accept a JSON-encoded string (multipart) or an object (JSON body)."""
        if v is None:
            return {}
        if isinstance(v, str):
            if not v.strip():
                return {}
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"socialLinks is not valid JSON: {e.msg}") from e
            return {} if parsed is None else parsed
        return v

    @field_validator("profile_image", "header_image", mode="before")
    @classmethod
    def empty_url(cls, v: Any) -> Any:
        return "" if v is None else v

    def to_data(self) -> ProfileData:
        return ProfileData(
            username=self.username,
            name=self.name,
            job_title=self.job_title,
            phone=self.phone,
            email=self.email,
            is_verified=self.is_verified,
            is_company=self.is_company,
            social_links=self.social_links.to_entity(),
            profile_image=self.profile_image,
            header_image=self.header_image,
        )


class ProfileResponse(CamelModel):
    """Schema for Profile response."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "456e4567-e89b-12d3-a456-426614174000",
                "username": "jane-doe",
                "name": "Jane Doe",
                "jobTitle": "Engineer",
                "profileImage": "",
                "headerImage": "",
                "phone": "+1 555 0100",
                "email": "jane@example.com",
                "isVerified": False,
                "isCompany": False,
                "socialLinks": {"website": "https://example.com"},
            }
        },
    )

    id: UUID
    username: str
    name: str
    job_title: str
    profile_image: str = ""
    header_image: str = ""
    phone: str | None = None
    email: str | None = None
    is_verified: bool = False
    is_company: bool = False
    social_links: SocialLinksSchema

    @classmethod
    def from_entity(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            id=profile.id,
            username=profile.username,
            name=profile.name,
            job_title=profile.job_title,
            profile_image=profile.profile_image,
            header_image=profile.header_image,
            phone=profile.phone,
            email=profile.email,
            is_verified=profile.is_verified,
            is_company=profile.is_company,
            social_links=SocialLinksSchema.from_entity(profile.social_links),
        )


class ProfileCreatedResponse(CamelModel):
    """Schema for the create response."""

    message: str
    profile_key: str
    profile: ProfileResponse
