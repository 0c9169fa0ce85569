"""Profile API routes."""

from fastapi import APIRouter, Depends, status

from api.v1.dependencies import get_profile_service
from api.v1.forms import ProfileSubmission, parse_profile_submission
from api.v1.schemas.common import ErrorResponse, MessageResponse
from api.v1.schemas.profile import ProfileCreatedResponse, ProfileResponse
from domain.services.profile_service import ProfileService

router = APIRouter(tags=["profiles"])


@router.post(
    "/save-profile",
    response_model=ProfileCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a profile",
    responses={
        201: {"description": "Profile created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid fields or username already taken"},
        500: {"model": ErrorResponse, "description": "Image upload or database failure"},
    },
)
async def save_profile(
    submission: ProfileSubmission = Depends(parse_profile_submission),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileCreatedResponse:
    """Create a profile, uploading ``profileImage``/``headerImage`` if attached."""
    created = await service.create(
        submission.data,
        profile_image=submission.profile_image,
        header_image=submission.header_image,
    )
    return ProfileCreatedResponse(
        message="Profile saved successfully",
        profile_key=created.profile_key,
        profile=ProfileResponse.from_entity(created.profile),
    )


@router.put(
    "/update-profile/{profile_key}",
    response_model=ProfileResponse,
    summary="Replace a profile",
    responses={
        200: {"description": "Profile updated successfully"},
        400: {"model": ErrorResponse, "description": "Invalid fields or username already taken"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
async def update_profile(
    profile_key: str,
    submission: ProfileSubmission = Depends(parse_profile_submission),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Replace every field of the profile. Omitted optional fields are cleared."""
    profile = await service.update(
        profile_key,
        submission.data,
        profile_image=submission.profile_image,
        header_image=submission.header_image,
    )
    return ProfileResponse.from_entity(profile)


@router.delete(
    "/profiles/{profile_key}",
    response_model=MessageResponse,
    summary="Delete a profile",
    responses={
        200: {"description": "Profile deleted successfully"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
async def delete_profile(
    profile_key: str,
    service: ProfileService = Depends(get_profile_service),
) -> MessageResponse:
    """Delete a profile. The first hyphen in the key is read as a space."""
    await service.delete(profile_key)
    return MessageResponse(message="Profile deleted successfully")


# Public profile pages live at the site root: GET /{profile_key}
public_router = APIRouter(tags=["profiles"])


@public_router.get(
    "/{profile_key}",
    response_model=ProfileResponse,
    summary="Get a profile",
    responses={
        200: {"description": "Profile found"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
async def get_profile(
    profile_key: str,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Get a profile by exact, case-sensitive username."""
    profile = await service.get_by_key(profile_key)
    return ProfileResponse.from_entity(profile)
