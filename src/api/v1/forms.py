"""Request body parsing for profile create/update.

Bodies arrive as multipart/form-data (text fields plus optional
``profileImage``/``headerImage`` files) or as a JSON object without
files. In multipart bodies an image field may also carry a plain string:
the URL of the image the client wants to keep.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request
from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile

from api.v1.schemas.profile import ProfileFields
from core.exceptions import ProfileValidationError
from domain.entities.profile import ProfileData
from infrastructure.storage.provider import ImageUpload

IMAGE_FIELDS = ("profileImage", "headerImage")


@dataclass
class ProfileSubmission:
    """Parsed body of a create or update request."""

    data: ProfileData
    profile_image: Optional[ImageUpload] = None
    header_image: Optional[ImageUpload] = None


async def parse_profile_submission(request: Request) -> ProfileSubmission:
    """FastAPI dependency turning the request body into a submission."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        payload = await _read_json(request)
        return ProfileSubmission(data=_validate_fields(payload))

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        uploads = {name: await _read_upload(form, name) for name in IMAGE_FIELDS}
        return ProfileSubmission(
            data=_validate_fields(_text_fields(form)),
            profile_image=uploads["profileImage"],
            header_image=uploads["headerImage"],
        )

    # No (or unknown) body: every field takes its empty default.
    return ProfileSubmission(data=_validate_fields({}))


async def _read_json(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProfileValidationError("Request body is not valid JSON") from e
    if not isinstance(payload, dict):
        raise ProfileValidationError("Request body must be a JSON object")
    return payload


def _text_fields(form: FormData) -> dict[str, Any]:
    """Keep the last string value of each field; files are handled apart."""
    fields: dict[str, Any] = {}
    for key, value in form.multi_items():
        if isinstance(value, str):
            fields[key] = value
    return fields


async def _read_upload(form: FormData, name: str) -> Optional[ImageUpload]:
    """Return the first non-empty file attached under ``name``, if any."""
    for value in form.getlist(name):
        if not isinstance(value, UploadFile):
            continue
        data = await value.read()
        if not data:
            # Empty file part: the browser sent the field with nothing selected.
            continue
        return ImageUpload(
            data=data,
            content_type=value.content_type,
            filename=value.filename,
        )
    return None


def _validate_fields(payload: dict[str, Any]) -> ProfileData:
    try:
        fields = ProfileFields.model_validate(payload)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or None
        raise ProfileValidationError(
            f"Invalid {field}: {error['msg']}" if field else error["msg"],
            field=field,
        ) from e
    return fields.to_data()
