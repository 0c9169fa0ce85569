"""Integration tests for Profiles API."""

import json

import pytest
from httpx import AsyncClient

from tests.conftest import IMAGE_HOST, FakeImageStore


def _fields(**overrides) -> dict[str, str]:
    values = {"username": "jane-doe", "name": "Jane", "jobTitle": "Eng"}
    values.update(overrides)
    return values


def _file(filename: str, data: bytes = b"\x89PNG") -> tuple[str, bytes, str]:
    return (filename, data, "image/png")


async def _create(client: AsyncClient, files=None, **overrides):
    return await client.post("/api/save-profile", data=_fields(**overrides), files=files)


class TestCreateProfile:
    @pytest.mark.asyncio
    async def test_create_and_read_round_trip(self, client: AsyncClient):
        response = await _create(client)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Profile saved successfully"
        assert body["profileKey"] == "jane-doe"
        assert body["profile"]["username"] == "jane-doe"

        fetched = await client.get("/jane-doe")

        assert fetched.status_code == 200
        profile = fetched.json()
        assert profile["name"] == "Jane"
        assert profile["jobTitle"] == "Eng"
        assert profile["profileImage"] == ""
        assert profile["headerImage"] == ""
        assert profile["isVerified"] is False
        assert profile["isCompany"] is False
        assert profile["id"] == body["profile"]["id"]

    @pytest.mark.asyncio
    async def test_create_with_images_and_social_links(
        self, client: AsyncClient, image_store: FakeImageStore
    ):
        response = await _create(
            client,
            files={
                "profileImage": _file("avatar.png"),
                "headerImage": _file("header.png"),
            },
            socialLinks=json.dumps({"website": "https://jane.example", "tiktok": "@jane"}),
            isCompany="true",
        )

        assert response.status_code == 201
        profile = response.json()["profile"]
        assert profile["profileImage"] == f"{IMAGE_HOST}/avatar.png"
        assert profile["headerImage"] == f"{IMAGE_HOST}/header.png"
        assert profile["isCompany"] is True
        assert profile["socialLinks"]["website"] == "https://jane.example"
        assert profile["socialLinks"]["tiktok"] == "@jane"
        assert profile["socialLinks"]["youtube"] is None
        assert len(image_store.uploads) == 2

    @pytest.mark.asyncio
    async def test_create_from_json_body(self, client: AsyncClient):
        response = await client.post(
            "/api/save-profile",
            json={
                "username": "Acme Corp",
                "name": "Acme",
                "jobTitle": "Widgets",
                "isCompany": True,
                "socialLinks": {"maps": "https://maps.example/acme"},
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["profileKey"] == "acme-corp"
        assert body["profile"]["socialLinks"]["maps"] == "https://maps.example/acme"

    @pytest.mark.asyncio
    async def test_short_username_rejected_without_uploading(
        self, client: AsyncClient, image_store: FakeImageStore
    ):
        response = await _create(client, files={"profileImage": _file("avatar.png")}, username=" ab ")

        assert response.status_code == 400
        assert response.json()["message"] == "Username must be at least 3 characters long."
        assert image_store.uploads == []

    @pytest.mark.asyncio
    async def test_missing_username_rejected(self, client: AsyncClient):
        response = await client.post("/api/save-profile", data={"name": "Jane", "jobTitle": "Eng"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, client: AsyncClient, image_store: FakeImageStore):
        await _create(client)

        response = await _create(client, files={"profileImage": _file("avatar.png")}, name="Impostor")

        assert response.status_code == 400
        assert response.json()["error_code"] == "USERNAME_TAKEN"
        assert response.json()["message"] == "Username is already taken."
        assert image_store.uploads == []

        original = (await client.get("/jane-doe")).json()
        assert original["name"] == "Jane"

    @pytest.mark.asyncio
    async def test_upload_failure_saves_nothing(self, client: AsyncClient, image_store: FakeImageStore):
        image_store.fail_on.add(b"broken")

        response = await _create(client, files={"headerImage": _file("header.png", b"broken")})

        assert response.status_code == 500
        assert response.json()["error_code"] == "IMAGE_UPLOAD_FAILED"
        assert (await client.get("/jane-doe")).status_code == 404


class TestGetProfile:
    @pytest.mark.asyncio
    async def test_unknown_key_returns_404(self, client: AsyncClient):
        response = await client.get("/nobody-here")

        assert response.status_code == 404
        assert response.json()["message"] == "Profile not found"

    @pytest.mark.asyncio
    async def test_lookup_is_exact(self, client: AsyncClient):
        await _create(client, username="Jane Doe")

        assert (await client.get("/jane-doe")).status_code == 404
        assert (await client.get("/Jane%20Doe")).status_code == 200


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_passed_image_url_is_preserved(self, client: AsyncClient):
        created = await _create(client, files={"profileImage": _file("avatar.png")})
        avatar_url = created.json()["profile"]["profileImage"]

        response = await client.put(
            "/api/update-profile/jane-doe",
            data=_fields(name="Janet", profileImage=avatar_url),
        )

        assert response.status_code == 200
        assert response.json()["profileImage"] == avatar_url
        assert response.json()["name"] == "Janet"

    @pytest.mark.asyncio
    async def test_new_file_replaces_image_url(self, client: AsyncClient):
        created = await _create(client, files={"profileImage": _file("avatar.png")})
        avatar_url = created.json()["profile"]["profileImage"]

        response = await client.put(
            "/api/update-profile/jane-doe",
            data=_fields(profileImage=avatar_url),
            files={"profileImage": _file("avatar-v2.png")},
        )

        assert response.status_code == 200
        assert response.json()["profileImage"] == f"{IMAGE_HOST}/avatar-v2.png"

    @pytest.mark.asyncio
    async def test_omitted_fields_are_cleared(self, client: AsyncClient):
        await _create(
            client,
            phone="555-0100",
            isVerified="true",
            socialLinks=json.dumps({"website": "https://jane.example"}),
        )

        response = await client.put("/api/update-profile/jane-doe", data=_fields())

        assert response.status_code == 200
        profile = response.json()
        assert profile["phone"] is None
        assert profile["isVerified"] is False
        assert profile["socialLinks"]["website"] is None

        stored = (await client.get("/jane-doe")).json()
        assert stored["phone"] is None

    @pytest.mark.asyncio
    async def test_key_matches_ignoring_case(self, client: AsyncClient):
        await _create(client)

        response = await client.put("/api/update-profile/JANE-DOE", data=_fields(jobTitle="CTO"))

        assert response.status_code == 200
        assert response.json()["jobTitle"] == "CTO"

    @pytest.mark.asyncio
    async def test_unknown_key_returns_404(self, client: AsyncClient):
        response = await client.put("/api/update-profile/ghost", data=_fields(username="ghost"))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_social_links_rejected(self, client: AsyncClient):
        await _create(client)

        response = await client.put(
            "/api/update-profile/jane-doe",
            data=_fields(socialLinks="{broken"),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_non_ascii_key_matches_its_own_username(self, client: AsyncClient):
        await _create(client, username="Élodie")

        response = await client.put(
            "/api/update-profile/Élodie",
            data=_fields(username="Élodie", jobTitle="CTO"),
        )

        assert response.status_code == 200
        assert response.json()["jobTitle"] == "CTO"

    @pytest.mark.asyncio
    async def test_long_optional_values_are_accepted(self, client: AsyncClient):
        await _create(client)
        long_url = "https://cdn.example/" + "x" * 2000

        response = await client.put(
            "/api/update-profile/jane-doe",
            data=_fields(phone="5" * 100, headerImage=long_url),
        )

        assert response.status_code == 200
        assert response.json()["phone"] == "5" * 100
        assert response.json()["headerImage"] == long_url

    @pytest.mark.asyncio
    async def test_rename_onto_existing_username_rejected(self, client: AsyncClient):
        await _create(client)
        await _create(client, username="john-doe")

        response = await client.put(
            "/api/update-profile/john-doe",
            data=_fields(username="jane-doe"),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "USERNAME_TAKEN"


class TestDeleteProfile:
    @pytest.mark.asyncio
    async def test_hyphenated_key_matches_spaced_username(self, client: AsyncClient):
        await _create(client, username="John Smith")

        response = await client.delete("/api/profiles/john-smith")

        assert response.status_code == 200
        assert response.json() == {"message": "Profile deleted successfully"}
        assert (await client.get("/John%20Smith")).status_code == 404

    @pytest.mark.asyncio
    async def test_only_first_hyphen_is_translated(self, client: AsyncClient):
        await _create(client, username="john smith jr")

        response = await client.delete("/api/profiles/john-smith-jr")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_first_hyphen_translation_with_remaining_hyphen(self, client: AsyncClient):
        await _create(client, username="john smith-jr")

        response = await client.delete("/api/profiles/john-smith-jr")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_key_returns_404(self, client: AsyncClient):
        response = await client.delete("/api/profiles/nobody")

        assert response.status_code == 404
        assert response.json()["error_code"] == "PROFILE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_non_ascii_key_deletes_matching_username(self, client: AsyncClient):
        await _create(client, username="Élodie Roy")

        response = await client.delete("/api/profiles/Élodie-Roy")

        assert response.status_code == 200


class TestReservedPaths:
    @pytest.mark.asyncio
    async def test_health_route_shadows_profile_named_health(self, client: AsyncClient):
        created = await _create(client, username="health")
        assert created.status_code == 201

        response = await client.get("/health")

        assert response.status_code == 200
        assert "username" not in response.json()
