from fastapi.testclient import TestClient

from playground_api.app import create_app
from playground_api.dependencies import (
    get_catalogue_service,
    get_community_service,
    get_jwt_manager,
    get_photo_service,
    get_profile_service,
)
from playground_api.repositories.photo_storage import LocalPhotoStorage
from playground_api.repositories.playground_store import PlaygroundStore
from playground_api.services.catalogue_service import CatalogueService
from playground_api.services.community_service import CommunityService
from playground_api.services.photo_service import PhotoService
from playground_api.services.profile_service import ProfileService


def _build_client(tmp_path, max_photo_bytes: int = 1024) -> TestClient:
    app = create_app()
    store = PlaygroundStore()
    community = CommunityService(store)
    storage = LocalPhotoStorage(str(tmp_path / "photos"), "/media/photos")
    app.dependency_overrides[get_community_service] = lambda: community
    app.dependency_overrides[get_catalogue_service] = lambda: CatalogueService(store, community)
    app.dependency_overrides[get_profile_service] = lambda: ProfileService(store)
    app.dependency_overrides[get_photo_service] = lambda: PhotoService(store, storage, max_bytes=max_photo_bytes)
    return TestClient(app)


def _auth(user_id: str = "user-1", email: str | None = "parent@example.com") -> dict[str, str]:
    token = get_jwt_manager().issue_access_token(user_id, email=email)
    return {"Authorization": f"Bearer {token}"}


def _create_playground(client: TestClient, name: str = "Victoria Park Playground") -> str:
    response = client.post(
        "/v1/playgrounds",
        json={"name": name, "location": "London E9", "lat": 51.5362, "lng": -0.0395, "equipment": ["Swings"]},
        headers=_auth("curator"),
    )
    assert response.status_code == 201
    return response.json()["data"]["id"]


def test_health_endpoint_response_shape() -> None:
    client = TestClient(create_app())
    response = client.get("/healthz")
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["status"] == "ok"


def test_ready_endpoint_response_shape() -> None:
    client = TestClient(create_app())
    response = client.get("/readyz")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "ready"


def test_mutation_without_session_returns_sign_in_redirect(tmp_path) -> None:
    client = _build_client(tmp_path)
    playground_id = _create_playground(client)

    response = client.post(f"/v1/playgrounds/{playground_id}/favorite")
    body = response.json()

    assert response.status_code == 401
    assert body["success"] is False
    assert body["error"]["code"] == "AUTH_REQUIRED"
    assert body["error"]["details"]["redirect_to"] == "/auth/signin"


def test_invalid_token_is_rejected(tmp_path) -> None:
    client = _build_client(tmp_path)

    response = client.get("/v1/me/favorites", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_create_playground_requires_paired_coordinates(tmp_path) -> None:
    client = _build_client(tmp_path)

    response = client.post("/v1/playgrounds", json={"name": "Half Located", "lat": 51.5}, headers=_auth())

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_get_unknown_playground_returns_not_found(tmp_path) -> None:
    client = _build_client(tmp_path)

    response = client.get("/v1/playgrounds/missing")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_toggle_favorite_twice_restores_original_state(tmp_path) -> None:
    client = _build_client(tmp_path)
    playground_id = _create_playground(client)

    first = client.post(f"/v1/playgrounds/{playground_id}/favorite", headers=_auth())
    listed = client.get("/v1/me/favorites", headers=_auth())
    second = client.post(f"/v1/playgrounds/{playground_id}/favorite", headers=_auth())
    after = client.get("/v1/me/favorites", headers=_auth())

    assert first.json()["data"]["is_favorite"] is True
    assert [item["playground_id"] for item in listed.json()["data"]] == [playground_id]
    assert listed.json()["data"][0]["playground"]["name"] == "Victoria Park Playground"
    assert second.json()["data"]["is_favorite"] is False
    assert after.json()["data"] == []


def test_favorite_unknown_playground_returns_not_found(tmp_path) -> None:
    client = _build_client(tmp_path)

    response = client.post("/v1/playgrounds/missing/favorite", headers=_auth())

    assert response.status_code == 404


def test_ratings_aggregate_across_users(tmp_path) -> None:
    client = _build_client(tmp_path)
    playground_id = _create_playground(client)

    for user_id, score in (("user-1", 5), ("user-2", 3), ("user-3", 4)):
        response = client.put(
            f"/v1/playgrounds/{playground_id}/ratings",
            json={"ratings": {"Safety": score}},
            headers=_auth(user_id),
        )
        assert response.status_code == 200

    body = client.get(f"/v1/playgrounds/{playground_id}/ratings").json()["data"]

    assert body["category_averages"]["Safety"] == 4.0
    assert body["category_averages"]["Cleanliness"] == 0.0
    assert body["overall_average"] == 4.0
    assert body["total_ratings"] == 3


def test_resubmitting_rating_replaces_previous_score(tmp_path) -> None:
    client = _build_client(tmp_path)
    playground_id = _create_playground(client)

    client.put(f"/v1/playgrounds/{playground_id}/ratings", json={"ratings": {"Safety": 1}}, headers=_auth())
    response = client.put(
        f"/v1/playgrounds/{playground_id}/ratings",
        json={"ratings": {"Safety": 5}},
        headers=_auth(),
    )

    body = response.json()["data"]
    assert body["category_averages"]["Safety"] == 5.0
    assert body["total_ratings"] == 1


def test_unrated_playground_reports_zero_ratings(tmp_path) -> None:
    client = _build_client(tmp_path)
    playground_id = _create_playground(client)

    body = client.get(f"/v1/playgrounds/{playground_id}").json()["data"]

    assert body["ratings"]["overall_average"] == 0.0
    assert body["ratings"]["total_ratings"] == 0
    assert body["is_favorite"] is False


def test_rating_out_of_range_is_rejected(tmp_path) -> None:
    client = _build_client(tmp_path)
    playground_id = _create_playground(client)

    response = client.put(
        f"/v1/playgrounds/{playground_id}/ratings",
        json={"ratings": {"Safety": 6}},
        headers=_auth(),
    )
    unknown = client.put(
        f"/v1/playgrounds/{playground_id}/ratings",
        json={"ratings": {"Vibes": 4}},
        headers=_auth(),
    )

    assert response.status_code == 422
    assert unknown.status_code == 422


def test_top_rated_orders_by_average_and_reports_has_more(tmp_path) -> None:
    client = _build_client(tmp_path)
    low = _create_playground(client, "Low Park")
    high = _create_playground(client, "High Park")
    client.put(f"/v1/playgrounds/{low}/ratings", json={"ratings": {"Safety": 2}}, headers=_auth())
    client.put(f"/v1/playgrounds/{high}/ratings", json={"ratings": {"Safety": 5}}, headers=_auth())

    response = client.get("/v1/playgrounds/top?limit=1")
    body = response.json()

    assert response.status_code == 200
    assert [item["playground"]["name"] for item in body["data"]] == ["High Park"]
    assert body["data"][0]["average_rating"] == 5.0
    assert body["meta"]["has_more"] is True


def test_photo_upload_list_and_owner_only_delete(tmp_path) -> None:
    client = _build_client(tmp_path)
    playground_id = _create_playground(client)

    uploaded = client.post(
        f"/v1/playgrounds/{playground_id}/photos",
        content=b"\x89PNG fake image",
        headers={**_auth("owner"), "Content-Type": "image/png"},
    )
    photo = uploaded.json()["data"]
    own_list = client.get(f"/v1/playgrounds/{playground_id}/photos", headers=_auth("owner"))
    other_list = client.get(f"/v1/playgrounds/{playground_id}/photos", headers=_auth("stranger"))
    stranger_delete = client.delete(f"/v1/photos/{photo['id']}", headers=_auth("stranger"))
    owner_delete = client.delete(f"/v1/photos/{photo['id']}", headers=_auth("owner"))

    assert uploaded.status_code == 201
    assert photo["public_url"].startswith(f"/media/photos/owner/{playground_id}/")
    assert photo["public_url"].endswith(".png")
    assert [item["id"] for item in own_list.json()["data"]] == [photo["id"]]
    assert other_list.json()["data"] == []
    assert stranger_delete.status_code == 404
    assert owner_delete.status_code == 200
    assert not (tmp_path / "photos" / photo["storage_key"]).exists()


def test_photo_upload_rejects_wrong_type_and_oversized_body(tmp_path) -> None:
    client = _build_client(tmp_path, max_photo_bytes=8)
    playground_id = _create_playground(client)

    wrong_type = client.post(
        f"/v1/playgrounds/{playground_id}/photos",
        content=b"GIF89a",
        headers={**_auth(), "Content-Type": "image/gif"},
    )
    too_large = client.post(
        f"/v1/playgrounds/{playground_id}/photos",
        content=b"0123456789",
        headers={**_auth(), "Content-Type": "image/jpeg"},
    )

    assert wrong_type.status_code == 422
    assert too_large.status_code == 413
    assert too_large.json()["error"]["code"] == "PAYLOAD_TOO_LARGE"



class _RecordingPhotoService(PhotoService):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.uploads: list[bytes] = []

    async def upload_photo(self, session, playground_id, content, content_type):
        self.uploads.append(content)
        return await super().upload_photo(session, playground_id, content, content_type)


def test_oversized_upload_is_rejected_before_the_body_reaches_the_service(tmp_path) -> None:
    client = _build_client(tmp_path)
    playground_id = _create_playground(client)
    storage = LocalPhotoStorage(str(tmp_path / "photos"), "/media/photos")
    service = _RecordingPhotoService(PlaygroundStore(), storage, max_bytes=8)
    client.app.dependency_overrides[get_photo_service] = lambda: service
    url = f"/v1/playgrounds/{playground_id}/photos"
    headers = {**_auth(), "Content-Type": "image/jpeg"}

    declared = client.post(url, content=b"x" * 64, headers=headers)
    chunked = client.post(url, content=iter([b"x" * 6, b"x" * 6]), headers=headers)
    anonymous = client.post(url, content=b"x" * 64, headers={"Content-Type": "image/jpeg"})

    assert declared.status_code == 413
    assert declared.json()["error"]["code"] == "PAYLOAD_TOO_LARGE"
    assert chunked.status_code == 413
    assert anonymous.status_code == 401
    assert service.uploads == []


def test_profile_upsert_defaults_name_to_email_local_part(tmp_path) -> None:
    client = _build_client(tmp_path)

    created = client.put("/v1/me/profile", json={}, headers=_auth("user-9", "sam.jones@example.com"))
    renamed = client.put(
        "/v1/me/profile",
        json={"name": "Sam", "avatar_url": "https://img.example.com/sam.png"},
        headers=_auth("user-9", "sam.jones@example.com"),
    )

    assert created.json()["data"]["name"] == "sam.jones"
    assert renamed.json()["data"]["name"] == "Sam"
    assert renamed.json()["data"]["avatar_url"] == "https://img.example.com/sam.png"


def test_request_validation_error_uses_envelope(tmp_path) -> None:
    client = _build_client(tmp_path)

    response = client.put("/v1/me/profile", json={"name": "x" * 500}, headers=_auth())

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
