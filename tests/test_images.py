"""
Image blob store: upload, serve and attach.
"""

import base64

import pytest

from core.errors import ValidationFailed
from services.image_service import decode_image_payload, split_data_url

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(64))


def upload(client, principal, data=None, mime_type="image/png"):
    payload = data if data is not None else base64.b64encode(PNG_BYTES).decode()
    return client.post(
        "/api/images",
        json={"data": payload, "mimeType": mime_type, "filename": "logo.png", "width": 8, "height": 8},
        headers=principal.headers,
    )


class TestImageDecoding:
    def test_data_url_prefix_is_stripped(self):
        mime, body = split_data_url("data:image/jpeg;base64,QUJD", "image/png")
        assert mime == "image/jpeg"
        assert body == "QUJD"

    def test_plain_base64_keeps_declared_mime(self):
        assert split_data_url("QUJD", "image/png") == ("image/png", "QUJD")

    def test_invalid_base64(self):
        with pytest.raises(ValidationFailed):
            decode_image_payload("not base64 at all!")


class TestImageRoutes:
    """Round trip through the HTTP surface."""

    def test_upload_and_serve(self, client, admin):
        response = upload(client, admin)
        assert response.status_code == 201
        body = response.json()
        assert body["size"] == len(PNG_BYTES)
        assert body["url"] == f"/api/images/{body['id']}"

        served = client.get(body["url"])
        assert served.status_code == 200
        assert served.content == PNG_BYTES
        assert served.headers["content-type"] == "image/png"
        assert served.headers["content-length"] == str(len(PNG_BYTES))
        assert served.headers["cache-control"] == "public, max-age=31536000, immutable"

    def test_upload_with_data_url(self, client, admin):
        data_url = "data:image/gif;base64," + base64.b64encode(b"GIF89a").decode()
        body = upload(client, admin, data=data_url).json()
        served = client.get(body["url"])
        assert served.headers["content-type"] == "image/gif"
        assert served.content == b"GIF89a"

    def test_unknown_image_is_404(self, client):
        response = client.get("/api/images/doesnotexist")
        assert response.status_code == 404
        assert response.json() == {"message": "Image not found"}

    def test_upload_requires_session(self, client):
        response = client.post("/api/images", json={"data": "QUJD", "mimeType": "image/png"})
        assert response.status_code == 401

    def test_bad_payload_rejected(self, client, admin):
        response = upload(client, admin, data="%%%")
        assert response.status_code == 400
        assert "data" in response.json()["errors"]

    def test_non_image_mime_rejected(self, client, admin):
        assert upload(client, admin, mime_type="application/pdf").status_code == 400


class TestImageAttach:
    """Only the owner may attach to a profile or an organized event."""

    def test_attach_to_own_profile(self, client, admin):
        image_id = upload(client, admin).json()["id"]
        response = client.patch(
            "/api/images/attach",
            json={"imageId": image_id, "targetType": "user", "userId": admin.user_id},
            headers=admin.headers,
        )
        assert response.status_code == 200
        assert response.json()["imageUrl"] == f"/api/images/{image_id}"
        me = client.get("/api/auth/me", headers=admin.headers).json()
        assert me["profileImageId"] == image_id

    def test_attach_to_other_profile_forbidden(self, client, admin, other_admin):
        image_id = upload(client, admin).json()["id"]
        response = client.patch(
            "/api/images/attach",
            json={"imageId": image_id, "targetType": "user", "userId": other_admin.user_id},
            headers=admin.headers,
        )
        assert response.status_code == 403

    def test_attach_to_foreign_event_forbidden(self, client, admin, other_admin):
        event = client.post(
            "/api/events", json={"title": "Theirs", "date": "2030-01-01T10:00:00Z"}, headers=other_admin.headers
        ).json()
        image_id = upload(client, admin).json()["id"]
        response = client.patch(
            "/api/images/attach",
            json={"imageId": image_id, "targetType": "event", "eventId": event["id"]},
            headers=admin.headers,
        )
        assert response.status_code == 403

    def test_attach_to_own_event(self, client, admin):
        event = client.post(
            "/api/events", json={"title": "Mine", "date": "2030-01-01T10:00:00Z"}, headers=admin.headers
        ).json()
        image_id = upload(client, admin).json()["id"]
        response = client.patch(
            "/api/images/attach",
            json={"imageId": image_id, "targetType": "event", "eventId": event["id"]},
            headers=admin.headers,
        )
        assert response.status_code == 200
        detail = client.get(f"/api/events/{event['id']}", headers=admin.headers).json()
        assert detail["image"] == f"/api/images/{image_id}"

    def test_unknown_image(self, client, admin):
        response = client.patch(
            "/api/images/attach",
            json={"imageId": "missing", "targetType": "user", "userId": admin.user_id},
            headers=admin.headers,
        )
        assert response.status_code == 404

    def test_invalid_target_type(self, client, admin):
        image_id = upload(client, admin).json()["id"]
        response = client.patch(
            "/api/images/attach",
            json={"imageId": image_id, "targetType": "organization"},
            headers=admin.headers,
        )
        assert response.status_code == 400
        assert "targetType" in response.json()["errors"]

    def test_attach_without_user_id_targets_caller(self, client, admin):
        image_id = upload(client, admin).json()["id"]
        response = client.patch(
            "/api/images/attach",
            json={"imageId": image_id, "targetType": "user"},
            headers=admin.headers,
        )
        assert response.status_code == 200
        me = client.get("/api/auth/me", headers=admin.headers).json()
        assert me["profileImageId"] == image_id
