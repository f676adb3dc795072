import io

from PIL import Image

essentials = {}


def _upload(client, auth_header, data, name="sample.png", mime="image/png"):
    files = {"image": (name, data, mime)}
    return client.post("/api/upload", headers=auth_header, files=files)


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_auth_me(client, auth_header):
    r = client.get("/api/auth/me", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["user_id"].startswith("fake-")

    r2 = client.get("/api/auth/me", headers={"X-API-Key": "legacy"})
    assert r2.status_code == 200

    r3 = client.get("/api/auth/me", params={"apiKey": "legacy"})
    assert r3.status_code == 200
    assert r3.json()["user_id"].startswith("fake-")

    assert client.get("/api/auth/me", params={"apiKey": ""}).status_code == 401


def test_management_requires_auth(client, make_image):
    assert client.get("/api/images").status_code == 401
    assert _upload(client, {}, make_image()).status_code == 401
    assert client.delete("/api/images/whatever").status_code == 401


def test_upload_and_list(client, auth_header, make_image):
    png = make_image(2000, 1000)
    essentials["png"] = png
    r = _upload(client, auth_header, png)
    assert r.status_code == 201, r.text
    data = r.json()["image"]
    assert (data["width"], data["height"]) == (2000, 1000)
    assert data["url"] == f"/images/{data['id']}"
    assert data["thumbnail"] == f"/images/{data['id']}/200/200"
    essentials["image_id"] = data["id"]

    r2 = client.get("/api/images", headers=auth_header)
    assert r2.status_code == 200
    body = r2.json()
    assert body["count"] == len(body["images"])
    assert any(img["id"] == essentials["image_id"] for img in body["images"])

    r3 = client.get(f"/api/images/{essentials['image_id']}", headers=auth_header)
    assert r3.status_code == 200
    assert r3.json()["format"] == "png"


def test_original_roundtrip(client):
    r = client.get(f"/images/{essentials['image_id']}")
    assert r.status_code == 200
    assert r.content == essentials["png"]
    assert r.headers["content-type"] == "image/png"
    assert r.headers["cache-control"] == "public, max-age=31536000"


def test_variant_is_fitted_and_cached(client):
    r = client.get(f"/images/{essentials['image_id']}/100/100")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/webp"
    assert r.headers["cache-control"] == "public, max-age=31536000"
    with Image.open(io.BytesIO(r.content)) as img:
        assert img.size == (100, 50)

    again = client.get(f"/images/{essentials['image_id']}/100/100")
    assert again.content == r.content


def test_invalid_dimensions(client):
    for path in ("6000/6000", "0/10", "abc/10", "10/-5"):
        r = client.get(f"/images/{essentials['image_id']}/{path}")
        assert r.status_code == 400, path
        assert "Invalid dimensions" in r.json()["detail"]


def test_unknown_image_is_404(client, auth_header):
    assert client.get("/images/doesnotexist").status_code == 404
    assert client.get("/images/doesnotexist/10/10").status_code == 404
    assert client.get("/api/images/doesnotexist", headers=auth_header).status_code == 404
    assert client.delete("/api/images/doesnotexist", headers=auth_header).status_code == 404


def test_rejected_uploads(client, auth_header, make_image):
    r = _upload(client, auth_header, make_image(), name="a.bmp", mime="image/bmp")
    assert r.status_code == 400
    assert "Invalid file type" in r.json()["detail"]

    r2 = _upload(client, auth_header, b"not an image at all", name="fake.jpg", mime="image/jpeg")
    assert r2.status_code == 500
    assert r2.json() == {"detail": "Image could not be decoded"}


def test_delete_then_gone(client, auth_header):
    image_id = essentials["image_id"]
    r = client.delete(f"/api/images/{image_id}", headers=auth_header)
    assert r.status_code == 200
    assert r.json() == {"ok": True, "message": "Image deleted", "undeleted_files": 0}

    assert client.get(f"/images/{image_id}").status_code == 404
    assert client.get(f"/images/{image_id}/100/100").status_code == 404
    ids = [img["id"] for img in client.get("/api/images", headers=auth_header).json()["images"]]
    assert image_id not in ids
