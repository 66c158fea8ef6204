"""HTTP adapter tests covering routing, tokens, and upload scenarios."""

from __future__ import annotations

import base64
import hashlib
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from packages.upload_core.main import build_app
from packages.upload_shared.config import UploadServerSettings
from resources.substrates.filesystem import FilesystemSubstrateSettings


def _settings(root: Path, **overrides: Any) -> UploadServerSettings:
    values: dict[str, Any] = {
        "root_dir": str(root),
        "filesystem": FilesystemSubstrateSettings(fsync_writes=False),
    }
    values.update(overrides)
    return UploadServerSettings(**values)


def _client(root: Path, **overrides: Any) -> TestClient:
    return TestClient(build_app(_settings(root, **overrides)))


def _digest(algorithm: str, data: bytes) -> str:
    hasher = hashlib.sha256 if algorithm == "sha-256" else hashlib.md5
    return f"{algorithm}={base64.b64encode(hasher(data).digest()).decode('ascii')}"


def test_put_then_get_round_trip(tmp_path: Path) -> None:
    """A verified upload should be served back by GET."""
    client = _client(tmp_path)

    put = client.put(
        "/a/b/c.txt",
        content=b"hello",
        headers={"Digest": _digest("sha-256", b"hello")},
    )
    get = client.get("/a/b/c.txt")

    assert put.status_code == 204
    assert put.content == b""
    assert get.status_code == 200
    assert get.content == b"hello"


def test_digest_mismatch_creates_nothing(tmp_path: Path) -> None:
    """A wrong digest should yield 400 and leave no file or directories."""
    client = _client(tmp_path)

    put = client.put(
        "/a/b/c.txt",
        content=b"hello",
        headers={"Digest": _digest("md5", b"goodbye")},
    )
    get = client.get("/a/b/c.txt")

    assert put.status_code == 400
    assert put.text == "Invalid digest. Supported algorithms: sha-256, md5"
    assert get.status_code == 404
    assert list(tmp_path.iterdir()) == []


def test_delete_prunes_empty_directories(tmp_path: Path) -> None:
    """Deleting the only object should remove its now-empty parents."""
    client = _client(tmp_path)
    client.put("/a/b/c.txt", content=b"hello")

    delete = client.delete("/a/b/c.txt")
    get = client.get("/a/b/c.txt")

    assert delete.status_code == 204
    assert get.status_code == 404
    assert list(tmp_path.iterdir()) == []


def test_delete_never_created_path_is_not_found(tmp_path: Path) -> None:
    """Deleting a path that was never uploaded should yield 404."""
    response = _client(tmp_path).delete("/never/created.txt")

    assert response.status_code == 404
    assert response.text == "File not found"


def test_malformed_digest_value_is_reported(tmp_path: Path) -> None:
    """Bad base64 for a known algorithm should name the parse failure."""
    response = _client(tmp_path).put(
        "/f.txt",
        content=b"hello",
        headers={"Digest": "sha-256=%%%"},
    )

    assert response.status_code == 400
    assert response.text.startswith("Digest could not be parsed")
    assert "illegal base64 data" in response.text
    assert not (tmp_path / "f.txt").exists()


def test_force_digest_rejects_undeclared_upload(tmp_path: Path) -> None:
    """Mandatory digest mode should reject uploads without a Digest header."""
    response = _client(tmp_path, force_digest=True).put("/f.txt", content=b"x")

    assert response.status_code == 400
    assert response.text == "Missing digest. Supported algorithms: sha-256, md5"


def test_multipart_upload_uses_file_field(tmp_path: Path) -> None:
    """Multipart requests should store the bytes of the ``file`` field."""
    client = _client(tmp_path)

    response = client.put(
        "/docs/report.txt",
        files={"file": ("report.txt", b"multipart body", "text/plain")},
    )

    assert response.status_code == 204
    assert (tmp_path / "docs" / "report.txt").read_bytes() == b"multipart body"


def test_multipart_upload_without_file_field_is_rejected(tmp_path: Path) -> None:
    """Multipart requests lacking the ``file`` field should yield 400."""
    response = _client(tmp_path).put(
        "/f.txt",
        files={"other": ("f.txt", b"data", "text/plain")},
    )

    assert response.status_code == 400
    assert "'file'" in response.text
    assert list(tmp_path.iterdir()) == []


def test_cors_header_on_every_response(tmp_path: Path) -> None:
    """All responses, including errors, should allow any origin."""
    client = _client(tmp_path, token_delete="secret")

    responses = [
        client.put("/f.txt", content=b"x"),
        client.get("/f.txt"),
        client.get("/missing.txt"),
        client.delete("/f.txt"),
        client.request("PATCH", "/f.txt"),
    ]

    for response in responses:
        assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_options_lists_allowed_methods(tmp_path: Path) -> None:
    """OPTIONS on an object path should advertise the supported methods."""
    response = _client(tmp_path).options("/anything.txt")

    assert response.status_code == 200
    assert response.headers["Allow"] == "OPTIONS, GET, PUT, DELETE"


def test_unknown_method_is_not_allowed(tmp_path: Path) -> None:
    """Methods outside the supported set should yield 405."""
    response = _client(tmp_path).request("PATCH", "/f.txt")

    assert response.status_code == 405
    assert "PUT" in response.headers["Allow"]


@pytest.mark.parametrize("method", ["PUT", "DELETE", "OPTIONS"])
def test_base_path_only_allows_get(tmp_path: Path, method: str) -> None:
    """The base path itself should reject everything except GET."""
    response = _client(tmp_path).request(method, "/")

    assert response.status_code == 405
    assert response.headers["Allow"] == "GET"


def test_custom_base_path_prefixes_object_routes(tmp_path: Path) -> None:
    """Objects should be addressed below the configured base path."""
    client = _client(tmp_path, url_base_path="files")

    put = client.put("/files/x.txt", content=b"based")
    get = client.get("/files/x.txt")
    outside = client.put("/x.txt", content=b"nope")
    root_put = client.put("/files/", content=b"nope")

    assert put.status_code == 204
    assert get.content == b"based"
    assert (tmp_path / "x.txt").read_bytes() == b"based"
    assert outside.status_code in (404, 405)
    assert root_put.status_code == 405


def test_get_hides_staging_files(tmp_path: Path) -> None:
    """In-flight staging files should never be served."""
    (tmp_path / ".upload-abc123.tmp").write_bytes(b"partial")
    client = _client(tmp_path)

    assert client.get("/.upload-abc123.tmp").status_code == 404


def test_get_directory_is_not_listed(tmp_path: Path) -> None:
    """Directories should not be listed or served."""
    (tmp_path / "dir").mkdir()
    (tmp_path / "dir" / "f.txt").write_text("x", encoding="utf-8")
    client = _client(tmp_path)

    assert client.get("/dir").status_code == 404
    assert client.get("/").status_code == 404


def test_put_with_token_in_query(tmp_path: Path) -> None:
    """A matching ``token`` query parameter should authorize the method."""
    client = _client(tmp_path, token_put="put-secret")

    allowed = client.put("/f.txt?token=put-secret", content=b"x")
    denied = client.put("/g.txt?token=nope", content=b"x")

    assert allowed.status_code == 204
    assert denied.status_code == 401
    assert denied.text == "Wrong token"
    assert not (tmp_path / "g.txt").exists()


def test_token_header_requires_prefix(tmp_path: Path) -> None:
    """Header tokens should be accepted only with the configured prefix."""
    client = _client(tmp_path, token_get="get-secret")
    (tmp_path / "f.txt").write_bytes(b"data")

    ok = client.get("/f.txt", headers={"Authorization": "Bearer get-secret"})
    wrong_prefix = client.get("/f.txt", headers={"Authorization": "Token get-secret"})
    missing = client.get("/f.txt")

    assert ok.status_code == 200
    assert ok.content == b"data"
    assert wrong_prefix.status_code == 401
    assert wrong_prefix.text == "Wrong header prefix"
    assert missing.status_code == 401
    assert missing.text == "Missing token"


def test_custom_auth_header_and_prefix(tmp_path: Path) -> None:
    """Header name and prefix should follow configuration."""
    client = _client(
        tmp_path,
        token_delete="del",
        auth_header="X-Upload-Token",
        auth_header_prefix="",
    )
    client.put("/f.txt", content=b"x")

    response = client.delete("/f.txt", headers={"X-Upload-Token": "del"})

    assert response.status_code == 204


def test_tokens_are_scoped_per_method(tmp_path: Path) -> None:
    """A token for one method should not guard the others."""
    client = _client(tmp_path, token_delete="del")

    put = client.put("/f.txt", content=b"x")
    get = client.get("/f.txt")
    delete = client.delete("/f.txt")

    assert put.status_code == 204
    assert get.status_code == 200
    assert delete.status_code == 401


def test_staging_names_are_rejected_for_writes(tmp_path: Path) -> None:
    """Clients cannot upload to or delete a staging file name."""
    client = _client(tmp_path)

    assert client.put("/.upload-x.tmp", content=b"x").status_code == 400
    assert client.delete("/.upload-x.tmp").status_code == 400
