"""Unit tests for static file resolution and response mapping."""

from pathlib import Path

import pytest

from handlers.static_files import (
    Forbidden,
    NotFound,
    Ok,
    build_response,
    resolve_static_file,
    serve_static,
)
from request import HTTPRequest


def _build_request(path: str, method: str = "GET") -> HTTPRequest:
    return HTTPRequest(
        method=method,
        path=path,
        http_version="HTTP/1.1",
        headers={"host": "localhost"},
    )


def test_existing_file_resolves_with_length_and_type(site_root: Path) -> None:
    resolution = resolve_static_file(site_root, "/a/b.txt")

    assert resolution == Ok(
        file_path=site_root / "a" / "b.txt",
        content_type="text/plain",
        byte_length=5,
    )


@pytest.mark.parametrize(
    "request_path",
    [
        "/../secret.txt",
        "/a/../../secret.txt",
        "/../../etc/passwd",
        "/%2e%2e/secret.txt",
        "/a/%2E%2E/%2e%2e/secret.txt",
        "/..%2fsecret.txt",
        "//etc/passwd",
        "/../www2/secret.txt",
        "/a/b.txt%00.html",
    ],
)
def test_paths_escaping_root_are_forbidden(site_root: Path, request_path: str) -> None:
    assert isinstance(resolve_static_file(site_root, request_path), Forbidden)


def test_dot_segments_that_stay_inside_root_are_allowed(site_root: Path) -> None:
    resolution = resolve_static_file(site_root, "/docs/../a/./b.txt")

    assert isinstance(resolution, Ok)
    assert resolution.file_path == site_root / "a" / "b.txt"


def test_encoded_dot_segments_inside_root_are_allowed(site_root: Path) -> None:
    resolution = resolve_static_file(site_root, "/docs/%2e%2e/a//b.txt")

    assert isinstance(resolution, Ok)
    assert resolution.byte_length == 5


def test_root_request_serves_root_index(site_root: Path) -> None:
    for request_path in ("/", ""):
        resolution = resolve_static_file(site_root, request_path)

        assert isinstance(resolution, Ok)
        assert resolution.file_path == site_root / "index.html"
        assert resolution.content_type == "text/html"


def test_directory_with_index_matches_direct_index_request(site_root: Path) -> None:
    via_directory = resolve_static_file(site_root, "/docs/")
    direct = resolve_static_file(site_root, "/docs/index.html")

    assert via_directory == direct
    assert resolve_static_file(site_root, "/docs") == direct


def test_directory_without_index_is_not_found(site_root: Path) -> None:
    assert isinstance(resolve_static_file(site_root, "/a/"), NotFound)


@pytest.mark.parametrize(
    "request_path",
    [
        "/a/missing.txt",
        "/" + "x" * 300,
        "/a/" + "y" * 300 + "/index.html",
        "/a/b.txt/child",
    ],
)
def test_missing_file_is_not_found(site_root: Path, request_path: str) -> None:
    assert isinstance(resolve_static_file(site_root, request_path), NotFound)


def test_index_html_directory_is_not_found(site_root: Path) -> None:
    (site_root / "a" / "index.html").mkdir()

    assert isinstance(resolve_static_file(site_root, "/a/"), NotFound)


def test_unknown_extension_falls_back_to_octet_stream(site_root: Path) -> None:
    resolution = resolve_static_file(site_root, "/notes.unknownext")

    assert isinstance(resolution, Ok)
    assert resolution.content_type == "application/octet-stream"


def test_forbidden_response_has_empty_body() -> None:
    response = build_response(Forbidden("/../x"))

    assert response.status_code == 403
    assert response.body == b""
    assert b"Content-Length: 0\r\n" in response.to_bytes()


def test_not_found_response_has_plain_text_body() -> None:
    response = build_response(NotFound("/missing"))

    assert response.status_code == 404
    assert response.headers["Content-Type"].startswith("text/plain")
    assert response.body == b"404 (Not Found)\n"


def test_serve_static_returns_file_response(site_root: Path) -> None:
    response = serve_static(_build_request("/a/b.txt"), site_root)

    assert response.status_code == 200
    assert response.headers["Content-Type"] == "text/plain"
    assert response.file_path == site_root / "a" / "b.txt"
    assert response.content_length == 5
    assert response.to_bytes().endswith(b"\r\n\r\nhello")


def test_serve_static_treats_any_method_as_read(site_root: Path) -> None:
    response = serve_static(_build_request("/a/b.txt", method="POST"), site_root)

    assert response.status_code == 200
    assert response.to_bytes().endswith(b"hello")


def test_serve_static_head_omits_body(site_root: Path) -> None:
    response = serve_static(_build_request("/a/b.txt", method="HEAD"), site_root)

    raw = response.to_bytes()
    assert raw.startswith(b"HTTP/1.1 200 OK\r\n")
    assert b"Content-Length: 5\r\n" in raw
    assert raw.endswith(b"\r\n\r\n")
