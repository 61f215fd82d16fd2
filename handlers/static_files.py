"""Static file handler: maps request paths beneath a root to files on disk."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from config import DEFAULT_DOCUMENT, NOT_FOUND_BODY
from request import HTTPRequest
from response import HTTPResponse
from utils import get_content_type, join_under_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Forbidden:
    request_path: str


@dataclass(frozen=True, slots=True)
class NotFound:
    request_path: str


@dataclass(frozen=True, slots=True)
class Ok:
    file_path: Path
    content_type: str
    byte_length: int


Resolution = Forbidden | NotFound | Ok


def resolve_static_file(root: Path, request_path: str) -> Resolution:
    """Resolve ``request_path`` against ``root``.

    Directories are served through their ``index.html``. Anything that
    normalizes to a location outside ``root`` is Forbidden, whether or not
    it exists.
    """
    candidate = join_under_root(root, request_path)
    if candidate is None:
        return Forbidden(request_path)

    # ENAMETOOLONG, EACCES and friends mean the same as a missing file here
    try:
        if candidate.is_dir():
            candidate = candidate / DEFAULT_DOCUMENT

        if not candidate.exists() or candidate.is_dir():
            return NotFound(request_path)

        byte_length = candidate.stat().st_size
    except OSError:
        return NotFound(request_path)

    return Ok(
        file_path=candidate,
        content_type=get_content_type(candidate),
        byte_length=byte_length,
    )


def build_response(resolution: Resolution) -> HTTPResponse:
    if isinstance(resolution, Forbidden):
        return HTTPResponse(status_code=403)

    if isinstance(resolution, NotFound):
        return HTTPResponse(
            status_code=404,
            headers={"Content-Type": "text/plain; charset=utf-8"},
            body=NOT_FOUND_BODY,
        )

    return HTTPResponse(
        status_code=200,
        headers={"Content-Type": resolution.content_type},
        file_path=resolution.file_path,
        content_length=resolution.byte_length,
    )


def serve_static(request: HTTPRequest, root: Path) -> HTTPResponse:
    resolution = resolve_static_file(root, request.path)
    if isinstance(resolution, Forbidden):
        logger.debug("Rejected path outside root: %r", request.path)

    response = build_response(resolution)
    # every method reads the path; HEAD alone omits the body
    response.head_only = request.method == "HEAD"
    return response
