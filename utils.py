"""Utility helpers shared across server modules."""

import mimetypes
import os
from pathlib import Path
from urllib.parse import unquote

from config import DEFAULT_CONTENT_TYPE


def get_content_type(file_path: Path) -> str:
    content_type, _encoding = mimetypes.guess_type(file_path.name)
    return content_type or DEFAULT_CONTENT_TYPE


def join_under_root(root: Path, request_path: str) -> Path | None:
    """Join a request path to ``root`` or return None for traversal attempts.

    The path is percent-decoded, stripped of one leading slash and normalized
    lexically before the containment check, so ``..`` segments and their
    encoded forms cannot climb above the root.
    """
    decoded_path = unquote(request_path)
    if "\x00" in decoded_path:
        return None

    relative_path = decoded_path.removeprefix("/")
    candidate = Path(os.path.normpath(root / relative_path))

    if candidate != root and root not in candidate.parents:
        return None
    return candidate
