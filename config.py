"""Configuration constants and startup configuration for the file server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

HOST: str = "0.0.0.0"
PORT: int = 8000
WORKER_COUNT: int = 4
REQUEST_QUEUE_SIZE: int = 64
LISTEN_BACKLOG: int = 128
ACCEPT_TIMEOUT_SECS: float = 0.2
SOCKET_TIMEOUT_SECS: int = 5
BUFFER_SIZE: int = 1024
READ_CHUNK_SIZE: int = 4096
WRITE_CHUNK_SIZE: int = 8192
MAX_HEADER_BYTES: int = 16_384
MAX_BODY_BYTES: int = 524_288
MAX_TARGET_LENGTH: int = 8192
SERVER_NAME: str = "simple-file-server/1.0"
DEFAULT_DOCUMENT: str = "index.html"
DEFAULT_CONTENT_TYPE: str = "application/octet-stream"
NOT_FOUND_BODY: str = "404 (Not Found)\n"
LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def normalize_root(root: str | os.PathLike[str]) -> Path:
    """Return ``root`` as an absolute, lexically normalized path."""
    return Path(os.path.abspath(os.fspath(root)))


@dataclass(frozen=True, slots=True)
class ServerConfig:
    port: int = PORT
    root: Path = field(default_factory=lambda: normalize_root(os.curdir))
    host: str = HOST
    worker_count: int = WORKER_COUNT
    request_queue_size: int = REQUEST_QUEUE_SIZE

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")
        object.__setattr__(self, "root", normalize_root(self.root))
