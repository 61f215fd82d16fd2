"""Shared fixtures: a small document root laid out like a static site."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Root containing ``a/b.txt``, ``docs/index.html`` and a sibling dir."""
    root = tmp_path / "www"
    (root / "a").mkdir(parents=True)
    (root / "a" / "b.txt").write_bytes(b"hello")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(b"<h1>docs</h1>")
    (root / "index.html").write_bytes(b"<h1>home</h1>")
    (root / "data.bin").write_bytes(bytes(range(256)) * 4)
    (root / "notes.unknownext").write_bytes(b"plain")

    sibling = tmp_path / "www2"
    sibling.mkdir()
    (sibling / "secret.txt").write_bytes(b"outside")
    (tmp_path / "secret.txt").write_bytes(b"outside")
    return root
