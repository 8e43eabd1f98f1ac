from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Protocol


class TextSource(Protocol):
    def read_file(self, path: str) -> str: ...

    def exists(self, path: str) -> bool: ...

    def open(self, path: str) -> BinaryIO: ...


class FsReader:
    """Reads kernel text interfaces from the real filesystem.

    ``read_file`` raises ``OSError`` on failure; callers decide the sentinel.
    """

    def read_file(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8", errors="replace").strip()

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def open(self, path: str) -> BinaryIO:
        return open(path, "rb")
