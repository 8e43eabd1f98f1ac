from __future__ import annotations

import io

import pytest

from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.runner import CommandError


class FakeReader:
    """In-memory TextSource keyed by path; unknown paths raise FileNotFoundError."""

    def __init__(self, files: dict[str, str | Exception] | None = None) -> None:
        self.files: dict[str, str | Exception] = dict(files or {})
        self.reads: list[str] = []

    def read_file(self, path: str) -> str:
        self.reads.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        value = self.files[path]
        if isinstance(value, Exception):
            raise value
        return value.strip()

    def exists(self, path: str) -> bool:
        return path in self.files

    def open(self, path: str):
        return io.BytesIO(self.read_file(path).encode())


class FakeRunner:
    """ProcessRunner answering from a table of ``(name, *args)`` tuples."""

    def __init__(self, outputs: dict[tuple[str, ...], str | Exception] | None = None) -> None:
        self.outputs = dict(outputs or {})
        self.calls: list[tuple[str, ...]] = []

    def run(self, name: str, *args: str) -> str:
        command = (name, *args)
        self.calls.append(command)
        value = self.outputs.get(command)
        if value is None:
            raise CommandError(f"{name}: not found")
        if isinstance(value, Exception):
            raise value
        return value.strip()


@pytest.fixture
def paths() -> ProcfsPaths:
    return ProcfsPaths()


@pytest.fixture
def reader() -> FakeReader:
    return FakeReader()


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_reader():
    return FakeReader


@pytest.fixture
def make_runner():
    return FakeRunner
