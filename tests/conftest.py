"""Shared test fixtures for retypist."""

from __future__ import annotations

from pathlib import Path

import pytest

from retypist.exceptions import LaunchError
from retypist.process import ProcessResult

SAMPLE_RUST_SOURCE = '''//! Sample crate.

use std::fmt;

pub struct Point {
    pub x: i32,
    pub(crate) y: i32,
    z: i32,
}

pub(crate) struct Pair(pub i32, i32);

pub enum Shape {
    Circle { radius: f64 },
    Square(f64),
}

pub fn area(shape: &Shape) -> f64 {
    fn helper() {}
    0.0
}

fn private_helper() {}

impl Point {
    pub fn new() -> Self {
        Point { x: 0, y: 0, z: 0 }
    }
}

pub mod nested {
    pub fn inner() {}

    pub(super) fn restricted() {}
}
'''

# Point 4, x 4, y 3, Pair 3, Shape 4, area 4, inner 4
SAMPLE_MUTATION_COUNT = 26


@pytest.fixture
def sample_rust_source() -> str:
    """Sample Rust source covering every visibility the visitor knows."""
    return SAMPLE_RUST_SOURCE


@pytest.fixture
def tmp_crate(tmp_path: Path) -> Path:
    """Create a temporary cargo crate with a few Rust sources."""
    (tmp_path / "Cargo.toml").write_text(
        '[package]\nname = "sample"\nversion = "0.1.0"\nedition = "2021"\n'
    )
    src = tmp_path / "src"
    src.mkdir()
    (src / "lib.rs").write_text("pub mod shapes;\npub mod util;\n\npub fn version() -> u32 {\n    1\n}\n")
    (src / "shapes.rs").write_text(SAMPLE_RUST_SOURCE)

    util = src / "util"
    util.mkdir()
    (util / "mod.rs").write_text(
        "pub(crate) fn clamp(v: i32) -> i32 {\n    v.max(0)\n}\n\nfn hidden() {}\n"
    )
    (src / "README.md").write_text("# not rust\n")
    return tmp_path


@pytest.fixture
def private_crate(tmp_path: Path) -> Path:
    """A crate whose only source has nothing left to narrow."""
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "private"\nversion = "0.1.0"\n')
    src = tmp_path / "src"
    src.mkdir()
    (src / "lib.rs").write_text("fn a() {}\n\nstruct B {\n    c: u8,\n}\n")
    return tmp_path


@pytest.fixture
def two_token_crate(tmp_path: Path) -> Path:
    """A crate with exactly two mutable visibility tokens."""
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "tiny"\nversion = "0.1.0"\n')
    src = tmp_path / "src"
    src.mkdir()
    (src / "lib.rs").write_text("pub fn a() {}\npub(crate) fn b() {}\n")
    return tmp_path


class FakeCargo:
    """Records calls and replays scripted results for ``test``."""

    def __init__(self, events: list, results=None, fmt_result=ProcessResult.SUCCESS):
        self.events = events
        self.results = list(results or [ProcessResult.SUCCESS])
        self.fmt_result = fmt_result

    def test(self, root: Path) -> ProcessResult:
        self.events.append("test")
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result

    def fmt(self, root: Path) -> ProcessResult:
        self.events.append("fmt")
        if isinstance(self.fmt_result, Exception):
            raise self.fmt_result
        return self.fmt_result


class FakeGit:
    """Records calls and models a working tree over the crate's .rs files.

    The first reset records the committed state; reset and discard restore
    it, and a successful commit records the current files.
    """

    def __init__(self, events: list, failing: tuple[str, ...] = ()):
        self.events = events
        self.failing = failing
        self.messages: list[str] = []
        self.committed: dict[Path, bytes] | None = None

    def _result(self, name: str) -> ProcessResult:
        self.events.append(name)
        if name in self.failing:
            return ProcessResult.FAILURE
        return ProcessResult.SUCCESS

    def _restore(self, root: Path) -> None:
        if self.committed is None:
            self.committed = _rust_files(root)
            return
        for path, data in self.committed.items():
            path.write_bytes(data)

    def reset(self, root: Path) -> ProcessResult:
        result = self._result("reset")
        if result.success:
            self._restore(root)
        return result

    def discard(self, root: Path) -> ProcessResult:
        result = self._result("discard")
        if result.success:
            self._restore(root)
        return result

    def commit(self, root: Path, message: str = "") -> ProcessResult:
        self.messages.append(message)
        result = self._result("commit")
        if result.success:
            self.committed = _rust_files(root)
        return result


def _rust_files(root: Path) -> dict[Path, bytes]:
    return {p: p.read_bytes() for p in sorted(root.rglob("*.rs"))}


class RecordingRunner:
    """Stands in for ProcessRunner, recording argv, cwd and env."""

    def __init__(self, result=ProcessResult.SUCCESS):
        self.calls: list[tuple[list[str], Path, dict | None]] = []
        self.result = result

    def run(self, argv, cwd, env=None):
        self.calls.append((list(argv), cwd, env))
        return self.result


def missing_binary_error(name: str = "cargo") -> LaunchError:
    return LaunchError([name, "test"], FileNotFoundError(name))
