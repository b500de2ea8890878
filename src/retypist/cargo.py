"""The cargo build/test collaborator."""

from __future__ import annotations

import os
from pathlib import Path

from retypist.process import ProcessResult, ProcessRunner

# Mutations can legitimately leave an import unused; every other warning fails.
DEFAULT_RUSTFLAGS = "-D warnings -A unused-imports"


def cargo_binary() -> str:
    return os.environ.get("CARGO", "cargo")


class Cargo:
    """Runs ``cargo test`` and ``cargo fmt`` for one crate."""

    def __init__(
        self,
        runner: ProcessRunner,
        extra_args: list[str] | None = None,
        rustflags: str = DEFAULT_RUSTFLAGS,
        binary: str | None = None,
    ) -> None:
        self.runner = runner
        self.extra_args = list(extra_args or [])
        self.rustflags = rustflags
        self.binary = binary or cargo_binary()

    def test_argv(self) -> list[str]:
        return [self.binary, "test", *self.extra_args]

    def test(self, root: Path) -> ProcessResult:
        """Build and test the whole crate with warnings denied."""
        return self.runner.run(
            self.test_argv(), cwd=root, env={"RUSTFLAGS": self.rustflags}
        )

    def fmt(self, root: Path) -> ProcessResult:
        return self.runner.run([self.binary, "fmt"], cwd=root)
