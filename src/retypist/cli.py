"""Command-line interface for retypist."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from retypist import __version__
from retypist.config import apply_overrides, load_config
from retypist.exceptions import Cancelled, ConfigError, RetypistError
from retypist.source import SourceTree
from retypist.ui.console import Console

console = Console()

EXIT_INTERRUPTED = 130


def _open_tree(path: str) -> SourceTree:
    """Validate the crate directory or exit."""
    try:
        return SourceTree(Path(path).resolve())
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="retypist")
def main():
    """retypist - narrow Rust visibility, keeping only what still builds and passes."""
    pass


@main.command(context_settings={"ignore_unknown_options": True})
@click.option("--dir", "-d", "path", default=".", help="Rust crate directory to mutate.")
@click.option("--seed", type=int, default=None, help="Seed for reproducible sampling.")
@click.option("--max-iterations", type=int, default=None, help="Stop after N iterations.")
@click.option("--min-batch", type=int, default=None, help="Smallest batch size.")
@click.option("--max-batch", type=int, default=None, help="Largest batch size.")
@click.option("--no-format", is_flag=True, help="Skip cargo fmt before committing.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.argument("cargo_args", nargs=-1, type=click.UNPROCESSED)
def run(
    path: str,
    seed: int | None,
    max_iterations: int | None,
    min_batch: int | None,
    max_batch: int | None,
    no_format: bool,
    verbose: bool,
    cargo_args: tuple[str, ...],
):
    """Repeatedly narrow visibility, committing batches that pass `cargo test`.

    Extra CARGO_ARGS are appended to `cargo test`.
    """
    from retypist.campaign import Campaign
    from retypist.cargo import Cargo
    from retypist.git import Git
    from retypist.interrupt import CancellationToken, install_interrupt_handler
    from retypist.process import ProcessRunner

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    tree = _open_tree(path)
    try:
        config = apply_overrides(
            load_config(tree.root),
            seed=seed,
            max_iterations=max_iterations,
            min_batch=min_batch,
            max_batch=max_batch,
            format=False if no_format else None,
            cargo_args=list(cargo_args) or None,
        )
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)

    token = CancellationToken()
    install_interrupt_handler(token)
    runner = ProcessRunner(token, poll_interval=config.poll_interval)
    campaign = Campaign(
        tree,
        cargo=Cargo(runner, config.cargo_args, rustflags=config.rustflags),
        git=Git(runner),
        config=config,
        console=console,
    )

    console.info(f"Mutating {tree.root}")
    try:
        campaign.run()
    except Cancelled:
        console.warning("Interrupted; the working tree may hold uncommitted edits")
        console.show_stats(campaign.stats)
        sys.exit(EXIT_INTERRUPTED)
    except RetypistError as e:
        console.error(str(e))
        console.show_stats(campaign.stats)
        sys.exit(1)
    console.show_stats(campaign.stats)


@main.command("list")
@click.option("--dir", "-d", "path", default=".", help="Rust crate directory to examine.")
def list_mutations(path: str):
    """Show every candidate mutation in the crate."""
    tree = _open_tree(path)
    mutations = tree.mutations()
    if not mutations:
        console.info("No candidate mutations found")
        return
    console.show_mutations(mutations)
    console.success(f"{len(mutations)} candidate mutation(s)")
