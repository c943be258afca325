"""CLI entry point: repo-depgraph.

Subcommands:
    repo-depgraph analyze owner/repo            # Print the graph as JSON
    repo-depgraph analyze ./checkout --lang py  # Local checkout, forced language
    repo-depgraph languages                     # Supported languages and parsers
"""

from __future__ import annotations

import asyncio
import dataclasses
import sys
from pathlib import Path

import click

from repo_depgraph.config import Settings
from repo_depgraph.core.logging import setup_logging
from repo_depgraph.exceptions import InvalidRepositoryError
from repo_depgraph.languages.registry import create_default_registry
from repo_depgraph.parsers.registry import create_default_parser_registry
from repo_depgraph.pipeline import analyze
from repo_depgraph.schemas import GraphPayload


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """repo-depgraph: file-level import graphs for source repositories."""
    setup_logging("DEBUG" if verbose else None)


@main.command("analyze")
@click.argument("repo")
@click.option("--lang", "language", default=None, help="Skip detection and use this language")
@click.option("--max-files", type=click.IntRange(min=1), default=None, help="File cap")
@click.option("-o", "--output", default=None, help="Write JSON here instead of stdout")
def analyze_cmd(repo: str, language: str | None, max_files: int | None, output: str | None) -> None:
    """Build the dependency graph of REPO (GitHub URL, owner/repo, or local path)."""
    settings = Settings.from_env()
    if max_files is not None:
        settings = dataclasses.replace(settings, max_files=max_files)

    try:
        graph = asyncio.run(analyze(repo, language=language, settings=settings))
    except InvalidRepositoryError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    text = GraphPayload.from_graph(graph).model_dump_json(indent=2)
    if output:
        Path(output).write_text(text + "\n")
        click.echo(
            f"Graph written to {output}: {graph.stats.node_count} files, "
            f"{graph.stats.edge_count} edges ({graph.metadata.language})",
            err=True,
        )
    else:
        click.echo(text)

    for warning in graph.warnings:
        click.echo(f"Warning: {warning}", err=True)


@main.command("languages")
def languages_cmd() -> None:
    """List supported languages and whether an import parser ships for them."""
    languages = create_default_registry()
    parsers = create_default_parser_registry(languages)
    for profile in languages.list():
        marker = "+" if parsers.has_parser(profile.id) else "-"
        extensions = " ".join(profile.extensions)
        click.echo(f"  [{marker}] {profile.id:<12} {profile.display_name:<24} {extensions}")
