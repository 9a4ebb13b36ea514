#!/usr/bin/env python3
"""
ZK Glossary - Command Line Interface
"""
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from zkglossary import __version__
from zkglossary.core.exceptions import (
    GlossarySystemError,
    ReferenceResolutionError,
    UnknownTermError,
)
from zkglossary.core.models import RenderFormat, Term
from zkglossary.core.pipeline import BUILTIN_GLOSSARY, GlossaryPipeline, write_output
from zkglossary.glossary.resolver import ResolutionResult
from zkglossary.glossary.term_store import TermStore
from zkglossary.utils.config_manager import ConfigManager
from zkglossary.utils.logger import setup_logging


console = Console()
err_console = Console(stderr=True)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def _fail(error: Exception) -> None:
    """Report an error on stderr and exit with status 1."""
    if isinstance(error, ReferenceResolutionError):
        _print_errors(error.errors, err_console)
    err_console.print(f"[red]Error: {escape(str(error))}[/red]")
    sys.exit(1)


def _print_errors(errors, target: Console) -> None:
    table = Table(title="Unresolved References", header_style="bold red")
    table.add_column("Term", style="cyan")
    table.add_column("Reference", style="yellow")
    table.add_column("Problem", style="white")

    for error in errors:
        problem = "defined later" if error.context.get('forward') else "undefined"
        table.add_row(
            escape(str(getattr(error, 'term', '') or '')),
            escape(str(getattr(error, 'target', '') or '')),
            problem,
        )

    target.print(table)


def _source_label(input_file: Optional[Path], pipeline: GlossaryPipeline) -> str:
    return str(input_file or pipeline.config.glossary.source or BUILTIN_GLOSSARY.name)


def _load(ctx: click.Context, input_file: Optional[Path]) -> TermStore:
    pipeline: GlossaryPipeline = ctx.obj['pipeline']
    try:
        return pipeline.load(input_file)
    except GlossarySystemError as e:
        _fail(e)


def _load_resolved(ctx: click.Context, input_file: Optional[Path]):
    pipeline: GlossaryPipeline = ctx.obj['pipeline']
    store = _load(ctx, input_file)
    return store, pipeline.resolve(store)


input_argument = click.argument(
    'input_file',
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path)
)


@click.group()
@click.version_option(version=__version__, prog_name="zkglossary")
@click.option(
    '--config', 'config_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Configuration file (YAML or JSON)'
)
@click.option(
    '--log-level',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help='Console log level (default from config)'
)
@click.pass_context
def cli(ctx, config_path, log_level):
    """ZK Glossary - Proof-systems terminology with first-use emphasis."""
    try:
        manager = ConfigManager(config_path)
    except GlossarySystemError as e:
        _fail(e)

    config = manager.config
    if log_level:
        config.logging.console_level = log_level.upper()

    setup_logging(
        log_dir=Path(config.logging.log_dir) if config.logging.log_dir else None,
        log_level=config.logging.log_level,
        console_level=config.logging.console_level,
        use_colors=config.logging.use_colors,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count,
    )

    ctx.obj = {
        'manager': manager,
        'config': config,
        'pipeline': GlossaryPipeline(config),
    }


@cli.command()
@input_argument
@click.option('--format', '-f', 'render_format', help='Output format: plain or emphasized')
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Write to file instead of stdout')
@click.option('--lenient', is_flag=True, help='Render even if some references do not resolve')
@click.pass_context
def render(ctx, input_file, render_format, output, lenient):
    """
    Render a glossary.

    Without INPUT_FILE the bundled proof-systems glossary is used.

    Examples:

        zkglossary render

        zkglossary render glossary.md --format emphasized -o out.md
    """
    pipeline: GlossaryPipeline = ctx.obj['pipeline']

    try:
        result = pipeline.run(input_file, render_format, strict=not lenient)
        if lenient and not result.resolution.ok:
            _print_errors(result.resolution.errors, err_console)

        if output:
            write_output(result.output, output)
            err_console.print(
                f"[green]✓ {result.total_terms} terms rendered as "
                f"{result.render_format.value}[/green] [dim]→ {escape(str(output))}[/dim]"
            )
        else:
            click.echo(result.output, nl=False)

    except KeyboardInterrupt:
        err_console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(1)
    except GlossarySystemError as e:
        _fail(e)


@cli.command()
@input_argument
@click.pass_context
def check(ctx, input_file):
    """
    Check that every related-term reference resolves.

    Example:
        zkglossary check glossary.md
    """
    store, resolution = _load_resolved(ctx, input_file)
    label = escape(_source_label(input_file, ctx.obj['pipeline']))

    if not resolution.ok:
        _print_errors(resolution.errors, console)
        console.print(f"\n[red]✗ {len(resolution.errors)} unresolved reference(s) in {label}[/red]")
        sys.exit(1)

    console.print(f"[green]✓ {len(store)} terms, all references resolve[/green] [dim]({label})[/dim]")
    if resolution.forward_references:
        console.print(f"[dim]  {len(resolution.forward_references)} forward reference(s)[/dim]")


@cli.command()
@click.argument('term')
@input_argument
@click.pass_context
def lookup(ctx, term, input_file):
    """
    Show one term.

    Example:
        zkglossary lookup witness
    """
    store, resolution = _load_resolved(ctx, input_file)

    try:
        found = store.lookup(term)
    except UnknownTermError as e:
        found = store.find(term)
        if found is None:
            if e.suggestions:
                err_console.print(f"[yellow]Did you mean: {escape(', '.join(e.suggestions))}?[/yellow]")
            _fail(e)

    _print_term(found, resolution)


def _print_term(term: Term, resolution: ResolutionResult) -> None:
    console.print(f"\n[bold cyan]{escape(term.id)}[/bold cyan]\n")
    console.print(escape(term.definition))

    emphasized = term.emphasized_text()
    if emphasized:
        console.print(f"\n[dim]Emphasized: {escape(', '.join(emphasized))}[/dim]")

    related = resolution.neighbors(term.id)
    if related:
        console.print(f"[dim]Related: {escape(', '.join(related))}[/dim]")
    if term.external:
        console.print(f"[dim]External: {escape(', '.join(sorted(term.external)))}[/dim]")

    backlinks = resolution.backlinks(term.id)
    if backlinks:
        console.print(f"[dim]Referenced by: {escape(', '.join(backlinks))}[/dim]")

    for aside in term.asides:
        console.print(f"[italic]{escape(aside.label or 'Aside')}: {escape(aside.text)}[/italic]")
    console.print()


@cli.command()
@input_argument
@click.pass_context
def terms(ctx, input_file):
    """
    List terms in definition order.

    Example:
        zkglossary terms
    """
    store = _load(ctx, input_file)
    title = store.title or _source_label(input_file, ctx.obj['pipeline'])

    table = Table(title=escape(title), show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Term", style="cyan")
    table.add_column("Related", style="white")
    table.add_column("Asides", style="green", justify="right")

    prefix = ctx.obj['config'].glossary.external_prefix
    for term in store.all():
        related = sorted(term.related) + [f"{prefix}{ref}" for ref in sorted(term.external)]
        table.add_row(
            str(term.position + 1),
            escape(term.id),
            escape(', '.join(related)),
            str(len(term.asides)),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(store)} terms[/dim]\n")


@cli.command()
@input_argument
@click.pass_context
def graph(ctx, input_file):
    """
    Show the cross-reference graph with backlinks.

    Example:
        zkglossary graph
    """
    store, resolution = _load_resolved(ctx, input_file)

    table = Table(title="Cross-references", show_header=True, header_style="bold magenta")
    table.add_column("Term", style="cyan")
    table.add_column("Links to", style="white")
    table.add_column("Referenced by", style="green")

    for term in store.all():
        table.add_row(
            escape(term.id),
            escape(', '.join(resolution.neighbors(term.id))),
            escape(', '.join(resolution.backlinks(term.id))),
        )

    console.print(table)

    orphans = resolution.orphans()
    if orphans:
        console.print(f"[dim]Not referenced: {escape(', '.join(orphans))}[/dim]")
    if not resolution.ok:
        console.print(f"[yellow]{len(resolution.errors)} unresolved reference(s); run 'zkglossary check'[/yellow]")


@cli.group()
def config():
    """Manage configuration files."""
    pass


@config.command('init')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--force', is_flag=True, help='Overwrite an existing file')
@click.pass_context
def config_init(ctx, path, force):
    """
    Write a commented configuration template.

    Example:
        zkglossary config init zkglossary.yaml
    """
    if path.exists() and not force:
        err_console.print(f"[red]Error: {escape(str(path))} already exists (use --force)[/red]")
        sys.exit(1)

    manager: ConfigManager = ctx.obj['manager']
    try:
        manager.export_template(path)
    except OSError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"[green]✓ Configuration template written to {escape(str(path))}[/green]")


@config.command('show')
@click.pass_context
def config_show(ctx):
    """Print the effective configuration as YAML."""
    data = asdict(ctx.obj['config'])
    click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), nl=False)


@cli.command()
def formats():
    """List supported render formats."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Format", style="cyan")
    table.add_column("Output", style="white")

    descriptions = {
        RenderFormat.PLAIN: 'Plain text, emphasis markers removed',
        RenderFormat.EMPHASIZED: 'Markdown with first-use emphasis',
    }
    for fmt in RenderFormat:
        table.add_row(fmt.value, descriptions[fmt])

    console.print(table)


if __name__ == '__main__':
    cli()
