"""CLI commands for lazyimages."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from lazyimages.placeholders import PlaceholderRewriter, StoreResolver
from lazyimages.placeholders.svg import render_placeholder, to_data_uri
from lazyimages.summaries import (
    BackendName,
    ImageSummary,
    PlaceholderStyle,
    SummaryConfig,
    SummaryGenerator,
    SummaryStore,
)
from lazyimages.summaries.backends import available_backends

console = Console()

STYLE_CHOICES = [style.value for style in PlaceholderStyle]
BACKEND_CHOICES = [backend.value for backend in BackendName]


def _collect_images(paths: tuple[str, ...], config: SummaryConfig) -> list[Path]:
    """Expand directories into the supported image files they contain."""
    images: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            images.extend(
                sorted(
                    p for p in path.rglob("*")
                    if p.is_file() and p.suffix.lstrip(".").lower() in config.supported_formats
                )
            )
        else:
            images.append(path)
    return images


def _get_store(ctx: click.Context) -> SummaryStore:
    """Open the summary store on first use and close it with the context."""
    if "store" not in ctx.obj:
        config: SummaryConfig = ctx.obj["config"]
        store = SummaryStore(config.get_store_path(ctx.obj["data_dir"]))
        ctx.obj["store"] = store
        ctx.call_on_close(store.close)
    return ctx.obj["store"]


def _get_summary(store: SummaryStore, image_id: str) -> ImageSummary:
    summary = store.get(image_id)
    if summary is None:
        raise click.ClickException(f"No summary stored for image: {image_id}")
    return summary


def _swatch(color) -> str:
    if color is None:
        return "-"
    return f"[on #{color.hex}]    [/] {color.css}"


@click.group()
@click.option("--data-dir", default="./data", help="Data directory")
@click.option("--config", "config_path", default="./lazyimages.yaml", help="Config file")
@click.option("--store", "store_path", default=None, help="Summary database path")
@click.pass_context
def main(
    ctx: click.Context, data_dir: str, config_path: str, store_path: str | None
) -> None:
    """lazyimages - Color summaries and lazy-loading placeholders."""
    ctx.ensure_object(dict)
    config = SummaryConfig.load(Path(config_path))
    if store_path:
        config.store_path = Path(store_path)
    ctx.obj["config"] = config
    ctx.obj["data_dir"] = Path(data_dir)


@main.command()
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "--backend", "-b", type=click.Choice(BACKEND_CHOICES), default=None,
    help="Imaging backend (overrides config)",
)
@click.option("--url", default=None, help="Public URL of the image (single file only)")
@click.option("--force", "-f", is_flag=True, help="Recompute existing summaries")
@click.option("--workers", "-w", type=int, default=None, help="Parallel workers")
@click.pass_context
def summarize(
    ctx: click.Context,
    paths: tuple[str, ...],
    backend: str | None,
    url: str | None,
    force: bool,
    workers: int | None,
) -> None:
    """Compute and store color summaries for image files or directories."""
    config: SummaryConfig = ctx.obj["config"]
    store = _get_store(ctx)

    if backend:
        config.backend = BackendName(backend)
    if workers:
        config.workers = workers

    images = _collect_images(paths, config)
    if url and len(images) != 1:
        raise click.ClickException("--url requires exactly one image file")

    generator = SummaryGenerator(store, config)

    if url:
        result = generator.generate_for_path(images[0], source_url=url, force=force)
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
        ) as progress:
            task = progress.add_task("Summarizing images...", total=len(images))

            def on_progress(completed: int, total: int) -> None:
                progress.update(task, completed=completed, total=total)

            result = generator.generate_for_paths(
                images, force=force, progress_callback=on_progress
            )

    if result.errors:
        for image_id, error in result.errors[:5]:
            console.print(f"[red]  Error: {image_id}: {error}[/red]")
        if len(result.errors) > 5:
            console.print(f"[red]  ... and {len(result.errors) - 5} more[/red]")

    console.print(f"[green]Generated: {result.generated}[/green]")
    console.print(f"[dim]Skipped: {result.skipped}[/dim]")
    if result.failed:
        console.print(f"[red]Failed: {result.failed}[/red]")


@main.command()
@click.argument("image_id")
@click.pass_context
def show(ctx: click.Context, image_id: str) -> None:
    """Show the stored summary of an image."""
    store = _get_store(ctx)
    summary = _get_summary(store, image_id)

    table = Table(title=f"Summary: {image_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Backend", summary.backend or "-")
    if summary.original_width and summary.original_height:
        table.add_row("Size", f"{summary.original_width}x{summary.original_height}")
    table.add_row("Average color", _swatch(summary.average_color))
    table.add_row("Average grayscale", _swatch(summary.average_grayscale))
    table.add_row("Dark", "-" if summary.is_dark is None else str(summary.is_dark))
    for index, stripe in enumerate(summary.horizontal_stripes):
        table.add_row(f"Stripe {index + 1}", _swatch(stripe))
    columns, rows = summary.grid_size
    table.add_row("Grid", f"{columns}x{rows}")

    console.print(table)


@main.command()
@click.argument("image_id")
@click.option("--style", "-s", type=click.Choice(STYLE_CHOICES), default=None,
              help="Placeholder style (overrides config)")
@click.option("--width", type=int, default=None, help="SVG width attribute")
@click.option("--height", type=int, default=None, help="SVG height attribute")
@click.option("--data-uri", is_flag=True, help="Print as a data URI")
@click.pass_context
def placeholder(
    ctx: click.Context,
    image_id: str,
    style: str | None,
    width: int | None,
    height: int | None,
    data_uri: bool,
) -> None:
    """Print the placeholder SVG of a stored image."""
    config: SummaryConfig = ctx.obj["config"]
    store = _get_store(ctx)
    summary = _get_summary(store, image_id)

    svg = render_placeholder(summary, style or config.placeholder_style, width, height)
    if not svg:
        raise click.ClickException(f"Summary of {image_id} has no data for this style")
    click.echo(to_data_uri(svg) if data_uri else svg)


@main.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default=None, help="Output file (default: stdout)")
@click.option("--style", "-s", type=click.Choice(STYLE_CHOICES), default=None,
              help="Placeholder style (overrides config)")
@click.option("--no-noscript", is_flag=True, help="Omit the <noscript> fallback")
@click.pass_context
def rewrite(
    ctx: click.Context,
    html_file: str,
    output: str | None,
    style: str | None,
    no_noscript: bool,
) -> None:
    """Replace <img> tags in an HTML file with placeholders."""
    config: SummaryConfig = ctx.obj["config"]
    store = _get_store(ctx)

    rewriter = PlaceholderRewriter(
        StoreResolver(store),
        style=style or config.placeholder_style,
        noscript_fallback=not no_noscript,
    )
    content = rewriter.rewrite(Path(html_file).read_text())

    if output:
        Path(output).write_text(content)
        console.print(f"[green]Wrote {output}[/green]")
    else:
        click.echo(content, nl=False)


@main.command()
def backends() -> None:
    """List available imaging backends."""
    available = available_backends()
    table = Table(title="Imaging Backends")
    table.add_column("Backend", style="cyan")
    table.add_column("Available")
    for name in (BackendName.OPENCV.value, BackendName.PILLOW.value):
        status = "[green]yes[/green]" if name in available else "[red]no[/red]"
        table.add_row(name, status)
    console.print(table)


@main.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show summary store statistics."""
    store = _get_store(ctx)
    summary_stats = store.get_stats()

    console.print("[bold]Summary Statistics[/bold]")
    console.print(f"  Total: {summary_stats.total_count}")
    console.print(f"  Empty: {summary_stats.empty_count}")

    if summary_stats.backends:
        console.print("\n[bold]By Backend:[/bold]")
        for backend, count in sorted(summary_stats.backends.items()):
            console.print(f"  {backend}: {count}")


@main.command()
@click.argument("image_id", required=False)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def clear(ctx: click.Context, image_id: str | None, yes: bool) -> None:
    """Remove stored summaries (one image or all)."""
    store = _get_store(ctx)

    if not yes:
        msg = f"Clear summary for {image_id}" if image_id else "Clear all summaries"
        if not click.confirm(msg + "?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

    count = store.remove(image_id) if image_id else store.clear()
    console.print(f"[green]Cleared {count} summaries[/green]")


if __name__ == "__main__":
    main()
