"""Optimize command implementation."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from stream_pack.core.archive_extractor import open_archive
from stream_pack.core.binder_factory import BinderFactory
from stream_pack.models.options import OptimizeOptions


def get_output_path(source: Path, output_dir: Path, base_dir: Path | None) -> Path:
    """Mirror the source's position under ``base_dir`` into ``output_dir``.

    Raises:
        ValueError: If the source is not below the base directory, or the
            output would overwrite the source
    """
    base = (base_dir or source.parent).resolve()
    try:
        relative = source.resolve().relative_to(base)
    except ValueError:
        raise ValueError(f"{source} is not inside base directory {base}")

    output = output_dir.resolve() / relative
    _ensure_not_source(source, output)
    return output


def _ensure_not_source(source: Path, output: Path) -> None:
    if output.resolve() == source.resolve():
        raise ValueError(f"Refusing to overwrite the input file {source}")


def execute_optimize(
    source: Path,
    output_dir: Path,
    base_dir: Path | None,
    options: OptimizeOptions,
    quiet: bool,
    console: Console,
) -> Path:
    """Execute the optimize command. Returns the written archive path."""
    requested = get_output_path(source, output_dir, base_dir)

    def run() -> tuple[Path, str, int]:
        with open_archive(source, options) as archive:
            binder = BinderFactory.create(archive, options)
            ordered = binder.order()
            destination = binder.output_path(requested)
            _ensure_not_source(source, destination)
            written = binder.write(destination)
            return written, archive.archive_type.value, len(ordered)

    if not quiet:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Optimizing {source.name}...", total=None)
            written, archive_type, count = run()
    else:
        written, archive_type, count = run()

    if not quiet:
        type_display = archive_type.replace("_", " ").title()
        summary_lines = [
            f"[green]Optimized for streaming: {escape(source.name)}[/]",
            "",
            f"[dim]Type:[/] {type_display}",
            f"[dim]Ordered files:[/] {count:,}",
            f"[dim]Output:[/] {escape(str(written))}",
        ]
        console.print(
            Panel(
                "\n".join(summary_lines),
                title="Complete",
                border_style="green",
            )
        )

    return written
