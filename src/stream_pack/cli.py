"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from stream_pack.core.binder_factory import BinderFactory
from stream_pack.models.options import OptimizeOptions

app = typer.Typer(
    name="stream-pack",
    help="Repackage EPUB and comic book archives for front-to-back streaming.",
    add_completion=False,
)

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich; debug detail only when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _check_supported(book_path: Path) -> None:
    if not BinderFactory.is_supported(book_path):
        console.print(f"[red]Unsupported file format: {book_path.suffix}[/]")
        console.print("[dim]Supported formats: .cbr, .cbz, .epub[/]")
        raise typer.Exit(1)


@app.command()
def optimize(
    book_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the archive (EPUB, CBZ or CBR)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    output_dir: Annotated[
        Path,
        typer.Option(
            "--output-dir",
            "-o",
            help="Directory the optimized archive is written under",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
    base_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--base-dir",
            "-i",
            help="Input root; the archive's path below it is kept under the output "
            "directory (default: the archive's own directory)",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = None,
    case_sensitive: Annotated[
        bool,
        typer.Option(
            "--case-sensitive",
            help="Sort comic pages case-sensitively",
        ),
    ] = False,
    keep_temp: Annotated[
        bool,
        typer.Option(
            "--keep-temp",
            help="Do not remove the temporary extraction directory",
        ),
    ] = False,
    webp: Annotated[
        bool,
        typer.Option(
            "--webp",
            help="Convert PNG/JPEG comic pages to WebP",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every step",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
) -> None:
    """Reorder an archive so it can be read front to back without seeking."""
    _check_supported(book_path)
    configure_logging(verbose)

    options = OptimizeOptions(
        verbose=verbose,
        case_sensitive_sort=case_sensitive,
        keep_temp=keep_temp,
        convert_images=webp,
    )

    try:
        from stream_pack.commands.optimize import execute_optimize

        execute_optimize(
            source=book_path,
            output_dir=output_dir,
            base_dir=base_dir,
            options=options,
            quiet=quiet,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        raise typer.Exit(1)


@app.command()
def info(
    book_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the archive (EPUB, CBZ or CBR)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    case_sensitive: Annotated[
        bool,
        typer.Option(
            "--case-sensitive",
            help="Sort comic pages case-sensitively",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every step",
        ),
    ] = False,
) -> None:
    """Display an archive's type and the order it would be written in."""
    _check_supported(book_path)
    configure_logging(verbose)

    try:
        from stream_pack.commands.info import execute_info

        execute_info(
            source=book_path,
            options=OptimizeOptions(verbose=verbose, case_sensitive_sort=case_sensitive),
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error reading archive: {escape(str(e))}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
