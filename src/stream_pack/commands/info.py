"""Info command implementation."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from stream_pack.core.archive_extractor import open_archive
from stream_pack.core.binder_factory import BinderFactory
from stream_pack.core.epub_binder import EpubBinder
from stream_pack.core.package_parser import package_title
from stream_pack.models.options import OptimizeOptions


def execute_info(source: Path, options: OptimizeOptions, console: Console) -> None:
    """Show an archive's type and the order it would be written in."""
    with open_archive(source, options) as archive:
        binder = BinderFactory.create(archive, options)
        ordered = binder.order()
        fixed = binder.fixed_files()

        info_lines = [
            f"[bold]{escape(source.name)}[/]",
            "",
            f"[dim]Type:[/] {archive.archive_type.value.replace('_', ' ').title()}",
            f"[dim]Files:[/] {len(archive.files):,}",
        ]
        if isinstance(binder, EpubBinder):
            package = binder.book.package
            title = package_title(package) or "Unknown"
            info_lines.append(f"[dim]Title:[/] {escape(title)}")
            info_lines.append(f"[dim]Package:[/] {escape(package.path)}")
            info_lines.append(f"[dim]Spine items:[/] {len(package.spine)}")

        console.print()
        console.print(
            Panel(
                "\n".join(info_lines),
                title="Archive Information",
                border_style="green",
            )
        )

        console.print()
        table = Table(title="Streaming Order", show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", width=5)
        table.add_column("File", style="white")

        for i, path in enumerate([*fixed, *ordered]):
            name = escape(archive.relative(path))
            table.add_row(str(i + 1), f"[dim]{name}[/]" if path in fixed else name)

        console.print(table)
        console.print()
