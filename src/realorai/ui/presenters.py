from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..analysis.benchmark import BenchmarkResult
from ..data.catalog import AssetCatalog


class RichPresenter:
    def __init__(self, *, no_color: bool = False, console: Console | None = None):
        if console is not None:
            self.console = console
        elif no_color:
            self.console = Console(force_terminal=False, color_system=None)
        else:
            self.console = Console()

    def show_catalog(self, catalog: AssetCatalog, root: str | None = None) -> None:
        table = Table(show_header=True, header_style="bold blue", box=box.SIMPLE_HEAVY)
        table.add_column("Category", style="bold")
        table.add_column("Real", justify="right")
        table.add_column("AI", justify="right")
        table.add_column("Playable", justify="center")
        overview = catalog.describe()
        for category, counts in overview.items():
            playable = "[green]yes[/]" if counts["available"] else "[red]no[/]"
            table.add_row(category, str(counts["real"]), str(counts["ai"]), playable)
        title = f"Image catalog ({root})" if root else "Image catalog"
        if not overview:
            self.console.print(Panel("No images found.", title=title, border_style="red", expand=False))
            return
        self.console.print(Panel(table, title=title, border_style="cyan", expand=False))
        available = ", ".join(catalog.available_categories()) or "none"
        self.console.print(f"[dim]Playable categories: {available} • {len(catalog)} images[/]")

    def show_benchmark(self, result: BenchmarkResult) -> None:
        table = Table(show_header=True, header_style="bold blue", box=box.SIMPLE_HEAVY)
        table.add_column("Category", style="bold")
        table.add_column("Draws", justify="right")
        table.add_column("Observed", justify="right")
        table.add_column("Expected", justify="right")
        for freq in result.frequencies:
            table.add_row(freq.category, str(freq.draws), f"{freq.observed:.3f}", f"{freq.expected:.3f}")
        self.console.print(Panel(table, title="Category weighting", border_style="magenta", expand=False))

        info = Table.grid(padding=(0, 1))
        info.add_column(style="bold cyan", justify="right")
        info.add_column(justify="left")
        info.add_row("Chi-square", f"{result.chi_square:.2f} (df={result.degrees_of_freedom})")
        info.add_row("Pair repeat rate", f"{100.0 * result.pair_repeat_rate:.1f}%")
        info.add_row("Identical pairs", str(result.identical_pairs))
        info.add_row("Reshuffles", str(result.sequence_reshuffles))
        coverage = "[green]ok[/]" if result.coverage_ok else f"[red]repeat after {result.min_repeat_gap}[/]"
        info.add_row("Coverage", f"{coverage} (window {result.coverage_window})")
        self.console.print(Panel(info, title="Sampler behaviour", border_style="green", expand=False))
