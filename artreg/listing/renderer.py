"""Rich terminal renderer for registry listings.

``artreg ls`` prints a borderless table with a fixed header row so the
output stays readable when piped; ``artreg ls -q`` prints bare short ids.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from artreg.listing.projection import NONE_TAG, ListRow

HEADERS: tuple[str, ...] = (
    "REPOSITORY",
    "TAG",
    "ARTIFACT ID",
    "ARTIFACT TYPE",
    "CREATED",
    "SIZE",
)


class ListingRenderer:
    """Renders ``ListRow`` sequences as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_table(self, rows: list[ListRow]) -> Table:
        table = Table(
            box=box.SIMPLE_HEAD,
            show_header=True,
            header_style="bold",
            show_edge=False,
            pad_edge=False,
        )
        for header in HEADERS:
            table.add_column(header, no_wrap=True)

        for row in rows:
            table.add_row(
                Text(row.repository),
                Text(row.tag, style="dim" if row.tag == NONE_TAG else ""),
                Text(row.artifact_id),
                Text(row.artifact_type),
                Text(row.created),
                Text(row.size),
            )
        return table

    def print_rows(self, rows: list[ListRow]) -> None:
        self.console.print(self.render_table(rows))

    def print_quiet(self, ids: list[str]) -> None:
        for artifact_id in ids:
            self.console.print(artifact_id, highlight=False, markup=False)
