"""Rendering of the connection list as a terminal table."""

from __future__ import annotations

import shutil
from collections.abc import Sequence

from rich.console import Console
from rich.style import Style
from rich.table import Table

from somo.schemas import AddressType, Connection
from somo.utils import _render_markdown, pretty_print_info

CENTER_MARKDOWN_ROW = "| :-: | :-: | :-: | :-: | :-: | :-: | :-: |\n"
HEADER_ROW = (
    "| **#** | **proto** | **local port** | **remote address** "
    "| **remote port** | **pid** *program* | **state** |\n"
)
MAX_COLUMN_SPACES = (5, 8, 8, 28, 7, 24, 13)
EMPTY_CHARACTER = "\u2800"


def create_table_style() -> dict[str, Style]:
    """Return the styles used for the inline markdown markers in the table."""
    return {
        "**": Style(bold=True, color="cyan"),
        "*": Style(italic=True, color="grey50"),
        "~~": Style(color="red", blink2=True),
        "`": Style(color="yellow"),
    }


def format_known_address(remote_address: str, address_type: AddressType) -> str:
    """Mark localhost and unspecified addresses with markdown emphasis."""
    if address_type is AddressType.UNSPECIFIED:
        return f"*{remote_address}*"
    if address_type is AddressType.LOCALHOST:
        return f"*{remote_address} localhost*"
    return remote_address


def fill_terminal_width(terminal_width: int, max_column_spaces: Sequence[int]) -> str:
    """Build a blank table row whose cells share the terminal width by weight."""
    total = sum(max_column_spaces)
    cells = (
        f"| {EMPTY_CHARACTER * int(space / total * terminal_width)} "
        for space in max_column_spaces
    )
    return "".join(cells) + "|\n"


def build_connections_markdown(
    all_connections: Sequence[Connection], terminal_width: int
) -> str:
    """Return the markdown table listing all connections."""
    parts = [CENTER_MARKDOWN_ROW, HEADER_ROW]
    for idx, connection in enumerate(all_connections, start=1):
        address = format_known_address(connection.remote_address, connection.address_type)
        parts.append(CENTER_MARKDOWN_ROW)
        parts.append(
            f"| *{idx}* | {connection.proto} | {connection.local_port} | {address} "
            f"| {connection.remote_port} | {connection.pid} *{connection.program}* "
            f"| {connection.state} |\n"
        )
    parts.append(fill_terminal_width(terminal_width, MAX_COLUMN_SPACES))
    parts.append(CENTER_MARKDOWN_ROW)
    return "".join(parts)


def _table_rows(markdown: str) -> list[list[str]]:
    """Split a markdown table into cell rows, dropping alignment and filler rows."""
    rows = []
    for line in markdown.splitlines():
        line = line.strip()
        if not line:
            continue
        cells = [cell.strip() for cell in line.strip("|").split("|")]
        if all(cell == ":-:" for cell in cells):
            continue
        if all(not cell.strip(EMPTY_CHARACTER) for cell in cells):
            continue
        rows.append(cells)
    return rows


def print_connections_table(all_connections: Sequence[Connection]) -> None:
    """Print all connections as a table followed by their count."""
    styles = create_table_style()
    terminal_width = shutil.get_terminal_size().columns
    markdown = build_connections_markdown(all_connections, terminal_width)
    header, *body = _table_rows(markdown)

    table = Table(expand=True)
    for title, ratio in zip(header, MAX_COLUMN_SPACES):
        table.add_column(_render_markdown(title, styles), justify="center", ratio=ratio)
    for cells in body:
        table.add_row(*(_render_markdown(cell, styles) for cell in cells))

    Console(highlight=False).print(table)
    pretty_print_info(f"**{len(all_connections)} Connections**")