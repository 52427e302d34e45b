"""Address helpers and styled console messages."""

from __future__ import annotations

import re

from rich.console import Console
from rich.style import Style
from rich.text import Text

_MARKERS = re.compile(r"(\*\*|~~|\*|`)")


def split_address(address: str) -> tuple[str, str] | None:
    """Split ``address:port`` at the last colon, or return None without one."""
    host, sep, port = address.rpartition(":")
    if not sep:
        return None
    return host, port


def get_address_parts(address: str) -> tuple[str, str]:
    """Return ``(address, port)``, using ``-`` as port if there is none."""
    parts = split_address(address)
    if parts is None:
        return address, "-"
    return parts


def _render_markdown(markdown: str, styles: dict[str, Style]) -> Text:
    """Render the small inline markdown subset used in messages as rich text."""
    text = Text()
    active: list[str] = []
    for token in _MARKERS.split(markdown):
        if not token:
            continue
        if _MARKERS.fullmatch(token):
            if token in active:
                active.remove(token)
            else:
                active.append(token)
            continue
        style = Style.combine([styles.get(marker, Style()) for marker in active])
        text.append(token, style=style)
    return text


def _print_message(label: str, text: str, label_color: str) -> None:
    styles = {
        "**": Style(bold=True, color="white"),
        "*": Style(color="grey70"),
        "~~": Style(color=label_color),
    }
    console = Console(highlight=False)
    console.print(_render_markdown(f"~~{label}~~: *{text}*", styles))


def pretty_print_info(text: str) -> None:
    """Print an informational message."""
    _print_message("Info", text, "cyan")


def pretty_print_error(text: str) -> None:
    """Print an error message."""
    _print_message("Error", text, "red")