"""Fixed-width text tables.

Widths and padding are measured in characters (code points), never in
encoded bytes, so Cyrillic and other multi-byte text stays aligned.

Layout:
    +------+----------+
    | ID   | Name     |
    +------+----------+
    |    1 | Ивано... |
    +------+----------+
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

ELLIPSIS = "..."


def char_length(text: str) -> int:
    """Length of text in characters."""
    return len(text)


def truncate_chars(text: str, max_chars: int) -> str:
    """First max_chars characters of text."""
    if max_chars <= 0:
        return ""
    return text[:max_chars]


def fit_cell(text: str, width: int) -> str:
    """Fit text into width characters.

    Text that is too long is cut to width - 3 characters plus "...";
    columns of width 3 or less are hard-truncated without an ellipsis.
    """
    if char_length(text) <= width:
        return text
    if width <= len(ELLIPSIS):
        return truncate_chars(text, width)
    return truncate_chars(text, width - len(ELLIPSIS)) + ELLIPSIS


def pad_cell(text: str, width: int, align_right: bool = False) -> str:
    """Pad text with spaces to width characters on the left or right."""
    missing = width - char_length(text)
    if missing <= 0:
        return text
    return " " * missing + text if align_right else text + " " * missing


@dataclass(frozen=True)
class Column:
    """Table column: header text, width in characters, alignment."""

    header: str
    width: int
    align_right: bool = False

    @property
    def effective_width(self) -> int:
        return max(self.width, 1)


def render_line(widths: Sequence[int]) -> str:
    """Separator line: +----+------+."""
    return "".join("+" + "-" * (max(w, 1) + 2) for w in widths) + "+"


def render_row(
    cells: Sequence[str],
    widths: Sequence[int],
    align_right: Sequence[bool] = (),
) -> str:
    """One table row. Missing cells render blank; extra cells are ignored."""
    parts = []
    for i, width in enumerate(widths):
        width = max(width, 1)
        cell = fit_cell(cells[i], width) if i < len(cells) else ""
        right = i < len(align_right) and align_right[i]
        parts.append("| " + pad_cell(cell, width, right) + " ")
    return "".join(parts) + "|"


def render_table(columns: Sequence[Column], rows: Sequence[Sequence[str]]) -> list[str]:
    """Header and body rows framed by separator lines."""
    widths = [c.effective_width for c in columns]
    align = [c.align_right for c in columns]
    line = render_line(widths)

    lines = [line, render_row([c.header for c in columns], widths, align), line]
    lines.extend(render_row(row, widths, align) for row in rows)
    lines.append(line)
    return lines


@dataclass
class TableView:
    """A titled table ready for output.

    Attributes:
        columns: Column layout
        rows: Body rows of text cells
        title: Lines printed above the table
        footer: Lines printed below the table
        empty_message: Printed instead of the table when rows is empty
    """

    columns: list[Column] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    title: list[str] = field(default_factory=list)
    footer: list[str] = field(default_factory=list)
    empty_message: str | None = None

    @classmethod
    def message(cls, text: str) -> TableView:
        """A view that only carries a message (nothing to tabulate)."""
        return cls(empty_message=text)

    def render(self) -> list[str]:
        if not self.rows and self.empty_message is not None:
            return [self.empty_message]
        return [*self.title, *render_table(self.columns, self.rows), *self.footer]
