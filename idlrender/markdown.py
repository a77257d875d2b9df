"""Markdown building blocks for documentation pages."""

from __future__ import annotations

from collections.abc import Sequence


def md_heading(text: str, level: int) -> str:
    return f"{'#' * level} {text}"


def md_code_block(code: str, lang: str = "ts") -> str:
    return f"```{lang}\n{code}\n```"


def md_link(text: str, url: str) -> str:
    return f"[{text}]({url})"


def md_list(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def md_table_cell(text: str) -> str:
    """Keep a cell on one table row: pipes escaped, line breaks collapsed."""
    return " ".join(text.replace("|", "\\|").split())


def md_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    separator = ["---"] * len(headers)
    return "\n".join(
        f"| {' | '.join(md_table_cell(cell) for cell in row)} |"
        for row in (list(headers), separator, *rows)
    )
