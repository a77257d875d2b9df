"""Fragments: generated text plus the imports it needs."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from string import Template
from typing import Any

from .imports import EMPTY_IMPORT_MAP, ImportMap, add_to_import_map, merge_import_maps


@dataclass(frozen=True)
class Fragment:
    content: str
    imports: ImportMap = field(default_factory=lambda: EMPTY_IMPORT_MAP)

    def __str__(self) -> str:
        return self.content


class _FragmentTemplate(Template):
    idpattern = r"[_a-zA-Z0-9]+"


def fragment(template: str, *parts: Any, **named: Any) -> Fragment:
    """Compose a fragment from a template and its parts.

    Placeholders are ``${0}``, ``${1}``... for positional parts and
    ``${name}`` for keyword parts (the unbraced forms work too); ``$$``
    is a literal dollar. Fragment parts contribute their content and
    imports, anything else is stringified.

    Raises:
        KeyError: If the template references a part that was not given.
    """
    values: dict[str, Any] = {str(index): part for index, part in enumerate(parts)}
    values.update(named)

    imports = merge_import_maps(
        value.imports for value in values.values() if isinstance(value, Fragment)
    )
    substitutions = {
        key: value.content if isinstance(value, Fragment) else str(value)
        for key, value in values.items()
    }
    return Fragment(_FragmentTemplate(template).substitute(substitutions), imports)


def merge_fragments(
    fragments: Iterable[Fragment | None],
    join: Callable[[Sequence[str]], str],
) -> Fragment:
    present = [f for f in fragments if f is not None]
    return Fragment(
        join([f.content for f in present]),
        merge_import_maps(f.imports for f in present),
    )


def join_lines(contents: Sequence[str]) -> str:
    return "\n".join(contents)


def join_paragraphs(contents: Sequence[str]) -> str:
    return "\n\n".join(contents)


def add_fragment_imports(
    base: Fragment, module: str, imports: Iterable[str]
) -> Fragment:
    return Fragment(base.content, add_to_import_map(base.imports, module, imports))


def map_fragment_content(base: Fragment, fn: Callable[[str], str]) -> Fragment:
    return Fragment(fn(base.content), base.imports)


def get_export_all_fragment(module: str) -> Fragment:
    return fragment("export * from '${0}';", module)
