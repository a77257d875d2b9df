"""Import maps, their merge rule and module resolution.

An ImportMap is keyed by a module key (a logical alias such as
``"solanaAddresses"`` while fragments are being built, a concrete module
specifier once resolved) and then by the identifier the generated code uses.
Maps are read-only; every operation returns a new map.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

# ===--- Import map ---=== #


@dataclass(frozen=True)
class ImportInfo:
    """One imported symbol.

    Attributes:
        imported_identifier: Name exported by the module.
        is_type: True for a type-only import (``import { type X }``).
        used_identifier: Local name; differs from imported_identifier when
            the import is aliased (``X as Y``).
    """

    imported_identifier: str
    is_type: bool
    used_identifier: str

    def render(self) -> str:
        prefix = "type " if self.is_type else ""
        if self.used_identifier == self.imported_identifier:
            return f"{prefix}{self.imported_identifier}"
        return f"{prefix}{self.imported_identifier} as {self.used_identifier}"


ImportMap = Mapping[str, Mapping[str, ImportInfo]]

EMPTY_IMPORT_MAP: ImportMap = MappingProxyType({})

_IMPORT_INPUT_RE = re.compile(r"^(type )?([^ ]+)(?: as (.+))?$")


def _freeze(modules: Mapping[str, Mapping[str, ImportInfo]]) -> ImportMap:
    return MappingProxyType(
        {module: MappingProxyType(dict(symbols)) for module, symbols in modules.items() if symbols}
    )


def parse_import_input(raw: str) -> ImportInfo:
    """Parse ``"name"``, ``"type Name"`` or ``"name as alias"``.

    Raises:
        ValueError: If ``raw`` is empty or does not match the import syntax.
    """
    match = _IMPORT_INPUT_RE.match(raw.strip())
    if not match:
        raise ValueError(f"Invalid import input: {raw!r}")
    is_type, imported, used = match.groups()
    return ImportInfo(
        imported_identifier=imported,
        is_type=bool(is_type),
        used_identifier=used or imported,
    )


def _should_replace(earlier: ImportInfo | None, later: ImportInfo) -> bool:
    if earlier is None:
        return True
    return (
        earlier.imported_identifier == later.imported_identifier
        and earlier.is_type
        and not later.is_type
    )


def merge_import_maps(maps: Iterable[ImportMap | None]) -> ImportMap:
    """Merge import maps left to right.

    A later entry for the same (module, used identifier) replaces the
    earlier one only when it upgrades a type-only import of the same
    imported identifier to a value import. Otherwise the earliest entry
    is kept.
    """
    merged: dict[str, dict[str, ImportInfo]] = {}
    for import_map in maps:
        if not import_map:
            continue
        for module, symbols in import_map.items():
            current = merged.setdefault(module, {})
            for used, info in symbols.items():
                if _should_replace(current.get(used), info):
                    current[used] = info
    return _freeze(merged)


def add_to_import_map(
    import_map: ImportMap, module: str, imports: Iterable[str | ImportInfo]
) -> ImportMap:
    parsed = [i if isinstance(i, ImportInfo) else parse_import_input(i) for i in imports]
    addition = {module: {info.used_identifier: info for info in parsed}}
    return merge_import_maps([import_map, _freeze(addition)])


def create_import_map(
    module: str | None = None, imports: Iterable[str | ImportInfo] = ()
) -> ImportMap:
    if module is None:
        return EMPTY_IMPORT_MAP
    return add_to_import_map(EMPTY_IMPORT_MAP, module, imports)


# ===--- Module resolution ---=== #


class ModuleResolutionStrategy(str, Enum):
    """How logical aliases become concrete module specifiers."""

    GROUPED_ROOT = "grouped-root"
    GRANULAR = "granular"
    CALLER_RELATIVE = "caller-relative"


DEFAULT_CLIENT_PACKAGE = "../"
CLIENT_ALIAS = "generatedClient"
REACT_ALIAS = "react"
ROOT_PACKAGE = "@solana/kit"

GRANULAR_MODULES: dict[str, str] = {
    "solanaAccounts": "@solana/accounts",
    "solanaAddresses": "@solana/addresses",
    "solanaCodecsCore": "@solana/codecs",
    "solanaFunctional": "@solana/functional",
    "solanaKeys": "@solana/keys",
    "solanaPrograms": "@solana/programs",
    "solanaRpc": "@solana/rpc",
    "solanaRpcSubscriptions": "@solana/rpc-subscriptions",
    "solanaRpcTypes": "@solana/rpc-types",
    "solanaSigners": "@solana/signers",
    "solanaTransactionConfirmation": "@solana/transaction-confirmation",
    "solanaTransactionMessages": "@solana/transaction-messages",
    "solanaTransactions": "@solana/transactions",
}
"""Capability alias -> its standalone package."""


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(".")


def rebase_relative_specifier(specifier: str, depth: int) -> str:
    """Re-anchor a relative specifier for a file ``depth`` levels deeper.

    ``"../"`` at depth 1 becomes ``"../../"``; ``"./client"`` becomes
    ``"../client"``. Absolute specifiers are returned unchanged.
    """
    if depth <= 0 or not is_relative_specifier(specifier):
        return specifier
    up = "../" * depth
    if specifier in (".", "./"):
        return up
    if specifier.startswith("./"):
        return up + specifier[2:]
    return up + specifier


@dataclass(frozen=True)
class ModuleResolver:
    """Resolve logical aliases for one output file.

    Attributes:
        strategy: Module resolution strategy for capability aliases.
        client_package: Specifier of the generated JS client, relative to
            the generated root when it starts with ``.``.
        depth: Directory depth of the output file below the generated root.
    """

    strategy: ModuleResolutionStrategy = ModuleResolutionStrategy.GROUPED_ROOT
    client_package: str = DEFAULT_CLIENT_PACKAGE
    depth: int = 0

    def at_depth(self, depth: int) -> ModuleResolver:
        return ModuleResolver(self.strategy, self.client_package, depth)

    def client_specifier(self) -> str:
        return rebase_relative_specifier(self.client_package, self.depth)

    def resolve_module(self, alias: str) -> str:
        if alias == REACT_ALIAS:
            return "react"
        if alias == CLIENT_ALIAS:
            return self.client_specifier()
        if alias not in GRANULAR_MODULES:
            return alias
        if self.strategy == ModuleResolutionStrategy.GRANULAR:
            return GRANULAR_MODULES[alias]
        if self.strategy == ModuleResolutionStrategy.CALLER_RELATIVE:
            return self.client_specifier()
        return ROOT_PACKAGE

    def resolve(self, import_map: ImportMap) -> ImportMap:
        """Re-key ``import_map`` by concrete specifiers.

        Aliases landing on the same specifier are merged with the usual
        type/value tie-break, in alias order.
        """
        return merge_import_maps(
            _freeze({self.resolve_module(alias): symbols})
            for alias, symbols in sorted(import_map.items())
        )


# ===--- Serialization ---=== #


def import_map_to_string(
    import_map: ImportMap, resolver: ModuleResolver | None = None
) -> str:
    """Render import statements, one per module.

    Relative specifiers come first, then absolute ones; each group and the
    symbols inside a statement are sorted case-sensitively.
    """
    resolved = resolver.resolve(import_map) if resolver else import_map
    specifiers = sorted(
        resolved, key=lambda specifier: (not is_relative_specifier(specifier), specifier)
    )
    lines = []
    for specifier in specifiers:
        symbols = resolved[specifier]
        rendered = ", ".join(symbols[used].render() for used in sorted(symbols))
        lines.append(f"import {{ {rendered} }} from '{specifier}';")
    return "\n".join(lines)
