"""Tree traversal: kind-keyed visitors, the node stack and linkable lookups.

A Visitor is a mapping from node kind to handler plus one mandatory default
handler. ``visit`` dispatches on ``node.kind``; unknown kinds fall through to
the default. Handlers receive a VisitContext so they can recurse with the same
(possibly wrapped) visitor.

The only mutable traversal state is a NodeStack and a LinkableDictionary, both
created per render call and threaded through visitor wrappers, never global.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

from .nodes import (
    LINK_TARGET_KINDS,
    Node,
    get_all_accounts,
    get_all_defined_types,
    get_all_instructions_with_subs,
    get_all_pdas,
    get_all_programs,
    is_scalar_enum,
    resolve_nested_type_node,
)

T = TypeVar("T")

NodePath = tuple[Node, ...]


# ===--- Dispatch ---=== #


class VisitContext(Generic[T]):
    """Handed to every handler; ``visit`` re-dispatches with the same visitor."""

    def __init__(self, visitor: Visitor[T]):
        self.visitor = visitor

    def visit(self, node: Node) -> T:
        return visit(node, self.visitor)


Handler = Callable[[Any, VisitContext], Any]


@dataclass(frozen=True)
class Visitor(Generic[T]):
    handlers: Mapping[str, Handler]
    default: Handler

    def handler_for(self, kind: str) -> Handler:
        return self.handlers.get(kind, self.default)


def visit(node: Node, visitor: Visitor[T]) -> T:
    return visitor.handler_for(node.kind)(node, VisitContext(visitor))


def static_visitor(
    fn: Callable[[Node], T], keys: Iterable[str] = ()
) -> Visitor[T]:
    """A visitor returning ``fn(node)`` for every listed kind and by default."""

    def _handler(node: Node, _ctx: VisitContext) -> T:
        return fn(node)

    return Visitor(handlers={key: _handler for key in keys}, default=_handler)


def extend_visitor(
    visitor: Visitor[T], overrides: Mapping[str, Handler]
) -> Visitor[T]:
    return replace(visitor, handlers={**visitor.handlers, **overrides})


def intercept_visitor(
    visitor: Visitor[T],
    interceptor: Callable[[Node, Callable[[], T]], T],
) -> Visitor[T]:
    """Wrap every handler, including the default, with ``interceptor``.

    The interceptor receives the node and a zero-argument ``proceed``
    callable running the wrapped handler.
    """

    def _wrap(handler: Handler) -> Handler:
        def _intercepted(node: Node, ctx: VisitContext) -> T:
            return interceptor(node, lambda: handler(node, ctx))

        return _intercepted

    return Visitor(
        handlers={kind: _wrap(h) for kind, h in visitor.handlers.items()},
        default=_wrap(visitor.default),
    )


# ===--- Node stack ---=== #


class NodeStack:
    """Ancestry of the node currently being visited, root first."""

    def __init__(self, nodes: Iterable[Node] = ()):
        self._nodes: list[Node] = list(nodes)

    def push(self, node: Node) -> None:
        self._nodes.append(node)

    def pop(self) -> Node | None:
        return self._nodes.pop() if self._nodes else None

    def is_empty(self) -> bool:
        return not self._nodes

    def get_path(self, kind: str | None = None) -> NodePath:
        """Return the current path, checking the last node's kind if given.

        Raises:
            ValueError: If the stack is empty or its top is not ``kind``.
        """
        if not self._nodes:
            raise ValueError("Node stack is empty")
        if kind is not None and self._nodes[-1].kind != kind:
            raise ValueError(
                f"Expected {kind} on top of the node stack, got {self._nodes[-1].kind}"
            )
        return tuple(self._nodes)


def get_last_node_from_path(path: NodePath) -> Node:
    return path[-1]


def find_program_node_from_path(path: NodePath) -> Node | None:
    for node in reversed(path):
        if node.kind == "programNode":
            return node
    return None


def record_node_stack_visitor(visitor: Visitor[T], stack: NodeStack) -> Visitor[T]:
    def _record(node: Node, proceed: Callable[[], T]) -> T:
        stack.push(node)
        try:
            return proceed()
        finally:
            stack.pop()

    return intercept_visitor(visitor, _record)


# ===--- Linkables ---=== #


class LinkableDictionary:
    """Index of linkable nodes keyed by (program name, kind, node name).

    Populated once per run before any lookup. A missing entry means the
    link is unresolved; callers omit whatever depends on it.
    """

    def __init__(self):
        self._entries: dict[tuple[str, str, str], Node] = {}

    def record(self, program_name: str, node: Node) -> None:
        self._entries.setdefault((program_name, node.kind, node.name), node)

    def record_tree(self, node: Node) -> None:
        for program in get_all_programs(node):
            self.record(program.name, program)
            for member in (
                *get_all_pdas(program),
                *get_all_accounts(program),
                *get_all_defined_types(program),
                *get_all_instructions_with_subs(program),
            ):
                self.record(program.name, member)

    def get(self, path: NodePath, link: Node) -> Node | None:
        target_kind = LINK_TARGET_KINDS.get(link.kind)
        if target_kind is None:
            return None
        if link.kind == "programLinkNode":
            return self._entries.get((link.name, target_kind, link.name))

        program_link = getattr(link, "program", None)
        if program_link is not None:
            program_name = program_link.name
        else:
            program = find_program_node_from_path(path)
            if program is None:
                return None
            program_name = program.name
        return self._entries.get((program_name, target_kind, link.name))

    def __len__(self) -> int:
        return len(self._entries)


def record_linkables_on_first_visit_visitor(
    visitor: Visitor[T], linkables: LinkableDictionary
) -> Visitor[T]:
    """Populate ``linkables`` from the whole tree on the first dispatch.

    The first visited node is the entry point of the traversal, so every
    link is resolvable before any handler below it runs.
    """
    state = {"recorded": False}

    def _record(node: Node, proceed: Callable[[], T]) -> T:
        if not state["recorded"]:
            state["recorded"] = True
            linkables.record_tree(node)
        return proceed()

    return intercept_visitor(visitor, _record)


# ===--- Type strings ---=== #

BIGINT_NUMBER_FORMATS = frozenset({"u64", "u128", "i64", "i128"})


def _passthrough(attr: str) -> Handler:
    return lambda node, ctx: ctx.visit(getattr(node, attr))


def _option(node: Node, ctx: VisitContext) -> str:
    return f"Option<{ctx.visit(resolve_nested_type_node(node.item))}>"


def _enum(node: Node, ctx: VisitContext) -> str:
    if is_scalar_enum(node):
        return " | ".join(f"'{v.name}'" for v in node.variants)
    return " | ".join(ctx.visit(v) for v in node.variants)


def _struct(node: Node, ctx: VisitContext) -> str:
    if not node.fields:
        return "{}"
    return "{ " + "; ".join(f"{f.name}: {ctx.visit(f)}" for f in node.fields) + " }"


TYPE_STRING_HANDLERS: dict[str, Handler] = {
    "amountTypeNode": lambda node, ctx: "bigint",
    "arrayTypeNode": lambda node, ctx: f"Array<{ctx.visit(node.item)}>",
    "booleanTypeNode": lambda node, ctx: "boolean",
    "bytesTypeNode": lambda node, ctx: "Uint8Array",
    "dateTimeTypeNode": lambda node, ctx: "bigint",
    "definedTypeLinkNode": lambda node, ctx: node.name,
    "enumEmptyVariantTypeNode": lambda node, ctx: node.name,
    "enumStructVariantTypeNode": lambda node, ctx: node.name,
    "enumTupleVariantTypeNode": lambda node, ctx: node.name,
    "enumTypeNode": _enum,
    "fixedSizeTypeNode": _passthrough("type"),
    "hiddenPrefixTypeNode": _passthrough("type"),
    "hiddenSuffixTypeNode": _passthrough("type"),
    "mapTypeNode": lambda node, ctx: f"Map<{ctx.visit(node.key)}, {ctx.visit(node.value)}>",
    "numberTypeNode": lambda node, ctx: (
        "bigint" if node.format in BIGINT_NUMBER_FORMATS else "number"
    ),
    "optionTypeNode": _option,
    "postOffsetTypeNode": _passthrough("type"),
    "preOffsetTypeNode": _passthrough("type"),
    "publicKeyTypeNode": lambda node, ctx: "Address",
    "remainderOptionTypeNode": _option,
    "sentinelTypeNode": _passthrough("type"),
    "setTypeNode": lambda node, ctx: f"Set<{ctx.visit(node.item)}>",
    "sizePrefixTypeNode": _passthrough("type"),
    "solAmountTypeNode": lambda node, ctx: "bigint",
    "stringTypeNode": lambda node, ctx: "string",
    "structFieldTypeNode": _passthrough("type"),
    "structTypeNode": _struct,
    "tupleTypeNode": lambda node, ctx: "[" + ", ".join(ctx.visit(i) for i in node.items) + "]",
    "zeroableOptionTypeNode": _option,
}


def get_type_string_visitor() -> Visitor[str]:
    """Render type nodes as the TypeScript types the generated client uses."""
    return extend_visitor(static_visitor(lambda node: "unknown"), TYPE_STRING_HANDLERS)


# ===--- Byte sizes ---=== #

NUMBER_FORMAT_SIZES: dict[str, int] = {
    "u8": 1,
    "i8": 1,
    "u16": 2,
    "i16": 2,
    "u32": 4,
    "i32": 4,
    "f32": 4,
    "u64": 8,
    "i64": 8,
    "f64": 8,
    "u128": 16,
    "i128": 16,
}
"""Fixed encoded sizes; formats absent here (e.g. shortU16) are variable."""


def _sum_sizes(sizes: Iterable[int | None]) -> int | None:
    total = 0
    for size in sizes:
        if size is None:
            return None
        total += size
    return total


@dataclass
class _ByteSizeState:
    linkables: LinkableDictionary
    path: NodePath
    resolving: set[str] = field(default_factory=set)


def get_byte_size_visitor(
    linkables: LinkableDictionary, path: NodePath = ()
) -> Visitor[int | None]:
    """Compute the fixed encoded size of a type node, or None if variable.

    Defined type links are followed through ``linkables`` using ``path`` to
    find the enclosing program. Unresolved or self-referencing links count
    as variable.
    """
    state = _ByteSizeState(linkables=linkables, path=path)

    def _count_items(count: Node, item_size: int | None) -> int | None:
        if count.kind != "fixedCountNode" or item_size is None:
            return None
        return count.value * item_size

    def _defined_type_link(node: Node, ctx: VisitContext) -> int | None:
        if node.name in state.resolving:
            return None
        target = state.linkables.get(state.path, node)
        if target is None:
            return None
        state.resolving.add(node.name)
        try:
            return ctx.visit(target.type)
        finally:
            state.resolving.discard(node.name)

    def _enum_size(node: Node, ctx: VisitContext) -> int | None:
        prefix = ctx.visit(node.size)
        if is_scalar_enum(node):
            return prefix
        variant_sizes = {ctx.visit(v) for v in node.variants}
        if prefix is None or len(variant_sizes) != 1 or None in variant_sizes:
            return None
        return prefix + variant_sizes.pop()

    def _option_size(node: Node, ctx: VisitContext) -> int | None:
        if not node.fixed:
            return None
        return _sum_sizes((ctx.visit(node.prefix), ctx.visit(node.item)))

    def _offset_size(node: Node, ctx: VisitContext) -> int | None:
        size = ctx.visit(node.type)
        if size is None or node.strategy != "padded":
            return size
        return size + node.offset

    handlers: dict[str, Handler] = {
        "amountTypeNode": lambda node, ctx: ctx.visit(node.number),
        "arrayTypeNode": lambda node, ctx: _count_items(node.count, ctx.visit(node.item)),
        "booleanTypeNode": lambda node, ctx: ctx.visit(node.size),
        "dateTimeTypeNode": lambda node, ctx: ctx.visit(node.number),
        "definedTypeLinkNode": _defined_type_link,
        "enumEmptyVariantTypeNode": lambda node, ctx: 0,
        "enumStructVariantTypeNode": lambda node, ctx: ctx.visit(node.struct),
        "enumTupleVariantTypeNode": lambda node, ctx: ctx.visit(node.tuple),
        "enumTypeNode": _enum_size,
        "fixedSizeTypeNode": lambda node, ctx: node.size,
        "mapTypeNode": lambda node, ctx: _count_items(
            node.count, _sum_sizes((ctx.visit(node.key), ctx.visit(node.value)))
        ),
        "numberTypeNode": lambda node, ctx: NUMBER_FORMAT_SIZES.get(node.format),
        "optionTypeNode": _option_size,
        "postOffsetTypeNode": _offset_size,
        "preOffsetTypeNode": _offset_size,
        "publicKeyTypeNode": lambda node, ctx: 32,
        "setTypeNode": lambda node, ctx: _count_items(node.count, ctx.visit(node.item)),
        "solAmountTypeNode": lambda node, ctx: ctx.visit(node.number),
        "structFieldTypeNode": lambda node, ctx: ctx.visit(node.type),
        "structTypeNode": lambda node, ctx: _sum_sizes(ctx.visit(f) for f in node.fields),
        "tupleTypeNode": lambda node, ctx: _sum_sizes(ctx.visit(i) for i in node.items),
        "zeroableOptionTypeNode": lambda node, ctx: ctx.visit(node.item),
    }
    return extend_visitor(static_visitor(lambda node: None), handlers)
