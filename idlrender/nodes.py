"""Interface tree node types.

Every node is a frozen dataclass carrying a string ``kind`` tag that mirrors
the serialized tree format (``"programNode"``, ``"accountNode"``, ...).
Dispatch throughout the package is done on that tag, never on the Python
class. Named nodes store their name camelCased, the same normalisation the
serialized format applies.

The tree is supplied whole and is never mutated during generation.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar

from .names import camel_case


class Node:
    """Marker base for interface tree nodes."""

    kind: ClassVar[str] = ""


class InvalidNodeError(ValueError):
    """Raised when a serialized node cannot be turned into a tree node."""


def _normalize_name(node: Node) -> None:
    object.__setattr__(node, "name", camel_case(node.name))


# ===--- Number and scalar types ---=== #


@dataclass(frozen=True)
class NumberTypeNode(Node):
    kind: ClassVar[str] = "numberTypeNode"

    format: str
    endian: str = "le"


@dataclass(frozen=True)
class PublicKeyTypeNode(Node):
    kind: ClassVar[str] = "publicKeyTypeNode"


@dataclass(frozen=True)
class BooleanTypeNode(Node):
    kind: ClassVar[str] = "booleanTypeNode"

    size: NumberTypeNode = field(default_factory=lambda: NumberTypeNode("u8"))


@dataclass(frozen=True)
class StringTypeNode(Node):
    kind: ClassVar[str] = "stringTypeNode"

    encoding: str = "utf8"


@dataclass(frozen=True)
class BytesTypeNode(Node):
    kind: ClassVar[str] = "bytesTypeNode"


@dataclass(frozen=True)
class AmountTypeNode(Node):
    kind: ClassVar[str] = "amountTypeNode"

    number: NumberTypeNode
    decimals: int = 0
    unit: str | None = None


@dataclass(frozen=True)
class SolAmountTypeNode(Node):
    kind: ClassVar[str] = "solAmountTypeNode"

    number: NumberTypeNode


@dataclass(frozen=True)
class DateTimeTypeNode(Node):
    kind: ClassVar[str] = "dateTimeTypeNode"

    number: NumberTypeNode


# ===--- Counts ---=== #


@dataclass(frozen=True)
class FixedCountNode(Node):
    kind: ClassVar[str] = "fixedCountNode"

    value: int


@dataclass(frozen=True)
class PrefixedCountNode(Node):
    kind: ClassVar[str] = "prefixedCountNode"

    prefix: NumberTypeNode


@dataclass(frozen=True)
class RemainderCountNode(Node):
    kind: ClassVar[str] = "remainderCountNode"


# ===--- Composite types ---=== #


@dataclass(frozen=True)
class StructFieldTypeNode(Node):
    kind: ClassVar[str] = "structFieldTypeNode"

    name: str
    type: Node
    docs: tuple[str, ...] = ()
    default_value: Node | None = None
    default_value_strategy: str | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class StructTypeNode(Node):
    kind: ClassVar[str] = "structTypeNode"

    fields: tuple[StructFieldTypeNode, ...] = ()


@dataclass(frozen=True)
class TupleTypeNode(Node):
    kind: ClassVar[str] = "tupleTypeNode"

    items: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ArrayTypeNode(Node):
    kind: ClassVar[str] = "arrayTypeNode"

    item: Node
    count: Node = field(default_factory=lambda: PrefixedCountNode(NumberTypeNode("u32")))


@dataclass(frozen=True)
class SetTypeNode(Node):
    kind: ClassVar[str] = "setTypeNode"

    item: Node
    count: Node = field(default_factory=lambda: PrefixedCountNode(NumberTypeNode("u32")))


@dataclass(frozen=True)
class MapTypeNode(Node):
    kind: ClassVar[str] = "mapTypeNode"

    key: Node
    value: Node
    count: Node = field(default_factory=lambda: PrefixedCountNode(NumberTypeNode("u32")))


@dataclass(frozen=True)
class OptionTypeNode(Node):
    kind: ClassVar[str] = "optionTypeNode"

    item: Node
    prefix: NumberTypeNode = field(default_factory=lambda: NumberTypeNode("u8"))
    fixed: bool = False


@dataclass(frozen=True)
class ZeroableOptionTypeNode(Node):
    kind: ClassVar[str] = "zeroableOptionTypeNode"

    item: Node
    zero_value: Node | None = None


@dataclass(frozen=True)
class RemainderOptionTypeNode(Node):
    kind: ClassVar[str] = "remainderOptionTypeNode"

    item: Node


@dataclass(frozen=True)
class EnumEmptyVariantTypeNode(Node):
    kind: ClassVar[str] = "enumEmptyVariantTypeNode"

    name: str
    discriminator: int | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class EnumTupleVariantTypeNode(Node):
    kind: ClassVar[str] = "enumTupleVariantTypeNode"

    name: str
    tuple: Node
    discriminator: int | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class EnumStructVariantTypeNode(Node):
    kind: ClassVar[str] = "enumStructVariantTypeNode"

    name: str
    struct: Node
    discriminator: int | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class EnumTypeNode(Node):
    kind: ClassVar[str] = "enumTypeNode"

    variants: tuple[Node, ...] = ()
    size: NumberTypeNode = field(default_factory=lambda: NumberTypeNode("u8"))


# ===--- Wrapper types ---=== #


@dataclass(frozen=True)
class FixedSizeTypeNode(Node):
    kind: ClassVar[str] = "fixedSizeTypeNode"

    type: Node
    size: int


@dataclass(frozen=True)
class SizePrefixTypeNode(Node):
    kind: ClassVar[str] = "sizePrefixTypeNode"

    type: Node
    prefix: NumberTypeNode


@dataclass(frozen=True)
class HiddenPrefixTypeNode(Node):
    kind: ClassVar[str] = "hiddenPrefixTypeNode"

    type: Node
    prefix: tuple[Node, ...] = ()


@dataclass(frozen=True)
class HiddenSuffixTypeNode(Node):
    kind: ClassVar[str] = "hiddenSuffixTypeNode"

    type: Node
    suffix: tuple[Node, ...] = ()


@dataclass(frozen=True)
class PreOffsetTypeNode(Node):
    kind: ClassVar[str] = "preOffsetTypeNode"

    type: Node
    offset: int
    strategy: str = "relative"


@dataclass(frozen=True)
class PostOffsetTypeNode(Node):
    kind: ClassVar[str] = "postOffsetTypeNode"

    type: Node
    offset: int
    strategy: str = "relative"


@dataclass(frozen=True)
class SentinelTypeNode(Node):
    kind: ClassVar[str] = "sentinelTypeNode"

    type: Node
    sentinel: Node | None = None


WRAPPER_TYPE_KINDS: frozenset[str] = frozenset(
    {
        "fixedSizeTypeNode",
        "sizePrefixTypeNode",
        "hiddenPrefixTypeNode",
        "hiddenSuffixTypeNode",
        "preOffsetTypeNode",
        "postOffsetTypeNode",
        "sentinelTypeNode",
    }
)


# ===--- Values ---=== #


@dataclass(frozen=True)
class StringValueNode(Node):
    kind: ClassVar[str] = "stringValueNode"

    string: str


@dataclass(frozen=True)
class NumberValueNode(Node):
    kind: ClassVar[str] = "numberValueNode"

    number: int | float


@dataclass(frozen=True)
class BooleanValueNode(Node):
    kind: ClassVar[str] = "booleanValueNode"

    boolean: bool


@dataclass(frozen=True)
class BytesValueNode(Node):
    kind: ClassVar[str] = "bytesValueNode"

    encoding: str
    data: str


@dataclass(frozen=True)
class PublicKeyValueNode(Node):
    kind: ClassVar[str] = "publicKeyValueNode"

    public_key: str
    identifier: str | None = None


@dataclass(frozen=True)
class ConstantValueNode(Node):
    kind: ClassVar[str] = "constantValueNode"

    type: Node
    value: Node


@dataclass(frozen=True)
class ResolverValueNode(Node):
    kind: ClassVar[str] = "resolverValueNode"

    name: str
    depends_on: tuple[Node, ...] = ()
    docs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _normalize_name(self)


# ===--- Links ---=== #


@dataclass(frozen=True)
class ProgramLinkNode(Node):
    kind: ClassVar[str] = "programLinkNode"

    name: str

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class PdaLinkNode(Node):
    kind: ClassVar[str] = "pdaLinkNode"

    name: str
    program: ProgramLinkNode | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class DefinedTypeLinkNode(Node):
    kind: ClassVar[str] = "definedTypeLinkNode"

    name: str
    program: ProgramLinkNode | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


LINK_TARGET_KINDS: dict[str, str] = {
    "pdaLinkNode": "pdaNode",
    "definedTypeLinkNode": "definedTypeNode",
    "programLinkNode": "programNode",
}
"""Node kind each link kind resolves to in the LinkableDictionary."""


# ===--- Discriminators ---=== #


@dataclass(frozen=True)
class FieldDiscriminatorNode(Node):
    kind: ClassVar[str] = "fieldDiscriminatorNode"

    name: str
    offset: int = 0

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class SizeDiscriminatorNode(Node):
    kind: ClassVar[str] = "sizeDiscriminatorNode"

    size: int


@dataclass(frozen=True)
class ConstantDiscriminatorNode(Node):
    kind: ClassVar[str] = "constantDiscriminatorNode"

    constant: ConstantValueNode
    offset: int = 0


# ===--- PDAs ---=== #


@dataclass(frozen=True)
class ConstantPdaSeedNode(Node):
    kind: ClassVar[str] = "constantPdaSeedNode"

    type: Node
    value: Node


@dataclass(frozen=True)
class VariablePdaSeedNode(Node):
    kind: ClassVar[str] = "variablePdaSeedNode"

    name: str
    type: Node
    docs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class PdaNode(Node):
    kind: ClassVar[str] = "pdaNode"

    name: str
    seeds: tuple[Node, ...] = ()
    docs: tuple[str, ...] = ()
    program_id: str | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


def constant_pda_seed_node_from_string(encoding: str, value: str) -> ConstantPdaSeedNode:
    return ConstantPdaSeedNode(StringTypeNode(encoding), StringValueNode(value))


# ===--- Program members ---=== #


@dataclass(frozen=True)
class AccountNode(Node):
    kind: ClassVar[str] = "accountNode"

    name: str
    data: Node = field(default_factory=StructTypeNode)
    pda: PdaLinkNode | None = None
    discriminators: tuple[Node, ...] = ()
    docs: tuple[str, ...] = ()
    size: int | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class InstructionAccountNode(Node):
    kind: ClassVar[str] = "instructionAccountNode"

    name: str
    is_writable: bool = False
    is_signer: bool | str = False
    is_optional: bool = False
    docs: tuple[str, ...] = ()
    default_value: Node | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class InstructionArgumentNode(Node):
    kind: ClassVar[str] = "instructionArgumentNode"

    name: str
    type: Node
    docs: tuple[str, ...] = ()
    default_value: Node | None = None
    default_value_strategy: str | None = None

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class InstructionNode(Node):
    kind: ClassVar[str] = "instructionNode"

    name: str
    accounts: tuple[InstructionAccountNode, ...] = ()
    arguments: tuple[InstructionArgumentNode, ...] = ()
    discriminators: tuple[Node, ...] = ()
    docs: tuple[str, ...] = ()
    sub_instructions: tuple[InstructionNode, ...] = ()
    optional_account_strategy: str = "programId"

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class DefinedTypeNode(Node):
    kind: ClassVar[str] = "definedTypeNode"

    name: str
    type: Node
    docs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class ErrorNode(Node):
    kind: ClassVar[str] = "errorNode"

    name: str
    code: int
    message: str
    docs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class ProgramNode(Node):
    kind: ClassVar[str] = "programNode"

    name: str
    public_key: str = ""
    version: str = "0.0.0"
    origin: str | None = None
    docs: tuple[str, ...] = ()
    accounts: tuple[AccountNode, ...] = ()
    instructions: tuple[InstructionNode, ...] = ()
    defined_types: tuple[DefinedTypeNode, ...] = ()
    pdas: tuple[PdaNode, ...] = ()
    errors: tuple[ErrorNode, ...] = ()

    def __post_init__(self) -> None:
        _normalize_name(self)


@dataclass(frozen=True)
class RootNode(Node):
    kind: ClassVar[str] = "rootNode"

    program: ProgramNode
    additional_programs: tuple[ProgramNode, ...] = ()
    standard: str = "codama"
    version: str = "1.0.0"


@dataclass(frozen=True)
class UnknownNode:
    """A serialized node whose kind this package does not model.

    Kept in the tree so visitors route it to their default handler.
    """

    kind: str
    attributes: dict[str, Any] = field(default_factory=dict)


# ===--- Tree helpers ---=== #


def nodes_of_kind(nodes: Iterable[Node | UnknownNode], kind: str) -> tuple[Node, ...]:
    """Keep the nodes tagged ``kind``; unmodelled nodes are skipped."""
    return tuple(n for n in nodes if n.kind == kind)


def get_all_programs(node: Node) -> tuple[ProgramNode, ...]:
    if node.kind == "rootNode":
        return nodes_of_kind((node.program, *node.additional_programs), "programNode")
    if node.kind == "programNode":
        return (node,)
    return ()


def get_all_accounts(node: Node) -> tuple[AccountNode, ...]:
    return tuple(
        a for p in get_all_programs(node) for a in nodes_of_kind(p.accounts, "accountNode")
    )


def get_all_pdas(node: Node) -> tuple[PdaNode, ...]:
    return tuple(
        pda for p in get_all_programs(node) for pda in nodes_of_kind(p.pdas, "pdaNode")
    )


def get_all_defined_types(node: Node) -> tuple[DefinedTypeNode, ...]:
    return tuple(
        t
        for p in get_all_programs(node)
        for t in nodes_of_kind(p.defined_types, "definedTypeNode")
    )


def get_all_errors(node: Node) -> tuple[ErrorNode, ...]:
    return tuple(e for p in get_all_programs(node) for e in nodes_of_kind(p.errors, "errorNode"))


def get_all_instructions_with_subs(
    node: Node, leaves_only: bool = False
) -> tuple[InstructionNode, ...]:
    """Flatten instructions and their sub-instructions depth-first.

    With ``leaves_only`` the parents of sub-instructions are left out, so
    only instructions that can actually be built remain.
    """
    if node.kind == "instructionNode":
        if not node.sub_instructions:
            return (node,)
        nested = tuple(
            i
            for sub in node.sub_instructions
            for i in get_all_instructions_with_subs(sub, leaves_only)
        )
        return nested if leaves_only else (node, *nested)
    return tuple(
        i
        for program in get_all_programs(node)
        for instruction in program.instructions
        for i in get_all_instructions_with_subs(instruction, leaves_only)
    )


def resolve_nested_type_node(type_node: Node) -> Node:
    """Strip size/offset/padding wrappers down to the underlying type."""
    current = type_node
    while current.kind in WRAPPER_TYPE_KINDS:
        current = current.type
    return current


def is_scalar_enum(enum_node: EnumTypeNode) -> bool:
    return all(v.kind == "enumEmptyVariantTypeNode" for v in enum_node.variants)


# ===--- Serialized tree adapter ---=== #

NODE_CLASSES: dict[str, type] = {
    cls.kind: cls
    for cls in (
        NumberTypeNode,
        PublicKeyTypeNode,
        BooleanTypeNode,
        StringTypeNode,
        BytesTypeNode,
        AmountTypeNode,
        SolAmountTypeNode,
        DateTimeTypeNode,
        FixedCountNode,
        PrefixedCountNode,
        RemainderCountNode,
        StructFieldTypeNode,
        StructTypeNode,
        TupleTypeNode,
        ArrayTypeNode,
        SetTypeNode,
        MapTypeNode,
        OptionTypeNode,
        ZeroableOptionTypeNode,
        RemainderOptionTypeNode,
        EnumEmptyVariantTypeNode,
        EnumTupleVariantTypeNode,
        EnumStructVariantTypeNode,
        EnumTypeNode,
        FixedSizeTypeNode,
        SizePrefixTypeNode,
        HiddenPrefixTypeNode,
        HiddenSuffixTypeNode,
        PreOffsetTypeNode,
        PostOffsetTypeNode,
        SentinelTypeNode,
        StringValueNode,
        NumberValueNode,
        BooleanValueNode,
        BytesValueNode,
        PublicKeyValueNode,
        ConstantValueNode,
        ResolverValueNode,
        ProgramLinkNode,
        PdaLinkNode,
        DefinedTypeLinkNode,
        FieldDiscriminatorNode,
        SizeDiscriminatorNode,
        ConstantDiscriminatorNode,
        ConstantPdaSeedNode,
        VariablePdaSeedNode,
        PdaNode,
        AccountNode,
        InstructionAccountNode,
        InstructionArgumentNode,
        InstructionNode,
        DefinedTypeNode,
        ErrorNode,
        ProgramNode,
        RootNode,
    )
}

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_key(key: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", key).lower()


def _convert_value(value: Any) -> Any:
    # Modelled nodes hold no plain objects, so every object is a child node.
    if isinstance(value, dict):
        return node_from_dict(value)
    if isinstance(value, list):
        return tuple(_convert_value(item) for item in value)
    return value


def node_from_dict(data: dict[str, Any]) -> Node | UnknownNode:
    """Build a tree node from its serialized (camelCase, kind-tagged) dict.

    Unknown kinds become ``UnknownNode`` so traversal can still route them
    to a default handler. Keys with no matching field are ignored.

    Raises:
        InvalidNodeError: If ``data`` has no ``kind`` or a known node is
            missing a required attribute.
    """
    if not isinstance(data, dict) or "kind" not in data:
        raise InvalidNodeError(f"Serialized node must be an object with a 'kind': {data!r}")

    kind = data["kind"]
    cls = NODE_CLASSES.get(kind)
    if cls is None:
        return UnknownNode(kind=kind, attributes=dict(data))

    allowed = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key == "kind":
            continue
        name = _snake_key(key)
        if name in allowed:
            kwargs[name] = _convert_value(value)

    try:
        return cls(**kwargs)
    except TypeError as err:
        raise InvalidNodeError(f"Invalid {kind}: {err}") from err


def root_node_from_dict(data: dict[str, Any]) -> RootNode:
    """Load a root node, wrapping a bare program node when given one."""
    node = node_from_dict(data)
    if node.kind == "programNode":
        return RootNode(program=node)
    if node.kind != "rootNode":
        raise InvalidNodeError(f"Expected a rootNode or programNode, got {node.kind}")
    return node


def root_node_from_json(text: str) -> RootNode:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as err:
        raise InvalidNodeError(f"Interface tree is not valid JSON: {err}") from err
    return root_node_from_dict(data)


def load_root_node(path: Path) -> RootNode:
    return root_node_from_json(Path(path).read_text(encoding="utf-8"))
