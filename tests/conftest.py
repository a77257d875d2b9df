import json
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

PROJECT_DIR = Path(__file__).resolve().parent.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from idlrender import nodes  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def counter_account(pda: str | None = None, **overrides: object) -> nodes.AccountNode:
    fields = (
        nodes.StructFieldTypeNode("count", nodes.NumberTypeNode("u64")),
        nodes.StructFieldTypeNode("authority", nodes.PublicKeyTypeNode()),
    )
    kwargs: dict[str, object] = {
        "name": "counter",
        "data": nodes.StructTypeNode(fields),
        "pda": nodes.PdaLinkNode(pda) if pda else None,
    }
    kwargs.update(overrides)
    return nodes.AccountNode(**kwargs)


def counter_pda(variable: bool = True) -> nodes.PdaNode:
    seeds: tuple[nodes.Node, ...] = (nodes.constant_pda_seed_node_from_string("utf8", "counter"),)
    if variable:
        seeds += (nodes.VariablePdaSeedNode("authority", nodes.PublicKeyTypeNode()),)
    return nodes.PdaNode("counter", seeds=seeds)


def increment_instruction() -> nodes.InstructionNode:
    return nodes.InstructionNode(
        "increment",
        accounts=(
            nodes.InstructionAccountNode("counter", is_writable=True),
            nodes.InstructionAccountNode("authority", is_signer=True),
        ),
        arguments=(nodes.InstructionArgumentNode("amount", nodes.NumberTypeNode("u64")),),
        docs=("Adds amount to the counter.",),
    )


@pytest.fixture
def make_root() -> Callable[..., nodes.RootNode]:
    def _make_root(**program_fields: object) -> nodes.RootNode:
        program_fields.setdefault("public_key", "TaLLy11111111111111111111111111111111111111")
        return nodes.RootNode(program=nodes.ProgramNode("tally", **program_fields))

    return _make_root


@pytest.fixture
def tally_root(make_root: Callable[..., nodes.RootNode]) -> nodes.RootNode:
    return make_root(
        accounts=(counter_account(pda="counter"),),
        instructions=(increment_instruction(),),
        pdas=(counter_pda(),),
        defined_types=(
            nodes.DefinedTypeNode(
                "direction",
                nodes.EnumTypeNode(
                    (nodes.EnumEmptyVariantTypeNode("up"), nodes.EnumEmptyVariantTypeNode("down"))
                ),
            ),
        ),
        errors=(nodes.ErrorNode("overflow", 6000, "Counter overflow"),),
    )


@pytest.fixture
def tally_idl_path() -> Path:
    return FIXTURES_DIR / "tally_idl.json"


@pytest.fixture
def tally_idl_dict(tally_idl_path: Path) -> dict[str, object]:
    return json.loads(tally_idl_path.read_text(encoding="utf-8"))


@pytest.fixture
def write_idl(tmp_path: Path) -> Callable[[object], Path]:
    def _write_idl(data: object, name: str = "idl.json") -> Path:
        path = tmp_path / name
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return path

    return _write_idl
