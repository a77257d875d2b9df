from __future__ import annotations

import pytest

from idlrender import nodes


def test_named_nodes_store_camel_case_names() -> None:
    account = nodes.AccountNode("my_counter_account")
    field = nodes.StructFieldTypeNode("Last-Updated", nodes.NumberTypeNode("i64"))

    assert account.name == "myCounterAccount"
    assert field.name == "lastUpdated"


def test_nodes_are_frozen() -> None:
    program = nodes.ProgramNode("tally")

    with pytest.raises(AttributeError):
        program.name = "other"  # type: ignore[misc]


def test_node_from_dict_maps_camel_case_keys_and_lists(tally_idl_dict: dict) -> None:
    root = nodes.root_node_from_dict(tally_idl_dict)

    program = root.program
    assert program.public_key.startswith("TaLLy")
    assert [a.name for a in program.accounts] == ["counter"]
    assert isinstance(program.accounts[0].data.fields, tuple)
    assert program.accounts[0].pda == nodes.PdaLinkNode("counter")
    assert program.instructions[0].accounts[0].is_writable is True
    assert program.instructions[0].accounts[1].is_signer is True
    assert program.defined_types[0].type.kind == "enumTypeNode"
    assert program.errors[0].code == 6000
    assert root.additional_programs == ()


def test_node_from_dict_keeps_unknown_kinds_as_unknown_nodes() -> None:
    node = nodes.node_from_dict({"kind": "futureTypeNode", "width": 3})

    assert isinstance(node, nodes.UnknownNode)
    assert node.kind == "futureTypeNode"
    assert node.attributes["width"] == 3


def test_node_from_dict_rejects_missing_required_attributes() -> None:
    with pytest.raises(nodes.InvalidNodeError, match="errorNode"):
        nodes.node_from_dict({"kind": "errorNode", "name": "overflow"})


def test_node_from_dict_rejects_non_node_payload() -> None:
    with pytest.raises(nodes.InvalidNodeError):
        nodes.node_from_dict({"name": "noKind"})


def test_node_from_dict_rejects_kindless_child_nodes() -> None:
    with pytest.raises(nodes.InvalidNodeError, match="'kind'"):
        nodes.node_from_dict({"kind": "programNode", "name": "tally", "accounts": [{"name": "counter"}]})


def test_get_all_helpers_skip_unknown_kinds() -> None:
    root = nodes.root_node_from_dict(
        {
            "kind": "rootNode",
            "program": {
                "kind": "programNode",
                "name": "tally",
                "accounts": [{"kind": "futureAccountNode", "name": "x"}, {"kind": "accountNode", "name": "counter"}],
                "errors": [{"kind": "futureErrorNode"}],
            },
            "additionalPrograms": [{"kind": "futureProgramNode", "name": "other"}],
        }
    )

    assert [p.name for p in nodes.get_all_programs(root)] == ["tally"]
    assert [a.name for a in nodes.get_all_accounts(root)] == ["counter"]
    assert nodes.get_all_errors(root) == ()


def test_root_node_from_dict_wraps_a_bare_program() -> None:
    root = nodes.root_node_from_dict({"kind": "programNode", "name": "tally"})

    assert root.kind == "rootNode"
    assert root.program.name == "tally"


def test_root_node_from_dict_rejects_other_kinds() -> None:
    with pytest.raises(nodes.InvalidNodeError, match="rootNode or programNode"):
        nodes.root_node_from_dict({"kind": "accountNode", "name": "counter"})


def test_root_node_from_json_reports_invalid_json() -> None:
    with pytest.raises(nodes.InvalidNodeError, match="not valid JSON"):
        nodes.root_node_from_json("{not json")


def test_get_all_instructions_with_subs_leaves_only() -> None:
    parent = nodes.InstructionNode(
        "transfer",
        sub_instructions=(nodes.InstructionNode("transferSol"), nodes.InstructionNode("transferToken")),
    )
    program = nodes.ProgramNode("tally", instructions=(parent, nodes.InstructionNode("close")))

    all_names = [i.name for i in nodes.get_all_instructions_with_subs(program)]
    leaf_names = [i.name for i in nodes.get_all_instructions_with_subs(program, leaves_only=True)]

    assert all_names == ["transfer", "transferSol", "transferToken", "close"]
    assert leaf_names == ["transferSol", "transferToken", "close"]


def test_get_all_helpers_cover_additional_programs() -> None:
    root = nodes.RootNode(
        program=nodes.ProgramNode("tally", accounts=(nodes.AccountNode("counter"),)),
        additional_programs=(
            nodes.ProgramNode("token", accounts=(nodes.AccountNode("mint"),)),
        ),
    )

    assert [p.name for p in nodes.get_all_programs(root)] == ["tally", "token"]
    assert [a.name for a in nodes.get_all_accounts(root)] == ["counter", "mint"]


def test_resolve_nested_type_node_strips_wrappers() -> None:
    inner = nodes.StructTypeNode()
    wrapped = nodes.SizePrefixTypeNode(
        nodes.FixedSizeTypeNode(inner, 8), nodes.NumberTypeNode("u32")
    )

    assert nodes.resolve_nested_type_node(wrapped) is inner


def test_is_scalar_enum() -> None:
    scalar = nodes.EnumTypeNode((nodes.EnumEmptyVariantTypeNode("up"),))
    data = nodes.EnumTypeNode(
        (nodes.EnumTupleVariantTypeNode("move", nodes.TupleTypeNode((nodes.NumberTypeNode("u8"),))),)
    )

    assert nodes.is_scalar_enum(scalar)
    assert not nodes.is_scalar_enum(data)
