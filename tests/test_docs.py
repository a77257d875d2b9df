from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from conftest import counter_account
from idlrender import nodes
from idlrender.docs import (
    DocsRenderOptions,
    DocsRenderScope,
    get_account_doc_fragment,
    get_docs_render_map,
    get_error_doc_fragment,
    get_instruction_doc_fragment,
    get_pda_doc_fragment,
    get_program_overview_fragment,
    get_render_map_visitor,
    get_type_doc_fragment,
    render_docs,
)
from idlrender.names import CLIENT_NAME_TRANSFORMERS, get_name_api, template_name_transformer
from idlrender.render_map import FormatError
from idlrender.visitors import LinkableDictionary, visit


def _scope(package_name: str = "my-program-client") -> DocsRenderScope:
    return DocsRenderScope(
        name_api=get_name_api(CLIENT_NAME_TRANSFORMERS),
        package_name=package_name,
    )


# ===--- Scenarios ---=== #


def test_t_01_single_account_program_renders_one_account_page(make_root) -> None:
    root = make_root(accounts=(counter_account(),))

    render_map = get_docs_render_map(root)

    assert sorted(render_map) == ["accounts/counter.md", "index.md"]
    page = render_map["accounts/counter.md"].content
    assert "| `count` | `bigint` |" in page
    assert "| `authority` | `Address` |" in page
    assert len([line for line in page.splitlines() if line.startswith("| `")]) == 2
    assert "import { decodeCounter, fetchCounter } from 'my-program-client';" in page
    assert "decodeCounter" in render_map["accounts/counter.md"].imports["my-program-client"]


def test_t_02_empty_program_renders_only_the_overview(make_root) -> None:
    render_map = get_docs_render_map(make_root())

    assert list(render_map) == ["index.md"]
    page = render_map["index.md"].content
    assert "## Installation" in page
    assert "npm install my-program-client" in page
    for heading in ("## Accounts", "## Instructions", "## PDAs", "## Errors"):
        assert heading not in page


def test_t_03_full_program_page_set(tally_root) -> None:
    render_map = get_docs_render_map(tally_root)

    assert sorted(render_map) == [
        "accounts/counter.md",
        "errors.md",
        "index.md",
        "instructions/increment.md",
        "pdas/counter.md",
        "types/direction.md",
    ]
    assert all(frag.content.endswith("\n") for frag in render_map.values())
    assert all(not frag.content.endswith("\n\n") for frag in render_map.values())


def test_t_04_rendering_is_deterministic(tally_root) -> None:
    first = get_docs_render_map(tally_root)
    second = get_docs_render_map(tally_root)

    assert {p: f.content for p, f in first.items()} == {p: f.content for p, f in second.items()}


def test_t_05_program_node_can_be_rendered_directly(tally_root) -> None:
    render_map = visit(tally_root.program, get_render_map_visitor())

    assert "index.md" in render_map
    assert "accounts/counter.md" in render_map


def test_t_06_unknown_node_kinds_render_nothing(make_root) -> None:
    root = make_root(
        accounts=(nodes.UnknownNode("futureAccountNode", {"name": "x"}), counter_account()),
        errors=(nodes.UnknownNode("futureErrorNode"),),
    )

    render_map = get_docs_render_map(root)

    assert sorted(render_map) == ["accounts/counter.md", "index.md"]
    overview = render_map["index.md"].content
    assert "[Counter](accounts/counter.md)" in overview
    assert "## Errors" not in overview


# ===--- Page builders ---=== #


def test_account_page_sections(tally_idl_path: Path) -> None:
    root = nodes.load_root_node(tally_idl_path)
    program = root.program
    scope = _scope()
    scope.linkables.record_tree(root)
    account = program.accounts[0]

    page = get_account_doc_fragment(account, scope, (root, program, account)).content

    assert page.startswith("# Counter\n\nA counter owned by one authority.")
    assert "## Size\n\n40 bytes" in page
    assert "| size | 40 | 0 |" in page
    assert "const account = await fetchCounter(rpc, address);" in page
    assert "const maybeAccount = await fetchMaybeCounter(rpc, address);" in page
    assert "const accounts = await fetchAllCounter(rpc, addresses);" in page


def test_account_page_reports_variable_size() -> None:
    account = nodes.AccountNode(
        "note",
        data=nodes.StructTypeNode(
            (nodes.StructFieldTypeNode("text", nodes.SizePrefixTypeNode(nodes.StringTypeNode(), nodes.NumberTypeNode("u32"))),)
        ),
    )

    page = get_account_doc_fragment(account, _scope()).content

    assert "## Size\n\nVariable" in page


def test_account_fields_table_adds_description_column_when_documented() -> None:
    account = counter_account(
        data=nodes.StructTypeNode(
            (nodes.StructFieldTypeNode("count", nodes.NumberTypeNode("u64"), docs=("Running total.",)),)
        )
    )

    page = get_account_doc_fragment(account, _scope()).content

    assert "| Field | Type | Description |" in page
    assert "| `count` | `bigint` | Running total. |" in page


def test_instruction_page(tally_root) -> None:
    instruction = tally_root.program.instructions[0]

    page = get_instruction_doc_fragment(instruction, _scope()).content

    assert page.startswith("# Increment\n\nAdds amount to the counter.")
    assert "import { getIncrementInstruction } from 'my-program-client';" in page
    assert "| `counter` |  | ✅ |  |" in page
    assert "| `authority` | ✅ |  |  |" in page
    assert "| `amount` | `bigint` |" in page
    assert "  counter: address('...'),\n  authority: signer,\n  amount: value" in page
    assert "import { pipe } from '@solana/kit';" in page


def test_instruction_page_hides_resolver_defaulted_arguments() -> None:
    instruction = nodes.InstructionNode(
        "close",
        arguments=(
            nodes.InstructionArgumentNode(
                "bump", nodes.NumberTypeNode("u8"), default_value=nodes.ResolverValueNode("resolveBump")
            ),
        ),
    )

    page = get_instruction_doc_fragment(instruction, _scope()).content

    assert "## Arguments" not in page
    assert "## Accounts" not in page
    assert "bump" not in page


def test_pda_page(tally_root) -> None:
    page = get_pda_doc_fragment(tally_root.program.pdas[0], _scope()).content

    assert "| (constant) | - | constant |" in page
    assert "| `authority` | `Address` | variable |" in page
    assert "const [address] = await findCounterPda({ authority });" in page


def test_pda_page_without_variable_seeds() -> None:
    pda = nodes.PdaNode("config", seeds=(nodes.constant_pda_seed_node_from_string("utf8", "config"),))

    page = get_pda_doc_fragment(pda, _scope()).content

    assert "const [address] = await findConfigPda({});" in page


def test_scalar_enum_type_page(tally_root) -> None:
    page = get_type_doc_fragment(tally_root.program.defined_types[0], _scope()).content

    assert page.startswith("# Direction")
    assert "import { type Direction, getDirectionDecoder, getDirectionEncoder } from 'my-program-client';" in page
    assert "| `up` | 0 |" in page
    assert "| `down` | 1 |" in page
    assert "const encoder = getDirectionEncoder();" in page


def test_data_enum_type_page() -> None:
    defined = nodes.DefinedTypeNode(
        "action",
        nodes.EnumTypeNode(
            (
                nodes.EnumEmptyVariantTypeNode("idle"),
                nodes.EnumTupleVariantTypeNode("step", nodes.TupleTypeNode((nodes.NumberTypeNode("u8"),))),
                nodes.EnumStructVariantTypeNode(
                    "jump",
                    nodes.StructTypeNode((nodes.StructFieldTypeNode("height", nodes.NumberTypeNode("u16")),)),
                ),
            )
        ),
    )

    page = get_type_doc_fragment(defined, _scope()).content

    assert "- `idle`" in page
    assert "- `step` — [number]" in page
    assert "- `jump` — { `height: number` }" in page


def test_alias_type_page() -> None:
    defined = nodes.DefinedTypeNode("owners", nodes.ArrayTypeNode(nodes.PublicKeyTypeNode()))

    page = get_type_doc_fragment(defined, _scope()).content

    assert "## Type\n\n`Array<Address>`" in page


def test_program_overview(tally_root) -> None:
    scope = _scope()
    scope.linkables.record_tree(tally_root)

    page = get_program_overview_fragment(tally_root.program, scope, (tally_root, tally_root.program)).content

    assert page.startswith("# Tally\n\nProgram address: `TALLY_PROGRAM_ADDRESS`")
    assert "| [Counter](accounts/counter.md) | 40 bytes |" in page
    assert "| [Increment](instructions/increment.md) | Adds amount to the counter. |" in page
    assert "| [Counter](pdas/counter.md) | 2 seeds |" in page
    assert "| [Direction](types/direction.md) | enum |" in page
    assert "This program defines 1 error. See [Errors](errors.md)." in page


def test_error_page(tally_root) -> None:
    frag = get_error_doc_fragment(tally_root.program, _scope())

    assert frag is not None
    assert frag.content.startswith("# Tally Errors")
    assert "| 0x1770 (6000) | `overflow` | Counter overflow |" in frag.content
    assert "if (isTallyError(error, transactionMessage)) {" in frag.content
    assert sorted(frag.imports["my-program-client"]) == ["getTallyErrorMessage", "isTallyError"]


def test_error_table_cells_stay_on_one_row(make_root) -> None:
    root = make_root(errors=(nodes.ErrorNode("badInput", 6001, "Expected a | b\nor c"),))

    frag = get_error_doc_fragment(root.program, _scope())

    assert "| 0x1771 (6001) | `badInput` | Expected a \\| b or c |" in frag.content


def test_error_page_absent_without_errors(make_root) -> None:
    assert get_error_doc_fragment(make_root().program, _scope()) is None


# ===--- Options ---=== #


def test_package_name_and_name_overrides(make_root) -> None:
    root = make_root(accounts=(counter_account(),))
    options = DocsRenderOptions(
        package_name="@acme/tally",
        name_transformers={"accountFetchFunction": template_name_transformer("load{pascalCase}")},
    )

    page = get_docs_render_map(root, options)["accounts/counter.md"].content

    assert "import { decodeCounter, loadCounter } from '@acme/tally';" in page


def test_unknown_name_role_is_rejected(make_root) -> None:
    options = DocsRenderOptions(name_transformers={"accountHook": template_name_transformer("x")})

    with pytest.raises(ValueError, match="accountHook"):
        get_docs_render_map(make_root(), options)


def test_scope_has_its_own_linkables() -> None:
    assert _scope().linkables is not _scope().linkables
    assert isinstance(_scope().linkables, LinkableDictionary)


# ===--- Emission ---=== #


def test_render_docs_replaces_stale_pages(tmp_path: Path, tally_root) -> None:
    docs_dir = tmp_path / "docs"
    docs_dir.mkdir()
    (docs_dir / "stale.md").write_text("old", encoding="utf-8")

    result = render_docs(tally_root, tmp_path)

    assert not (docs_dir / "stale.md").exists()
    assert (docs_dir / "accounts" / "counter.md").is_file()
    assert [f.filename for f in result.files] == sorted(f.filename for f in result.files)
    assert result.output_dir == docs_dir


def test_render_docs_formatter_failure_keeps_existing_pages(tmp_path: Path, tally_root) -> None:
    docs_dir = tmp_path / "docs"
    docs_dir.mkdir()
    (docs_dir / "stale.md").write_text("old", encoding="utf-8")
    options = DocsRenderOptions(format_command=shlex.join([sys.executable, "-c", "raise SystemExit(1)"]))

    with pytest.raises(FormatError):
        render_docs(tally_root, tmp_path, options)

    assert [p.name for p in docs_dir.iterdir()] == ["stale.md"]


@pytest.mark.parametrize("generated_folder", [".", "..", ""])
def test_render_docs_refuses_to_clear_the_package_folder(
    tmp_path: Path, tally_root, generated_folder: str
) -> None:
    package = tmp_path / "pkg"
    package.mkdir()
    (package / "package.json").write_text("{}", encoding="utf-8")
    (tmp_path / "sibling.txt").write_text("keep", encoding="utf-8")

    with pytest.raises(ValueError, match="Generated folder"):
        render_docs(tally_root, package, DocsRenderOptions(generated_folder=generated_folder))

    assert (package / "package.json").is_file()
    assert (tmp_path / "sibling.txt").is_file()
