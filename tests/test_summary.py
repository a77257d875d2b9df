from __future__ import annotations

from pathlib import Path

import pytest

from idlrender import nodes
from idlrender.render_map import FileWriteResult, RenderWriteResult
from idlrender.summary import (
    GenerationSummary,
    NodeCounts,
    build_generation_summary,
    build_node_counts,
    format_generation_summary,
    print_generation_summary,
)


def _file(filename: str, line_count: int) -> FileWriteResult:
    return FileWriteResult(
        filename=filename,
        path=Path("/out") / filename,
        line_count=line_count,
        byte_count=line_count * 10,
    )


def _summary(files: tuple[FileWriteResult, ...] = ()) -> GenerationSummary:
    return GenerationSummary(
        command_label="Documentation",
        program_label="tally 0.1.0",
        source_label="idl.json",
        output_dir="out/docs",
        counts=NodeCounts(programs=1, accounts=2, instructions=3, pdas=1, defined_types=0, errors=4),
        files=files,
    )


def test_t_01_build_node_counts_counts_leaf_instructions(make_root) -> None:
    parent = nodes.InstructionNode(
        "transfer", sub_instructions=(nodes.InstructionNode("a"), nodes.InstructionNode("b"))
    )
    root = make_root(
        accounts=(nodes.AccountNode("counter"),),
        instructions=(parent, nodes.InstructionNode("close")),
        errors=(nodes.ErrorNode("overflow", 6000, "Counter overflow"),),
    )

    assert build_node_counts(root) == NodeCounts(
        programs=1, accounts=1, instructions=3, pdas=0, defined_types=0, errors=1
    )


def test_t_02_build_generation_summary_copies_metadata(tally_root) -> None:
    files = (_file("index.md", 10), _file("accounts/counter.md", 40))
    write_result = RenderWriteResult(output_dir=Path("out/docs"), files=files)

    summary = build_generation_summary("docs", tally_root, "idl.json", write_result)

    assert summary.command_label == "Documentation"
    assert summary.program_label == "tally 0.0.0"
    assert summary.source_label == "idl.json"
    assert summary.output_dir == str(Path("out/docs"))
    assert summary.files == files
    assert summary.counts.pdas == 1


def test_t_03_hooks_command_label(tally_root) -> None:
    write_result = RenderWriteResult(output_dir=Path("out"), files=())

    assert build_generation_summary("hooks", tally_root, "x", write_result).command_label == "React hooks"


def test_t_04_format_generation_summary_emits_sections_in_order() -> None:
    text = format_generation_summary(_summary((_file("index.md", 12), _file("accounts/counter.md", 1234))))

    assert text == (
        "Documentation generated:\n"
        "\n"
        "  Program:    tally 0.1.0\n"
        "  Source:     idl.json\n"
        "  Output:     out/docs\n"
        "\n"
        "  Interface:\n"
        "    Programs:          1\n"
        "    Accounts:          2\n"
        "    Instructions:      3\n"
        "    PDAs:              1\n"
        "    Types:             0\n"
        "    Errors:            4\n"
        "\n"
        "  Files written:\n"
        "    index.md                 12 lines\n"
        "    accounts/counter.md   1,234 lines\n"
        "\n"
        "  Total: 1,246 lines across 2 files\n"
    )


def test_t_05_format_generation_summary_without_files() -> None:
    text = format_generation_summary(_summary())

    assert "  Files written:\n\n  Total: 0 lines across 0 files\n" in text


def test_t_06_format_generation_summary_is_single_newline_terminated() -> None:
    text = format_generation_summary(_summary((_file("a.md", 1),)))

    assert text.endswith("files\n")
    assert not text.endswith("\n\n")
    assert text == format_generation_summary(_summary((_file("a.md", 1),)))


def test_t_07_print_generation_summary_prints_formatter_output_once(
    capsys: pytest.CaptureFixture[str],
) -> None:
    summary = _summary((_file("a.md", 1),))

    print_generation_summary(summary)

    assert capsys.readouterr().out == format_generation_summary(summary)
