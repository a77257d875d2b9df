"""Post-generation console report."""

from __future__ import annotations

from dataclasses import dataclass

from .nodes import (
    RootNode,
    get_all_accounts,
    get_all_defined_types,
    get_all_errors,
    get_all_instructions_with_subs,
    get_all_pdas,
    get_all_programs,
)
from .render_map import FileWriteResult, RenderWriteResult

COMMAND_LABELS: dict[str, str] = {
    "docs": "Documentation",
    "hooks": "React hooks",
}


@dataclass(frozen=True)
class NodeCounts:
    """Interface tree sizes shown in the "Interface:" section.

    Instructions count leaves only (sub-instructions flattened, parents
    dropped), matching the pages that get rendered.
    """

    programs: int
    accounts: int
    instructions: int
    pdas: int
    defined_types: int
    errors: int


@dataclass(frozen=True)
class GenerationSummary:
    """Complete, immutable data for the post-generation console report.

    Attributes:
        command_label: Human-readable renderer name, e.g. "React hooks".
        program_label: Main program name and version, e.g. "counter 1.2.0".
        source_label: Path of the interface tree as given.
        output_dir: Output directory path as string.
        counts: Interface tree sizes.
        files: Ordered write results from RenderWriteResult.files.
    """

    command_label: str
    program_label: str
    source_label: str
    output_dir: str
    counts: NodeCounts
    files: tuple[FileWriteResult, ...]


def build_node_counts(root: RootNode) -> NodeCounts:
    return NodeCounts(
        programs=len(get_all_programs(root)),
        accounts=len(get_all_accounts(root)),
        instructions=len(get_all_instructions_with_subs(root, leaves_only=True)),
        pdas=len(get_all_pdas(root)),
        defined_types=len(get_all_defined_types(root)),
        errors=len(get_all_errors(root)),
    )


def build_generation_summary(
    command: str,
    root: RootNode,
    source: str,
    write_result: RenderWriteResult,
) -> GenerationSummary:
    return GenerationSummary(
        command_label=COMMAND_LABELS.get(command, command),
        program_label=f"{root.program.name} {root.program.version}",
        source_label=source,
        output_dir=str(write_result.output_dir),
        counts=build_node_counts(root),
        files=write_result.files,
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    """Render a GenerationSummary as a multi-section console string.

    Line counts use thousands separators. The result ends with exactly
    one trailing newline.
    """
    lines: list[str] = []
    lines.append(f"{summary.command_label} generated:")
    lines.append("")
    lines.append(f"  Program:    {summary.program_label}")
    lines.append(f"  Source:     {summary.source_label}")
    lines.append(f"  Output:     {summary.output_dir}")
    lines.append("")
    lines.append("  Interface:")

    counts = summary.counts
    for label, value in (
        ("Programs:", counts.programs),
        ("Accounts:", counts.accounts),
        ("Instructions:", counts.instructions),
        ("PDAs:", counts.pdas),
        ("Types:", counts.defined_types),
        ("Errors:", counts.errors),
    ):
        lines.append(f"    {label:<14}{value:>6}")

    lines.append("")
    lines.append("  Files written:")
    width = max((len(f.filename) for f in summary.files), default=0)
    for file_result in summary.files:
        lines.append(f"    {file_result.filename:<{width}}  {file_result.line_count:>6,} lines")

    total_lines = sum(f.line_count for f in summary.files)
    lines.append("")
    lines.append(f"  Total: {total_lines:,} lines across {len(summary.files)} files")
    lines.append("")

    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    """Thin wrapper so format_generation_summary stays testable without stdout."""
    print(format_generation_summary(summary), end="")
