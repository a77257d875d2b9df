from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from idlrender.fragments import Fragment
from idlrender.render_map import (
    FormatError,
    create_render_map,
    emit_render_map,
    first_wins,
    generated_output_dir,
    map_render_map_content,
    merge_render_maps,
    run_format_command,
    write_render_map,
)


def _python_command(code: str, *extra: str) -> str:
    return shlex.join([sys.executable, "-c", code, *extra])


UPPERCASE_FORMATTER = _python_command("import sys; sys.stdout.write(sys.stdin.read().upper())")
FAILING_FORMATTER = _python_command("import sys; sys.stderr.write('bad input'); sys.exit(3)")


# ===--- Render map operations ---=== #


def test_create_render_map_skips_none() -> None:
    render_map = create_render_map({"a.md": Fragment("a"), "b.md": None})

    assert list(render_map) == ["a.md"]
    assert list(create_render_map("c.md", None)) == []
    assert list(create_render_map()) == []


def test_merge_render_maps_is_total_and_joins_collisions() -> None:
    first = create_render_map({"a.md": Fragment("one"), "shared.md": Fragment("left")})
    second = create_render_map({"shared.md": Fragment("right"), "b.md": Fragment("two")})

    merged = merge_render_maps([first, None, second])

    assert list(merged) == ["a.md", "shared.md", "b.md"]
    assert merged["shared.md"].content == "left\n\nright"
    assert merged["a.md"].content == "one"


def test_merge_render_maps_first_wins() -> None:
    merged = merge_render_maps(
        [create_render_map("x.md", Fragment("first")), create_render_map("x.md", Fragment("second"))],
        join=first_wins,
    )

    assert merged["x.md"].content == "first"


def test_map_render_map_content() -> None:
    render_map = map_render_map_content(create_render_map("a.md", Fragment("a")), lambda c: c + "\n")

    assert render_map["a.md"].content == "a\n"


# ===--- Emission ---=== #


def test_write_render_map_reports_lines_and_bytes(tmp_path: Path) -> None:
    render_map = create_render_map(
        {"b/two.md": Fragment("x\ny\n"), "one.md": Fragment("é\n")}
    )

    result = write_render_map(render_map, tmp_path)

    assert [f.filename for f in result.files] == ["b/two.md", "one.md"]
    assert result.total_lines == 3
    assert result.total_bytes == 4 + 3
    assert (tmp_path / "b" / "two.md").read_text(encoding="utf-8") == "x\ny\n"


@pytest.mark.parametrize("bad_path", ["../escape.md", "/abs.md", "a/../../b.md"])
def test_write_render_map_rejects_paths_outside_output(tmp_path: Path, bad_path: str) -> None:
    with pytest.raises(ValueError, match="inside the output dir"):
        write_render_map(create_render_map(bad_path, Fragment("x")), tmp_path / "out")
    assert not (tmp_path / "out").exists()


@pytest.mark.parametrize("bad_folder", ["", ".", "./", "..", "../sibling", "/abs/out"])
def test_generated_output_dir_rejects_folders_outside_the_package(
    tmp_path: Path, bad_folder: str
) -> None:
    with pytest.raises(ValueError, match="Generated folder must be relative"):
        generated_output_dir(tmp_path, bad_folder)


def test_generated_output_dir_joins_nested_folders(tmp_path: Path) -> None:
    assert generated_output_dir(tmp_path, "src/generated") == tmp_path / "src" / "generated"


def test_emit_clears_destination_first(tmp_path: Path) -> None:
    out = tmp_path / "docs"
    out.mkdir()
    (out / "stale.md").write_text("old", encoding="utf-8")

    emit_render_map(create_render_map("fresh.md", Fragment("new\n")), out)

    assert sorted(p.name for p in out.iterdir()) == ["fresh.md"]


def test_emit_keeps_existing_files_when_asked(tmp_path: Path) -> None:
    out = tmp_path / "docs"
    out.mkdir()
    (out / "stale.md").write_text("old", encoding="utf-8")

    emit_render_map(
        create_render_map("fresh.md", Fragment("new\n")), out, delete_folder_before_rendering=False
    )

    assert sorted(p.name for p in out.iterdir()) == ["fresh.md", "stale.md"]


def test_emit_creates_missing_destination(tmp_path: Path) -> None:
    out = tmp_path / "a" / "b"

    result = emit_render_map(create_render_map("x/y.md", Fragment("z\n")), out)

    assert (out / "x" / "y.md").is_file()
    assert result.output_dir == out


def test_emit_runs_the_formatter(tmp_path: Path) -> None:
    emit_render_map(
        create_render_map("a.ts", Fragment("const a = 1;\n")), tmp_path, format_command=UPPERCASE_FORMATTER
    )

    assert (tmp_path / "a.ts").read_text(encoding="utf-8") == "CONST A = 1;\n"


def test_emit_formatter_failure_leaves_destination_untouched(tmp_path: Path) -> None:
    out = tmp_path / "hooks"
    out.mkdir()
    (out / "stale.ts").write_text("old", encoding="utf-8")

    with pytest.raises(FormatError, match="status 3 for a.ts: bad input"):
        emit_render_map(
            create_render_map("a.ts", Fragment("x")), out, format_command=FAILING_FORMATTER
        )

    assert sorted(p.name for p in out.iterdir()) == ["stale.ts"]


def test_run_format_command_substitutes_path() -> None:
    command = _python_command("import sys; sys.stdout.write(sys.argv[1])", "{path}")

    assert run_format_command(command, "hooks/counter.ts", "") == "hooks/counter.ts"
