"""Render maps (output path -> Fragment) and their emission to disk."""

from __future__ import annotations

import shlex
import shutil
import subprocess
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from types import MappingProxyType

from .fragments import Fragment, map_fragment_content, merge_fragments

RenderMap = Mapping[str, Fragment]

EMPTY_RENDER_MAP: RenderMap = MappingProxyType({})


# ===--- Render map operations ---=== #


def join_with_blank_line(contents: Sequence[str]) -> str:
    return "\n\n".join(contents)


def first_wins(contents: Sequence[str]) -> str:
    return contents[0]


def create_render_map(
    entries: str | Mapping[str, Fragment | None] | None = None,
    fragment: Fragment | None = None,
) -> RenderMap:
    """Build a render map from one ``(path, fragment)`` pair or a mapping.

    Entries whose fragment is None are left out.
    """
    if entries is None:
        return EMPTY_RENDER_MAP
    if isinstance(entries, str):
        entries = {entries: fragment}
    return MappingProxyType({path: frag for path, frag in entries.items() if frag is not None})


def merge_render_maps(
    maps: Iterable[RenderMap | None],
    join: Callable[[Sequence[str]], str] = join_with_blank_line,
) -> RenderMap:
    """Union render maps; fragments sharing a path are merged with ``join``.

    Shared paths keep their contents in map order. Paths are kept in first
    appearance order.
    """
    grouped: dict[str, list[Fragment]] = {}
    for render_map in maps:
        if not render_map:
            continue
        for path, frag in render_map.items():
            grouped.setdefault(path, []).append(frag)
    return MappingProxyType(
        {
            path: frags[0] if len(frags) == 1 else merge_fragments(frags, join)
            for path, frags in grouped.items()
        }
    )


def map_render_map(
    render_map: RenderMap, fn: Callable[[str, Fragment], Fragment]
) -> RenderMap:
    return MappingProxyType({path: fn(path, frag) for path, frag in render_map.items()})


def map_render_map_content(render_map: RenderMap, fn: Callable[[str], str]) -> RenderMap:
    return map_render_map(render_map, lambda _path, frag: map_fragment_content(frag, fn))


# ===--- Write result types ---=== #


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing a single rendered file.

    Attributes:
        filename: Render map path, relative to the output directory,
            e.g. "accounts/counter.md".
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    filename: str
    path: Path
    line_count: int
    byte_count: int


@dataclass(frozen=True)
class RenderWriteResult:
    """Result of writing a complete render map.

    Attributes:
        output_dir: Directory all files were written under.
        files: One FileWriteResult per file, sorted by render map path.
    """

    output_dir: Path
    files: tuple[FileWriteResult, ...]

    @property
    def total_lines(self) -> int:
        """Sum of line_count across all written files."""
        return sum(f.line_count for f in self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.byte_count for f in self.files)


# ===--- Formatting ---=== #


class FormatError(Exception):
    """Raised when the external formatter rejects a rendered file."""

    def __init__(self, path: str, returncode: int, stderr: str):
        message = f"Formatter exited with status {returncode} for {path}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
        self.path = path
        self.returncode = returncode
        self.stderr = stderr


def run_format_command(command: str, path: str, content: str) -> str:
    """Pipe ``content`` through ``command`` and return its stdout.

    ``{path}`` in the command is replaced by the render map path, so
    formatters can pick a parser from the extension
    (e.g. ``"prettier --stdin-filepath {path}"``).

    Raises:
        FormatError: If the formatter exits non-zero.
        OSError: If the formatter executable cannot be started.
    """
    argv = [token.replace("{path}", path) for token in shlex.split(command)]
    result = subprocess.run(
        argv,
        input=content,
        check=False,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise FormatError(path, result.returncode, result.stderr)
    return result.stdout


def format_render_map(render_map: RenderMap, command: str) -> RenderMap:
    return map_render_map(
        render_map,
        lambda path, frag: Fragment(run_format_command(command, path, frag.content), frag.imports),
    )


# ===--- Emission ---=== #


def _checked_relative_path(
    path: str, what: str = "Render map path", where: str = "the output dir"
) -> PurePosixPath:
    relative = PurePosixPath(path)
    if relative.is_absolute() or ".." in relative.parts or not relative.parts:
        raise ValueError(f"{what} must be relative and inside {where}: {path!r}")
    return relative


def generated_output_dir(package_folder: Path, generated_folder: str) -> Path:
    """Resolve the folder a render run owns below ``package_folder``.

    The folder is deleted before rendering, so it must name a real
    subfolder: empty, ".", absolute and parent-relative values are rejected.

    Raises:
        ValueError: If ``generated_folder`` is not strictly inside
            ``package_folder``.
    """
    relative = _checked_relative_path(generated_folder, "Generated folder", "the package folder")
    return Path(package_folder).joinpath(*relative.parts)


def delete_directory(path: Path) -> None:
    """Remove ``path`` and everything below it; a missing path is fine."""
    path = Path(path)
    if path.exists():
        shutil.rmtree(path)


def write_file(output_dir: Path, filename: str, content: str) -> FileWriteResult:
    """Write one rendered file, creating parent directories.

    Raises:
        ValueError: If ``filename`` is absolute or escapes ``output_dir``.
        OSError: Propagated directly if the filesystem write fails.
    """
    file_path = Path(output_dir).joinpath(*_checked_relative_path(filename).parts)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8")
    file_path.write_bytes(data)
    return FileWriteResult(
        filename=filename,
        path=file_path.resolve(),
        line_count=content.count("\n"),
        byte_count=len(data),
    )


def write_render_map(render_map: RenderMap, output_dir: Path) -> RenderWriteResult:
    """Write every render map entry under ``output_dir``, sorted by path.

    No rollback: an OSError part-way leaves earlier files in place.

    Raises:
        ValueError: If any path is absolute or escapes ``output_dir``.
        OSError: Propagated directly from any write failure.
    """
    for path in render_map:
        _checked_relative_path(path)
    files = tuple(
        write_file(output_dir, path, render_map[path].content) for path in sorted(render_map)
    )
    return RenderWriteResult(output_dir=Path(output_dir), files=files)


def emit_render_map(
    render_map: RenderMap,
    output_dir: Path,
    delete_folder_before_rendering: bool = True,
    format_command: str | None = None,
) -> RenderWriteResult:
    """Format (optionally), clear the destination (optionally), then write.

    Formatting runs before anything on disk is touched, so a formatter
    failure leaves ``output_dir`` as it was.
    """
    if format_command:
        render_map = format_render_map(render_map, format_command)
    for path in render_map:
        _checked_relative_path(path)
    if delete_folder_before_rendering:
        delete_directory(output_dir)
    return write_render_map(render_map, output_dir)
