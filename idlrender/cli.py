"""Command-line entry point.

Usage:
    python gen.py docs --idl idl.json --output-dir packages/client
    python gen.py hooks --idl idl.json --client-package ../ --module-resolution granular
"""

from __future__ import annotations

from .config import ConfigError, RenderConfig, build_config, build_docs_options, build_hooks_options, load_idl
from .docs import get_docs_render_map
from .hooks import get_hooks_render_map
from .nodes import get_all_programs
from .render_map import FormatError, RenderWriteResult, emit_render_map
from .summary import build_generation_summary, print_generation_summary


def run_render(config: RenderConfig) -> RenderWriteResult:
    """Execute one render run for a validated RenderConfig.

    Stages: load tree -> build render map -> format -> clear -> write ->
    summary.

    Raises:
        ConfigError: INVALID_IDL for a malformed interface tree.
        FormatError: The external formatter rejected a file.
        OSError: Tree not readable or filesystem write failure.
        ValueError: Invalid render map path or name transformer role.
    """
    print(f"Parsing: {config.idl}")
    root = load_idl(config.idl)
    print(f"  Programs: {', '.join(p.name for p in get_all_programs(root))}")

    if config.command == "docs":
        render_map = get_docs_render_map(root, build_docs_options(config))
    else:
        render_map = get_hooks_render_map(root, build_hooks_options(config))
    print(f"  Rendered: {len(render_map)} files")

    if config.format_command:
        print(f"  Formatting with: {config.format_command}")
    result = emit_render_map(
        render_map,
        config.destination,
        delete_folder_before_rendering=config.delete_folder_before_rendering,
        format_command=config.format_command,
    )
    print(
        f"  Written: {len(result.files)} files, "
        f"{result.total_lines} lines to {result.output_dir}"
    )

    summary = build_generation_summary(config.command, root, str(config.idl), result)
    print_generation_summary(summary)

    return result


def _exit_with_config_error(err: ConfigError) -> None:
    print(f"Config error [{err.code}]: {err.message}")
    if err.suggestion:
        print(f"Hint: {err.suggestion}")
    raise SystemExit(1) from err


def main(argv: list[str] | None = None):
    try:
        config = build_config(argv)
    except ConfigError as err:
        _exit_with_config_error(err)

    try:
        run_render(config)
    except ConfigError as err:
        _exit_with_config_error(err)
    except (OSError, FormatError) as err:
        print(f"Error: {err}")
        raise SystemExit(1) from err
    except (RuntimeError, ValueError) as err:
        print(f"Internal error: {err}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
