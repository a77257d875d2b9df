"""Command-line configuration: argparse surface, validation and options."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from .docs import DEFAULT_DOCS_FOLDER, DEFAULT_PACKAGE_NAME, DocsRenderOptions
from .hooks import DEFAULT_GENERATED_FOLDER, HOOK_NAME_DEFAULTS, HooksRenderOptions
from .imports import DEFAULT_CLIENT_PACKAGE, ModuleResolutionStrategy
from .names import (
    CASE_HELPERS,
    CLIENT_NAME_TRANSFORMERS,
    NameTransformer,
    template_name_transformer,
)
from .nodes import InvalidNodeError, RootNode, load_root_node
from .render_map import generated_output_dir

# ===--- CLI config contracts ---=== #

COMMANDS = ("docs", "hooks")

COMMAND_NAME_ROLES: dict[str, frozenset[str]] = {
    "docs": frozenset(CLIENT_NAME_TRANSFORMERS),
    "hooks": frozenset(HOOK_NAME_DEFAULTS),
}

STRATEGY_VALUES = tuple(s.value for s in ModuleResolutionStrategy)


@dataclass(frozen=True)
class RenderConfig:
    """Validated settings for one CLI run.

    Attributes:
        command: "docs" or "hooks".
        idl: Path to the serialized interface tree (JSON).
        output_dir: Package folder the generated folder is created in.
        generated_folder: Output folder relative to output_dir.
        package_name: Client package shown in docs examples.
        client_package: Client package imported by hooks.
        module_resolution: Module resolution strategy for hooks.
        name_templates: (role, template) overrides in command-line order.
        delete_folder_before_rendering: False when --keep-existing is given.
        format_command: Optional formatter command.
    """

    command: str
    idl: Path
    output_dir: Path
    generated_folder: str
    package_name: str = DEFAULT_PACKAGE_NAME
    client_package: str = DEFAULT_CLIENT_PACKAGE
    module_resolution: ModuleResolutionStrategy = ModuleResolutionStrategy.GROUPED_ROOT
    name_templates: tuple[tuple[str, str], ...] = ()
    delete_folder_before_rendering: bool = True
    format_command: str | None = None

    @property
    def destination(self) -> Path:
        return generated_output_dir(self.output_dir, self.generated_folder)


VALID_ERROR_CODES = {
    "MISSING_IDL",
    "PATH_NOT_FOUND",
    "INVALID_IDL",
    "INVALID_NAME_OVERRIDE",
    "UNKNOWN_NAME_ROLE",
    "INVALID_STRATEGY",
    "INVALID_GENERATED_FOLDER",
}


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


# ===--- Validators ---=== #


def validate_idl_path(path: Path | None) -> Path:
    if path is None:
        raise ConfigError(
            "MISSING_IDL",
            "--idl is required: no interface tree provided.",
            "Pass the JSON interface tree: --idl path/to/idl.json",
        )
    if path.is_file():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for --idl does not exist: {path}",
        "Provide an existing JSON file for this flag.",
    )


def validate_generated_folder(output_dir: Path, folder: str) -> str:
    try:
        generated_output_dir(output_dir, folder)
    except ValueError as err:
        raise ConfigError(
            "INVALID_GENERATED_FOLDER",
            f"--generated-folder must name a subfolder of --output-dir: {folder!r}",
            "The folder is cleared before rendering. Use e.g. --generated-folder docs",
        ) from err
    return folder


def parse_strategy(raw: str) -> ModuleResolutionStrategy:
    try:
        return ModuleResolutionStrategy(raw)
    except ValueError as err:
        raise ConfigError(
            "INVALID_STRATEGY",
            f"Unknown module resolution strategy: {raw}",
            f"Use one of: {', '.join(STRATEGY_VALUES)}.",
        ) from err


def parse_name_override(raw: str, command: str) -> tuple[str, str]:
    """Split ``ROLE=TEMPLATE`` and check both halves.

    The template is tried once against a sample name so that unknown
    fields are reported before any rendering happens.
    """
    role, sep, template = raw.partition("=")
    role = role.strip()
    if not sep or not role or not template:
        raise ConfigError(
            "INVALID_NAME_OVERRIDE",
            f"Invalid --name value: {raw!r}",
            "Use ROLE=TEMPLATE, for example --name accountHook=use{pascalCase}Account",
        )
    if role not in COMMAND_NAME_ROLES[command]:
        raise ConfigError(
            "UNKNOWN_NAME_ROLE",
            f"Unknown name role for {command}: {role}",
            f"Known roles: {', '.join(sorted(COMMAND_NAME_ROLES[command]))}.",
        )
    try:
        template_name_transformer(template)("sample", CASE_HELPERS)
    except (AttributeError, KeyError, IndexError, ValueError) as err:
        raise ConfigError(
            "INVALID_NAME_OVERRIDE",
            f"Invalid template for {role}: {template!r} ({err})",
            "Available fields: {name}, {camelCase}, {pascalCase}, {snakeCase}, "
            "{kebabCase}, {titleCase}, {capitalize}.",
        ) from err
    return role, template


# ===--- Argument parsing ---=== #


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--idl", type=Path, default=None)
    parser.add_argument("--output-dir", type=Path, default=Path("."))
    parser.add_argument("--generated-folder", type=str, default=None)
    parser.add_argument("--name", action="append", default=None, metavar="ROLE=TEMPLATE")
    parser.add_argument("--keep-existing", action="store_true", default=False)
    parser.add_argument("--format-command", type=str, default=None)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render docs or React hooks from an on-chain program interface tree"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    docs = subparsers.add_parser("docs", help="Render Markdown documentation pages")
    _add_common_arguments(docs)
    docs.add_argument("--package-name", type=str, default=DEFAULT_PACKAGE_NAME)

    hooks = subparsers.add_parser("hooks", help="Render React hook modules")
    _add_common_arguments(hooks)
    hooks.add_argument("--client-package", type=str, default=DEFAULT_CLIENT_PACKAGE)
    hooks.add_argument(
        "--module-resolution",
        type=str,
        default=ModuleResolutionStrategy.GROUPED_ROOT.value,
        metavar="{" + ",".join(STRATEGY_VALUES) + "}",
    )

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(args: argparse.Namespace) -> RenderConfig:
    idl = validate_idl_path(args.idl)
    name_templates = tuple(parse_name_override(raw, args.command) for raw in args.name or ())

    if args.command == "docs":
        return RenderConfig(
            command="docs",
            idl=idl,
            output_dir=args.output_dir,
            generated_folder=validate_generated_folder(
                args.output_dir, args.generated_folder or DEFAULT_DOCS_FOLDER
            ),
            package_name=args.package_name,
            name_templates=name_templates,
            delete_folder_before_rendering=not args.keep_existing,
            format_command=args.format_command,
        )

    return RenderConfig(
        command="hooks",
        idl=idl,
        output_dir=args.output_dir,
        generated_folder=validate_generated_folder(
            args.output_dir, args.generated_folder or DEFAULT_GENERATED_FOLDER
        ),
        client_package=args.client_package,
        module_resolution=parse_strategy(args.module_resolution),
        name_templates=name_templates,
        delete_folder_before_rendering=not args.keep_existing,
        format_command=args.format_command,
    )


def build_config(argv: list[str] | None = None) -> RenderConfig:
    return validate_config(parse_args(argv))


# ===--- Config -> library options ---=== #


def build_name_transformers(config: RenderConfig) -> dict[str, NameTransformer]:
    return {role: template_name_transformer(t) for role, t in config.name_templates}


def build_docs_options(config: RenderConfig) -> DocsRenderOptions:
    return DocsRenderOptions(
        package_name=config.package_name,
        name_transformers=build_name_transformers(config),
        delete_folder_before_rendering=config.delete_folder_before_rendering,
        generated_folder=config.generated_folder,
        format_command=config.format_command,
    )


def build_hooks_options(config: RenderConfig) -> HooksRenderOptions:
    return HooksRenderOptions(
        client_package=config.client_package,
        module_resolution_strategy=config.module_resolution.value,
        name_transformers=build_name_transformers(config),
        delete_folder_before_rendering=config.delete_folder_before_rendering,
        generated_folder=config.generated_folder,
        format_command=config.format_command,
    )


def load_idl(path: Path) -> RootNode:
    """Load the interface tree, reporting malformed input as INVALID_IDL.

    Raises:
        ConfigError: INVALID_IDL when the file is not a valid tree.
        OSError: Propagated directly if the file cannot be read.
    """
    try:
        return load_root_node(path)
    except InvalidNodeError as err:
        raise ConfigError(
            "INVALID_IDL",
            f"Invalid interface tree in {path}: {err}",
            "Pass a JSON rootNode or programNode.",
        ) from err
