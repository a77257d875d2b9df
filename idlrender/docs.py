"""Markdown documentation pages for a generated JS client.

One page per account, instruction, PDA and defined type, an ``index.md``
overview per program and an ``errors.md`` page when the program declares
errors. Code examples import from the client package named in the options.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .fragments import Fragment, fragment, join_paragraphs, merge_fragments
from .imports import ImportMap, create_import_map, import_map_to_string, merge_import_maps
from .markdown import md_code_block, md_heading, md_link, md_list, md_table
from .names import (
    CLIENT_NAME_TRANSFORMERS,
    NameApi,
    NameTransformer,
    camel_case,
    get_name_api,
    pascal_case,
    title_case,
)
from .nodes import (
    Node,
    RootNode,
    get_all_accounts,
    get_all_defined_types,
    get_all_errors,
    get_all_instructions_with_subs,
    get_all_pdas,
    get_all_programs,
    is_scalar_enum,
    resolve_nested_type_node,
)
from .render_map import (
    RenderMap,
    RenderWriteResult,
    create_render_map,
    emit_render_map,
    generated_output_dir,
    map_render_map_content,
    merge_render_maps,
)
from .visitors import (
    LinkableDictionary,
    NodePath,
    NodeStack,
    VisitContext,
    Visitor,
    extend_visitor,
    get_byte_size_visitor,
    get_last_node_from_path,
    get_type_string_visitor,
    record_linkables_on_first_visit_visitor,
    record_node_stack_visitor,
    static_visitor,
    visit,
)

DEFAULT_PACKAGE_NAME = "my-program-client"
DEFAULT_DOCS_FOLDER = "docs"
KIT_PACKAGE = "@solana/kit"


# ===--- Options and scope ---=== #


@dataclass(frozen=True)
class DocsRenderOptions:
    """Options for ``render_docs``.

    Attributes:
        package_name: Client package imported in code examples.
        name_transformers: Per-role overrides of CLIENT_NAME_TRANSFORMERS.
        delete_folder_before_rendering: Clear the output folder first.
        generated_folder: Output folder, relative to the package folder.
        format_command: Optional formatter each page is piped through.
    """

    package_name: str = DEFAULT_PACKAGE_NAME
    name_transformers: Mapping[str, NameTransformer] = field(default_factory=dict)
    delete_folder_before_rendering: bool = True
    generated_folder: str = DEFAULT_DOCS_FOLDER
    format_command: str | None = None


@dataclass(frozen=True)
class DocsRenderScope:
    name_api: NameApi
    package_name: str
    linkables: LinkableDictionary = field(default_factory=LinkableDictionary)


# ===--- Shared pieces ---=== #


def _text(value: str) -> Fragment:
    return fragment("${0}", value)


def _section(title: str, *body: Fragment | None) -> Fragment:
    return merge_fragments([_text(md_heading(title, 2)), *body], join_paragraphs)


def _code(code: str, lang: str = "ts", imports: ImportMap | None = None) -> Fragment:
    block = _text(md_code_block(code, lang))
    if imports is None:
        return block
    return Fragment(block.content, imports)


def _import_section(imports: ImportMap) -> Fragment:
    return _section("Import", _code(import_map_to_string(imports), imports=imports))


def _docs_fragment(docs: tuple[str, ...]) -> Fragment | None:
    return _text("\n".join(docs)) if docs else None


def _backticked(value: str) -> str:
    return f"`{value}`"


def _size_text(type_node: Node, scope: DocsRenderScope, path: NodePath) -> str:
    byte_size = visit(type_node, get_byte_size_visitor(scope.linkables, path))
    return f"{byte_size} bytes" if byte_size is not None else "Variable"


def _discriminator_section(
    discriminators: tuple[Node, ...], headers: list[str]
) -> Fragment | None:
    if not discriminators:
        return None
    rows = []
    for d in discriminators:
        if d.kind == "fieldDiscriminatorNode":
            rows.append(["field", _backticked(d.name), str(d.offset)])
        elif d.kind == "sizeDiscriminatorNode":
            rows.append(["size", str(d.size), "0"])
        else:
            rows.append(["constant", "-", str(getattr(d, "offset", 0))])
    return _section("Discriminator", _text(md_table(headers, rows)))


def get_fields_table_fragment(fields: tuple[Node, ...], type_strings: Visitor[str]) -> Fragment:
    """Field/Type table, with a Description column when any field has docs."""
    if not fields:
        return _text("_No fields._")
    has_docs = any(f.docs for f in fields)
    headers = ["Field", "Type", "Description"] if has_docs else ["Field", "Type"]
    rows = []
    for f in fields:
        row = [_backticked(f.name), _backticked(visit(f.type, type_strings))]
        if has_docs:
            row.append(" ".join(f.docs))
        rows.append(row)
    return _text(md_table(headers, rows))


# ===--- Account pages ---=== #


def get_account_doc_fragment(
    account_node: Node, scope: DocsRenderScope, path: NodePath = ()
) -> Fragment:
    """Render ``accounts/<name>.md``.

    Args:
        account_node: Account to document.
        scope: Naming, package and linkables for this run.
        path: Node path ending at the account; used to resolve defined
            type links when computing the account size.

    Returns:
        Page fragment whose imports are the client symbols it shows.
    """
    api = scope.name_api
    type_strings = get_type_string_visitor()
    struct_type = resolve_nested_type_node(account_node.data)
    fields = getattr(struct_type, "fields", ())

    fetch_fn = api["accountFetchFunction"](account_node.name)
    fetch_maybe_fn = api["accountFetchMaybeFunction"](account_node.name)
    decode_fn = api["accountDecodeFunction"](account_node.name)
    fetch_all_fn = api["accountFetchAllFunction"](account_node.name)

    return merge_fragments(
        [
            _text(md_heading(pascal_case(account_node.name), 1)),
            _docs_fragment(account_node.docs),
            _import_section(create_import_map(scope.package_name, [fetch_fn, decode_fn])),
            _section("Fields", get_fields_table_fragment(fields, type_strings)),
            _section("Size", _text(_size_text(account_node.data, scope, path))),
            _discriminator_section(account_node.discriminators, ["Type", "Field", "Offset"]),
            _section("Fetch", _code(f"const account = await {fetch_fn}(rpc, address);")),
            _section(
                "Fetch (Maybe)",
                _code(f"const maybeAccount = await {fetch_maybe_fn}(rpc, address);"),
            ),
            _section("Decode", _code(f"const account = {decode_fn}(encodedAccount);")),
            _section("Fetch All", _code(f"const accounts = await {fetch_all_fn}(rpc, addresses);")),
        ],
        join_paragraphs,
    )


# ===--- Instruction pages ---=== #

SEND_PIPELINE = """\
await pipe(
  createTransactionMessage({ version: 0 }),
  tx => setTransactionMessageFeePayer(feePayer, tx),
  tx => setTransactionMessageLifetimeUsingBlockhash(blockhash, tx),
  tx => appendTransactionMessageInstruction(instruction, tx),
  tx => signAndSendTransactionMessageWithSigners(tx),
);"""

PLACEHOLDER_ADDRESS = "address('...')"


def _mark(flag: bool) -> str:
    return "✅" if flag else ""


def _is_signer(account: Node) -> bool:
    return account.is_signer is True or account.is_signer == "either"


def get_instruction_doc_fragment(instruction_node: Node, scope: DocsRenderScope) -> Fragment:
    api = scope.name_api
    type_strings = get_type_string_visitor()
    sync_fn = api["instructionSyncFunction"](instruction_node.name)
    accounts = instruction_node.accounts

    accounts_fragment = None
    if accounts:
        rows = [
            [_backticked(a.name), _mark(_is_signer(a)), _mark(a.is_writable), _mark(a.is_optional)]
            for a in accounts
        ]
        accounts_fragment = _section(
            "Accounts", _text(md_table(["Account", "Signer", "Writable", "Optional"], rows))
        )

    # Resolver-defaulted arguments are filled in by the client.
    arguments = [
        a
        for a in instruction_node.arguments
        if a.default_value is None or a.default_value.kind != "resolverValueNode"
    ]
    arguments_fragment = None
    if arguments:
        rows = [[_backticked(a.name), _backticked(visit(a.type, type_strings))] for a in arguments]
        arguments_fragment = _section("Arguments", _text(md_table(["Argument", "Type"], rows)))

    params = [
        f"  {a.name}: {'signer' if a.is_signer is True else PLACEHOLDER_ADDRESS}" for a in accounts
    ]
    params += [f"  {a.name}: value" for a in arguments]
    build_code = f"const instruction = {sync_fn}({{\n" + ",\n".join(params) + "\n});"

    send_imports = merge_import_maps(
        [
            create_import_map(KIT_PACKAGE, ["pipe"]),
            create_import_map(scope.package_name, [sync_fn]),
        ]
    )
    send_code = (
        f"{import_map_to_string(send_imports)}\n\n"
        f"const instruction = {sync_fn}({{ /* ... */ }});\n"
        f"{SEND_PIPELINE}"
    )

    return merge_fragments(
        [
            _text(md_heading(pascal_case(instruction_node.name), 1)),
            _docs_fragment(instruction_node.docs),
            _import_section(create_import_map(scope.package_name, [sync_fn])),
            accounts_fragment,
            arguments_fragment,
            _section("Build", _code(build_code)),
            _section("Send", _code(send_code, imports=send_imports)),
            _discriminator_section(instruction_node.discriminators, ["Type", "Value", "Offset"]),
        ],
        join_paragraphs,
    )


# ===--- PDA pages ---=== #


def get_pda_doc_fragment(pda_node: Node, scope: DocsRenderScope) -> Fragment:
    type_strings = get_type_string_visitor()
    find_fn = scope.name_api["pdaFindFunction"](pda_node.name)

    seeds_fragment = None
    if pda_node.seeds:
        rows = []
        for seed in pda_node.seeds:
            if seed.kind == "variablePdaSeedNode":
                type_str = visit(seed.type, type_strings)
                rows.append([_backticked(seed.name), _backticked(type_str), "variable"])
            elif seed.kind == "constantPdaSeedNode":
                rows.append(["(constant)", "-", "constant"])
            else:
                rows.append(["-", "-", "-"])
        seeds_fragment = _section("Seeds", _text(md_table(["Seed", "Type", "Kind"], rows)))

    variable_seeds = [s.name for s in pda_node.seeds if s.kind == "variablePdaSeedNode"]
    seed_params = f"{{ {', '.join(variable_seeds)} }}" if variable_seeds else "{}"

    return merge_fragments(
        [
            _text(md_heading(pascal_case(pda_node.name), 1)),
            _docs_fragment(pda_node.docs),
            _import_section(create_import_map(scope.package_name, [find_fn])),
            seeds_fragment,
            _section("Find PDA", _code(f"const [address] = await {find_fn}({seed_params});")),
        ],
        join_paragraphs,
    )


# ===--- Defined type pages ---=== #


def _enum_body_fragment(enum_node: Node, type_strings: Visitor[str]) -> Fragment:
    if is_scalar_enum(enum_node):
        rows = [[_backticked(v.name), str(i)] for i, v in enumerate(enum_node.variants)]
        return _section("Variants", _text(md_table(["Variant", "Discriminator"], rows)))

    items = []
    for variant in enum_node.variants:
        if variant.kind == "enumTupleVariantTypeNode":
            items.append(f"`{variant.name}` — {visit(variant.tuple, type_strings)}")
        elif variant.kind == "enumStructVariantTypeNode":
            struct_node = resolve_nested_type_node(variant.struct)
            members = ", ".join(
                f"`{f.name}: {visit(f.type, type_strings)}`" for f in struct_node.fields
            )
            items.append(f"`{variant.name}` — {{ {members} }}")
        else:
            items.append(_backticked(variant.name))
    return _section("Variants", _text(md_list(items)))


def get_type_doc_fragment(defined_type_node: Node, scope: DocsRenderScope) -> Fragment:
    api = scope.name_api
    type_strings = get_type_string_visitor()
    name = pascal_case(defined_type_node.name)
    decoder_fn = api["decoderFunction"](defined_type_node.name)
    encoder_fn = api["encoderFunction"](defined_type_node.name)

    type_node = defined_type_node.type
    if type_node.kind == "structTypeNode":
        body = _section("Fields", get_fields_table_fragment(type_node.fields, type_strings))
    elif type_node.kind == "enumTypeNode":
        body = _enum_body_fragment(type_node, type_strings)
    else:
        body = _section("Type", _text(_backticked(visit(type_node, type_strings))))

    return merge_fragments(
        [
            _text(md_heading(name, 1)),
            _docs_fragment(defined_type_node.docs),
            _import_section(
                create_import_map(scope.package_name, [f"type {name}", decoder_fn, encoder_fn])
            ),
            body,
            _section(
                "Codec",
                _code(f"const encoder = {encoder_fn}();\nconst decoder = {decoder_fn}();"),
            ),
        ],
        join_paragraphs,
    )


# ===--- Program pages ---=== #


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def _type_kind(type_node: Node) -> str:
    resolved = resolve_nested_type_node(type_node)
    if resolved.kind == "structTypeNode":
        return "struct"
    if resolved.kind == "enumTypeNode":
        return "enum"
    return "alias"


def get_program_overview_fragment(
    program_node: Node, scope: DocsRenderScope, path: NodePath = ()
) -> Fragment:
    """Render ``index.md``.

    Sections for accounts, instructions, PDAs, types and errors appear
    only when the program has at least one of them.
    """
    api = scope.name_api
    path = path or (program_node,)

    accounts = get_all_accounts(program_node)
    accounts_fragment = None
    if accounts:
        rows = [
            [
                md_link(pascal_case(a.name), f"accounts/{camel_case(a.name)}.md"),
                _size_text(a.data, scope, (*path, a)),
            ]
            for a in accounts
        ]
        accounts_fragment = _section("Accounts", _text(md_table(["Account", "Size"], rows)))

    instructions = get_all_instructions_with_subs(program_node, leaves_only=True)
    instructions_fragment = None
    if instructions:
        rows = [
            [
                md_link(pascal_case(i.name), f"instructions/{camel_case(i.name)}.md"),
                " ".join(i.docs) or "-",
            ]
            for i in instructions
        ]
        instructions_fragment = _section(
            "Instructions", _text(md_table(["Instruction", "Description"], rows))
        )

    pdas = get_all_pdas(program_node)
    pdas_fragment = None
    if pdas:
        rows = [
            [
                md_link(pascal_case(p.name), f"pdas/{camel_case(p.name)}.md"),
                _plural(len(p.seeds), "seed") if p.seeds else "None",
            ]
            for p in pdas
        ]
        pdas_fragment = _section("PDAs", _text(md_table(["PDA", "Seeds"], rows)))

    defined_types = get_all_defined_types(program_node)
    types_fragment = None
    if defined_types:
        rows = [
            [md_link(pascal_case(t.name), f"types/{camel_case(t.name)}.md"), _type_kind(t.type)]
            for t in defined_types
        ]
        types_fragment = _section("Types", _text(md_table(["Type", "Kind"], rows)))

    errors = get_all_errors(program_node)
    errors_fragment = None
    if errors:
        errors_fragment = _section(
            "Errors",
            _text(
                f"This program defines {_plural(len(errors), 'error')}. "
                f"See {md_link('Errors', 'errors.md')}."
            ),
        )

    address_constant = api["programAddressConstant"](program_node.name)
    return merge_fragments(
        [
            _text(md_heading(title_case(program_node.name), 1)),
            _text(f"Program address: `{address_constant}`"),
            _docs_fragment(program_node.docs),
            _section("Installation", _code(f"npm install {scope.package_name}", "bash")),
            accounts_fragment,
            instructions_fragment,
            pdas_fragment,
            types_fragment,
            errors_fragment,
        ],
        join_paragraphs,
    )


def get_error_doc_fragment(program_node: Node, scope: DocsRenderScope) -> Fragment | None:
    """Render ``errors.md``, or None when the program declares no errors."""
    errors = get_all_errors(program_node)
    if not errors:
        return None
    api = scope.name_api
    is_error_fn = api["programIsErrorFunction"](program_node.name)
    get_message_fn = api["programGetErrorMessageFunction"](program_node.name)
    imports = create_import_map(scope.package_name, [is_error_fn, get_message_fn])

    rows = [
        [f"0x{e.code:x} ({e.code})", _backticked(e.name), " ".join(e.docs) or e.message]
        for e in errors
    ]
    example = (
        f"{import_map_to_string(imports)}\n\n"
        f"if ({is_error_fn}(error, transactionMessage)) {{\n"
        f"  const message = {get_message_fn}(error.context.code);\n"
        "}"
    )
    return merge_fragments(
        [
            _text(md_heading(f"{pascal_case(program_node.name)} Errors", 1)),
            _import_section(imports),
            _text(md_table(["Code", "Name", "Message"], rows)),
            _section("Check Error", _code(example, imports=imports)),
        ],
        join_paragraphs,
    )


# ===--- Render map visitor ---=== #

DOCS_PAGE_KINDS = (
    "rootNode",
    "programNode",
    "pdaNode",
    "accountNode",
    "instructionNode",
    "definedTypeNode",
)


def get_render_map_visitor(options: DocsRenderOptions | None = None) -> Visitor[RenderMap]:
    """Visitor turning a root or program node into the docs render map.

    Raises:
        ValueError: If ``options.name_transformers`` names an unknown role.
    """
    options = options or DocsRenderOptions()
    linkables = LinkableDictionary()
    stack = NodeStack()
    scope = DocsRenderScope(
        name_api=get_name_api(CLIENT_NAME_TRANSFORMERS, options.name_transformers),
        package_name=options.package_name,
        linkables=linkables,
    )

    def visit_account(node: Node, ctx: VisitContext) -> RenderMap:
        path = stack.get_path("accountNode")
        account_node = get_last_node_from_path(path)
        return create_render_map(
            f"accounts/{camel_case(account_node.name)}.md",
            get_account_doc_fragment(account_node, scope, path),
        )

    def visit_defined_type(node: Node, ctx: VisitContext) -> RenderMap:
        defined_type_node = get_last_node_from_path(stack.get_path("definedTypeNode"))
        return create_render_map(
            f"types/{camel_case(defined_type_node.name)}.md",
            get_type_doc_fragment(defined_type_node, scope),
        )

    def visit_instruction(node: Node, ctx: VisitContext) -> RenderMap:
        instruction_node = get_last_node_from_path(stack.get_path("instructionNode"))
        return create_render_map(
            f"instructions/{camel_case(instruction_node.name)}.md",
            get_instruction_doc_fragment(instruction_node, scope),
        )

    def visit_pda(node: Node, ctx: VisitContext) -> RenderMap:
        pda_node = get_last_node_from_path(stack.get_path("pdaNode"))
        return create_render_map(
            f"pdas/{camel_case(pda_node.name)}.md",
            get_pda_doc_fragment(pda_node, scope),
        )

    def visit_program(node: Node, ctx: VisitContext) -> RenderMap:
        path = stack.get_path("programNode")
        return merge_render_maps(
            [
                create_render_map("index.md", get_program_overview_fragment(node, scope, path)),
                create_render_map("errors.md", get_error_doc_fragment(node, scope)),
                *(ctx.visit(p) for p in node.pdas),
                *(ctx.visit(a) for a in node.accounts),
                *(ctx.visit(t) for t in node.defined_types),
                *(
                    ctx.visit(i)
                    for i in get_all_instructions_with_subs(node, leaves_only=True)
                ),
            ]
        )

    def visit_root(node: Node, ctx: VisitContext) -> RenderMap:
        return merge_render_maps(ctx.visit(p) for p in get_all_programs(node))

    visitor = extend_visitor(
        static_visitor(lambda node: create_render_map(), DOCS_PAGE_KINDS),
        {
            "accountNode": visit_account,
            "definedTypeNode": visit_defined_type,
            "instructionNode": visit_instruction,
            "pdaNode": visit_pda,
            "programNode": visit_program,
            "rootNode": visit_root,
        },
    )
    visitor = record_node_stack_visitor(visitor, stack)
    return record_linkables_on_first_visit_visitor(visitor, linkables)


def get_docs_render_map(root: RootNode, options: DocsRenderOptions | None = None) -> RenderMap:
    """Render every docs page, each ending with a single newline."""
    render_map = visit(root, get_render_map_visitor(options))
    return map_render_map_content(render_map, lambda content: content.rstrip("\n") + "\n")


def render_docs(
    root: RootNode, package_folder: Path, options: DocsRenderOptions | None = None
) -> RenderWriteResult:
    """Render documentation pages into ``package_folder / generated_folder``.

    The full render map (and any formatting) is built before the output
    folder is cleared, so a failure leaves existing files untouched.

    Raises:
        ValueError: Unknown name transformer role or invalid output path.
        FormatError: The configured formatter rejected a page.
        OSError: Propagated directly from deletion or writing.
    """
    options = options or DocsRenderOptions()
    render_map = get_docs_render_map(root, options)
    return emit_render_map(
        render_map,
        generated_output_dir(package_folder, options.generated_folder),
        delete_folder_before_rendering=options.delete_folder_before_rendering,
        format_command=options.format_command,
    )
