"""React hook modules built on top of a generated JS client.

Layout under the generated folder:

    hooks/<account>.ts               account, from-seeds and batch hooks
    hooks/<program>.ts               program hook
    hooks/instructions/<name>.ts     one send hook per leaf instruction
    hooks/pdas/<name>.ts             one address hook per PDA
    hooks/index.ts, hooks/instructions/index.ts, hooks/pdas/index.ts

Hook bodies reference logical import aliases; each page resolves them for
its own directory depth when it is wrapped by ``get_page_fragment``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from .fragments import (
    Fragment,
    add_fragment_imports,
    fragment,
    get_export_all_fragment,
    join_lines,
    join_paragraphs,
    merge_fragments,
)
from .imports import (
    DEFAULT_CLIENT_PACKAGE,
    ModuleResolutionStrategy,
    ModuleResolver,
    import_map_to_string,
)
from .names import (
    CLIENT_NAME_TRANSFORMERS,
    HOOK_NAME_TRANSFORMERS,
    NameApi,
    NameTransformer,
    camel_case,
    get_name_api,
)
from .nodes import (
    Node,
    RootNode,
    get_all_accounts,
    get_all_errors,
    get_all_instructions_with_subs,
    get_all_pdas,
    get_all_programs,
)
from .render_map import (
    RenderMap,
    RenderWriteResult,
    create_render_map,
    emit_render_map,
    generated_output_dir,
    map_render_map,
    merge_render_maps,
)
from .visitors import (
    LinkableDictionary,
    NodePath,
    NodeStack,
    VisitContext,
    Visitor,
    extend_visitor,
    get_last_node_from_path,
    intercept_visitor,
    record_linkables_on_first_visit_visitor,
    record_node_stack_visitor,
    static_visitor,
    visit,
)

DEFAULT_GENERATED_FOLDER = "src/generated"
HOOKS_DIR = "hooks"

GENERATED_BANNER = """\
/**
 * This code was AUTOGENERATED by idlrender.
 * Please DO NOT EDIT THIS FILE. Change the interface tree instead
 * and rerun the generator to update it.
 */"""


# ===--- Options and scope ---=== #


@dataclass(frozen=True)
class HooksRenderOptions:
    """Options for ``render_hooks``.

    Attributes:
        client_package: Specifier of the generated JS client. Relative
            specifiers are taken from ``hooks/`` and re-based for deeper
            files.
        module_resolution_strategy: One of the ModuleResolutionStrategy
            values; decides where Solana imports come from.
        name_transformers: Per-role overrides of the client and hook names.
        delete_folder_before_rendering: Clear the output folder first.
        generated_folder: Output folder, relative to the package folder.
        format_command: Optional formatter each module is piped through.
    """

    client_package: str = DEFAULT_CLIENT_PACKAGE
    module_resolution_strategy: str = ModuleResolutionStrategy.GROUPED_ROOT.value
    name_transformers: Mapping[str, NameTransformer] = field(default_factory=dict)
    delete_folder_before_rendering: bool = True
    generated_folder: str = DEFAULT_GENERATED_FOLDER
    format_command: str | None = None


@dataclass(frozen=True)
class HooksRenderScope:
    name_api: NameApi
    resolver: ModuleResolver
    linkables: LinkableDictionary = field(default_factory=LinkableDictionary)


HOOK_NAME_DEFAULTS = {**CLIENT_NAME_TRANSFORMERS, **HOOK_NAME_TRANSFORMERS}


def hook_depth(path: str) -> int:
    """Directory depth of a render map path below ``hooks/``."""
    return len(PurePosixPath(path).relative_to(HOOKS_DIR).parts) - 1


# ===--- Hook templates ---=== #

ACCOUNT_HOOK_TEMPLATE = """\
type ${hook}Config = {
  rpc: Rpc<SolanaRpcApi>;
  rpcSubscriptions: RpcSubscriptions<SolanaRpcSubscriptionsApi>;
};

export function ${hook}(address: Address, config: ${hook}Config) {
  const [data, setData] = useState<${data_type} | null>(null);
  const [status, setStatus] = useState<'idle' | 'loading' | 'success' | 'error'>('idle');
  const [error, setError] = useState<Error | null>(null);
  const decoder = useMemo(() => ${decoder}(), []);

  useEffect(() => {
    setStatus('loading');
    const abortController = new AbortController();
    const subscription = config.rpcSubscriptions
      .accountNotifications(address, { encoding: 'base64' })
      .subscribe({ abortSignal: abortController.signal });

    (async () => {
      try {
        for await (const notification of await subscription) {
          const rawData = notification.value.data as unknown as Uint8Array;
          setData(decoder.decode(rawData));
          setStatus('success');
        }
      } catch (e) {
        if (!abortController.signal.aborted) {
          setError(e instanceof Error ? e : new Error(String(e)));
          setStatus('error');
        }
      }
    })();

    return () => abortController.abort();
  }, [address, config.rpcSubscriptions, decoder]);

  return { data, error, status };
}"""

ACCOUNT_FROM_SEEDS_HOOK_TEMPLATE = """\
type ${hook}Config = {
  rpc: Rpc<SolanaRpcApi>;
  rpcSubscriptions: RpcSubscriptions<SolanaRpcSubscriptionsApi>;
  programAddress?: Address;
};

export function ${hook}(${seeds_param}config: ${hook}Config) {
  const [address, setAddress] = useState<Address | null>(null);
  const [data, setData] = useState<${data_type} | null>(null);
  const [status, setStatus] = useState<'idle' | 'loading' | 'success' | 'error'>('idle');
  const [error, setError] = useState<Error | null>(null);
  const decoder = useMemo(() => ${decoder}(), []);

  // Derive PDA address.
  useEffect(() => {
    let cancelled = false;
    setStatus('loading');
    (async () => {
      try {
        const [pda] = await ${find_pda}(${seeds_arg}{ programAddress: config.programAddress });
        if (!cancelled) setAddress(pda);
      } catch (e) {
        if (!cancelled) {
          setError(e instanceof Error ? e : new Error(String(e)));
          setStatus('error');
        }
      }
    })();
    return () => { cancelled = true; };
  }, [config.programAddress${seeds_dep}]);

  // Subscribe to account once address is derived.
  useEffect(() => {
    if (!address) return;
    setStatus('loading');
    const abortController = new AbortController();
    const subscription = config.rpcSubscriptions
      .accountNotifications(address, { encoding: 'base64' })
      .subscribe({ abortSignal: abortController.signal });

    (async () => {
      try {
        for await (const notification of await subscription) {
          const rawData = notification.value.data as unknown as Uint8Array;
          setData(decoder.decode(rawData));
          setStatus('success');
        }
      } catch (e) {
        if (!abortController.signal.aborted) {
          setError(e instanceof Error ? e : new Error(String(e)));
          setStatus('error');
        }
      }
    })();

    return () => abortController.abort();
  }, [address, config.rpcSubscriptions, decoder]);

  return { address, data, error, status };
}"""

BATCH_ACCOUNT_HOOK_TEMPLATE = """\
type ${hook}Config = {
  rpc: Rpc<SolanaRpcApi>;
};

export function ${hook}(addresses: Address[], config: ${hook}Config) {
  const [data, setData] = useState<(${data_type} | null)[]>([]);
  const [status, setStatus] = useState<'idle' | 'loading' | 'success' | 'error'>('idle');
  const [error, setError] = useState<Error | null>(null);
  const decoder = useMemo(() => ${decoder}(), []);

  useEffect(() => {
    if (addresses.length === 0) {
      setData([]);
      setStatus('success');
      return;
    }

    let cancelled = false;
    setStatus('loading');

    (async () => {
      try {
        const encodedAccounts = await config.rpc
          .getMultipleAccounts(addresses, { encoding: 'base64' })
          .send();
        if (cancelled) return;

        const decoded = encodedAccounts.value.map((account) => {
          if (!account || !account.data) return null;
          return decoder.decode(account.data[0] as unknown as Uint8Array);
        });
        setData(decoded);
        setStatus('success');
      } catch (e) {
        if (!cancelled) {
          setError(e instanceof Error ? e : new Error(String(e)));
          setStatus('error');
        }
      }
    })();

    return () => { cancelled = true; };
  }, [addresses, config.rpc, decoder]);

  return { data, error, status };
}"""

INSTRUCTION_HOOK_TEMPLATE = """\
type ${hook}Config = {
  rpc: Rpc<SolanaRpcApi>;
  rpcSubscriptions: RpcSubscriptions<SolanaRpcSubscriptionsApi>;
  signer: TransactionSigner;
};

export function ${hook}(config: ${hook}Config) {
  const [status, setStatus] = useState<'idle' | 'sending' | 'confirming' | 'success' | 'error'>('idle');
  const [error, setError] = useState<Error | null>(null);
  const [signature, setSignature] = useState<Signature | null>(null);

  const send = useCallback(async (input: ${input_type}) => {
    setStatus('sending');
    setError(null);
    setSignature(null);
    try {
      const instruction = ${instruction_fn}(input);
      const { value: latestBlockhash } = await config.rpc
        .getLatestBlockhash()
        .send();
      const transactionMessage = pipe(
        createTransactionMessage({ version: 0 }),
        tx => setTransactionMessageFeePayerSigner(config.signer, tx),
        tx => setTransactionMessageLifetimeUsingBlockhash(latestBlockhash, tx),
        tx => appendTransactionMessageInstruction(instruction, tx),
      );
      const signedTransaction = await signTransactionMessageWithSigners(transactionMessage);
      setStatus('confirming');
      const txSignature = getSignatureFromTransaction(signedTransaction);
      setSignature(txSignature);
      const sendAndConfirm = sendAndConfirmTransactionFactory({ rpc: config.rpc, rpcSubscriptions: config.rpcSubscriptions });
      await sendAndConfirm(signedTransaction as Parameters<typeof sendAndConfirm>[0], {
        commitment: 'confirmed',
      });
      setStatus('success');
    } catch (e) {
      setError(e instanceof Error ? e : new Error(String(e)));
      setStatus('error');
    }
  }, [config.rpc, config.rpcSubscriptions, config.signer]);

  return { error, send, signature, status };
}"""

PDA_HOOK_TEMPLATE = """\
type ${hook}Config = {
  programAddress?: Address;
};

export function ${hook}(${seeds_param}config: ${hook}Config = {}) {
  const [address, setAddress] = useState<Address | null>(null);
  const [status, setStatus] = useState<'idle' | 'loading' | 'success' | 'error'>('idle');
  const [error, setError] = useState<Error | null>(null);

  useEffect(() => {
    let cancelled = false;
    setStatus('loading');

    (async () => {
      try {
        const [pda] = await ${find_pda}(${seeds_arg}{ programAddress: config.programAddress });
        if (!cancelled) {
          setAddress(pda);
          setStatus('success');
        }
      } catch (e) {
        if (!cancelled) {
          setError(e instanceof Error ? e : new Error(String(e)));
          setStatus('error');
        }
      }
    })();

    return () => { cancelled = true; };
  }, [${seeds_dep}config.programAddress]);

  return { address, error, status };
}"""

PROGRAM_ERROR_HELPER_TEMPLATE = """
  const decodeError = useCallback((errorCode: number): string | undefined => {
    if (${is_error}(errorCode)) {
      return ${get_message}(errorCode as ${error_union});
    }
    return undefined;
  }, []);"""

PROGRAM_HOOK_TEMPLATE = """\
type ${hook}Config = {
  programAddress?: Address;
};

export function ${hook}(config: ${hook}Config = {}) {
  const programAddress = useMemo(
    () => config.programAddress ?? ${address_constant},
    [config.programAddress],
  );${error_helper}

  return { programAddress${decode_error_return} };
}"""

RPC_TYPES = ["type Rpc", "type SolanaRpcApi"]
RPC_SUBSCRIPTION_TYPES = ["type RpcSubscriptions", "type SolanaRpcSubscriptionsApi"]


# ===--- Hook builders ---=== #


def _has_variable_seeds(pda_node: Node) -> bool:
    return any(seed.kind == "variablePdaSeedNode" for seed in pda_node.seeds)


def get_account_hook_fragment(account_node: Node, scope: HooksRenderScope) -> Fragment:
    api = scope.name_api
    data_type = api["dataType"](account_node.name)
    decoder = api["decoderFunction"](account_node.name)

    f = fragment(
        ACCOUNT_HOOK_TEMPLATE,
        hook=api["accountHook"](account_node.name),
        data_type=data_type,
        decoder=decoder,
    )
    f = add_fragment_imports(f, "react", ["useEffect", "useMemo", "useState"])
    f = add_fragment_imports(f, "solanaAddresses", ["type Address"])
    f = add_fragment_imports(f, "solanaRpc", RPC_TYPES)
    f = add_fragment_imports(f, "solanaRpcSubscriptions", RPC_SUBSCRIPTION_TYPES)
    return add_fragment_imports(f, "generatedClient", [f"type {data_type}", decoder])


def get_account_from_seeds_hook_fragment(
    account_path: NodePath, scope: HooksRenderScope
) -> Fragment | None:
    """Hook deriving the account address from its PDA seeds.

    Returns None when the account has no PDA link or the link does not
    resolve to a PDA in the tree.
    """
    account_node = get_last_node_from_path(account_path)
    if account_node.pda is None:
        return None
    pda_node = scope.linkables.get(account_path, account_node.pda)
    if pda_node is None:
        return None

    api = scope.name_api
    data_type = api["dataType"](account_node.name)
    decoder = api["decoderFunction"](account_node.name)
    find_pda = api["pdaFindFunction"](pda_node.name)
    seeds_type = api["pdaSeedsType"](pda_node.name)
    variable = _has_variable_seeds(pda_node)

    f = fragment(
        ACCOUNT_FROM_SEEDS_HOOK_TEMPLATE,
        hook=api["accountFromSeedsHook"](account_node.name),
        data_type=data_type,
        decoder=decoder,
        find_pda=find_pda,
        seeds_param=f"seeds: {seeds_type}, " if variable else "",
        seeds_arg="seeds, " if variable else "",
        seeds_dep=", seeds" if variable else "",
    )
    f = add_fragment_imports(f, "react", ["useEffect", "useMemo", "useState"])
    f = add_fragment_imports(f, "solanaAddresses", ["type Address"])
    f = add_fragment_imports(f, "solanaRpc", RPC_TYPES)
    f = add_fragment_imports(f, "solanaRpcSubscriptions", RPC_SUBSCRIPTION_TYPES)
    f = add_fragment_imports(f, "generatedClient", [f"type {data_type}", decoder, find_pda])
    if variable:
        f = add_fragment_imports(f, "generatedClient", [f"type {seeds_type}"])
    return f


def get_batch_account_hook_fragment(account_node: Node, scope: HooksRenderScope) -> Fragment:
    api = scope.name_api
    data_type = api["dataType"](account_node.name)
    decoder = api["decoderFunction"](account_node.name)

    f = fragment(
        BATCH_ACCOUNT_HOOK_TEMPLATE,
        hook=api["batchAccountHook"](account_node.name),
        data_type=data_type,
        decoder=decoder,
    )
    f = add_fragment_imports(f, "react", ["useEffect", "useMemo", "useState"])
    f = add_fragment_imports(f, "solanaAddresses", ["type Address"])
    f = add_fragment_imports(f, "solanaRpc", RPC_TYPES)
    return add_fragment_imports(f, "generatedClient", [f"type {data_type}", decoder])


def get_account_hook_page_fragment(account_path: NodePath, scope: HooksRenderScope) -> Fragment:
    account_node = get_last_node_from_path(account_path)
    return merge_fragments(
        [
            get_account_hook_fragment(account_node, scope),
            get_account_from_seeds_hook_fragment(account_path, scope),
            get_batch_account_hook_fragment(account_node, scope),
        ],
        join_paragraphs,
    )


def get_instruction_hook_fragment(instruction_node: Node, scope: HooksRenderScope) -> Fragment:
    api = scope.name_api
    instruction_fn = api["instructionSyncFunction"](instruction_node.name)
    input_type = api["instructionSyncInputType"](instruction_node.name)

    f = fragment(
        INSTRUCTION_HOOK_TEMPLATE,
        hook=api["instructionHook"](instruction_node.name),
        instruction_fn=instruction_fn,
        input_type=input_type,
    )
    f = add_fragment_imports(f, "react", ["useCallback", "useState"])
    f = add_fragment_imports(f, "solanaRpc", RPC_TYPES)
    f = add_fragment_imports(f, "solanaRpcSubscriptions", RPC_SUBSCRIPTION_TYPES)
    f = add_fragment_imports(
        f, "solanaSigners", ["type TransactionSigner", "signTransactionMessageWithSigners"]
    )
    f = add_fragment_imports(f, "solanaFunctional", ["pipe"])
    f = add_fragment_imports(f, "solanaKeys", ["type Signature"])
    f = add_fragment_imports(
        f,
        "solanaTransactionMessages",
        [
            "appendTransactionMessageInstruction",
            "createTransactionMessage",
            "setTransactionMessageFeePayerSigner",
            "setTransactionMessageLifetimeUsingBlockhash",
        ],
    )
    f = add_fragment_imports(f, "solanaTransactions", ["getSignatureFromTransaction"])
    f = add_fragment_imports(
        f, "solanaTransactionConfirmation", ["sendAndConfirmTransactionFactory"]
    )
    return add_fragment_imports(f, "generatedClient", [instruction_fn, f"type {input_type}"])


def get_pda_hook_fragment(pda_node: Node, scope: HooksRenderScope) -> Fragment:
    api = scope.name_api
    find_pda = api["pdaFindFunction"](pda_node.name)
    seeds_type = api["pdaSeedsType"](pda_node.name)
    variable = _has_variable_seeds(pda_node)

    f = fragment(
        PDA_HOOK_TEMPLATE,
        hook=api["pdaHook"](pda_node.name),
        find_pda=find_pda,
        seeds_param=f"seeds: {seeds_type}, " if variable else "",
        seeds_arg="seeds, " if variable else "",
        seeds_dep="seeds, " if variable else "",
    )
    f = add_fragment_imports(f, "react", ["useEffect", "useState"])
    f = add_fragment_imports(f, "solanaAddresses", ["type Address"])
    f = add_fragment_imports(f, "generatedClient", [find_pda])
    if variable:
        f = add_fragment_imports(f, "generatedClient", [f"type {seeds_type}"])
    return f


def get_program_hook_fragment(program_node: Node, scope: HooksRenderScope) -> Fragment:
    api = scope.name_api
    address_constant = api["programAddressConstant"](program_node.name)
    has_errors = bool(get_all_errors(program_node))

    error_helper = ""
    client_imports = [address_constant]
    react_imports = ["useMemo"]
    if has_errors:
        is_error = api["programIsErrorFunction"](program_node.name)
        get_message = api["programGetErrorMessageFunction"](program_node.name)
        error_union = api["programErrorUnion"](program_node.name)
        error_helper = fragment(
            PROGRAM_ERROR_HELPER_TEMPLATE,
            is_error=is_error,
            get_message=get_message,
            error_union=error_union,
        )
        client_imports += [is_error, get_message, f"type {error_union}"]
        react_imports.append("useCallback")

    f = fragment(
        PROGRAM_HOOK_TEMPLATE,
        hook=api["programHook"](program_node.name),
        address_constant=address_constant,
        error_helper=error_helper,
        decode_error_return=", decodeError" if has_errors else "",
    )
    f = add_fragment_imports(f, "react", react_imports)
    f = add_fragment_imports(f, "solanaAddresses", ["type Address"])
    return add_fragment_imports(f, "generatedClient", client_imports)


def get_index_page_fragment(items: Iterable[Node]) -> Fragment | None:
    """Barrel re-exporting ``./<name>`` once per distinct camelCased name."""
    names = sorted({camel_case(item.name) for item in items})
    if not names:
        return None
    return merge_fragments([get_export_all_fragment(f"./{name}") for name in names], join_lines)


def get_page_fragment(body: Fragment, resolver: ModuleResolver) -> Fragment:
    """Wrap a hook body into a complete module.

    The body's logical imports are resolved with ``resolver`` and
    serialized above it; the returned fragment carries the resolved map.
    """
    resolved = resolver.resolve(body.imports)
    sections = ["'use client';", GENERATED_BANNER]
    import_block = import_map_to_string(resolved)
    if import_block:
        sections.append(import_block)
    sections.append(body.content.strip("\n"))
    return Fragment("\n\n".join(sections) + "\n", resolved)


# ===--- Render map visitor ---=== #

HOOK_PAGE_KINDS = ("rootNode", "programNode", "pdaNode", "accountNode", "instructionNode")


def get_render_map_visitor(options: HooksRenderOptions | None = None) -> Visitor[RenderMap]:
    """Visitor turning a root or program node into the hooks render map.

    Raises:
        ValueError: If the strategy or a name transformer role is unknown.
    """
    options = options or HooksRenderOptions()
    linkables = LinkableDictionary()
    stack = NodeStack()
    scope = HooksRenderScope(
        name_api=get_name_api(HOOK_NAME_DEFAULTS, options.name_transformers),
        resolver=ModuleResolver(
            strategy=ModuleResolutionStrategy(options.module_resolution_strategy),
            client_package=options.client_package,
        ),
        linkables=linkables,
    )

    def page(path: str, body: Fragment | None) -> RenderMap:
        return create_render_map(path, body)

    def wrap_pages(node: Node, proceed: Callable[[], RenderMap]) -> RenderMap:
        # Bodies sharing a path are merged first so each module is wrapped once.
        if not stack.is_empty():
            return proceed()
        return map_render_map(
            proceed(),
            lambda path, body: get_page_fragment(body, scope.resolver.at_depth(hook_depth(path))),
        )

    def visit_account(node: Node, ctx: VisitContext) -> RenderMap:
        account_path = stack.get_path("accountNode")
        account_node = get_last_node_from_path(account_path)
        return page(
            f"{HOOKS_DIR}/{camel_case(account_node.name)}.ts",
            get_account_hook_page_fragment(account_path, scope),
        )

    def visit_instruction(node: Node, ctx: VisitContext) -> RenderMap:
        instruction_node = get_last_node_from_path(stack.get_path("instructionNode"))
        return page(
            f"{HOOKS_DIR}/instructions/{camel_case(instruction_node.name)}.ts",
            get_instruction_hook_fragment(instruction_node, scope),
        )

    def visit_pda(node: Node, ctx: VisitContext) -> RenderMap:
        pda_node = get_last_node_from_path(stack.get_path("pdaNode"))
        return page(
            f"{HOOKS_DIR}/pdas/{camel_case(pda_node.name)}.ts",
            get_pda_hook_fragment(pda_node, scope),
        )

    def visit_program(node: Node, ctx: VisitContext) -> RenderMap:
        return merge_render_maps(
            [
                page(f"{HOOKS_DIR}/{camel_case(node.name)}.ts", get_program_hook_fragment(node, scope)),
                *(ctx.visit(p) for p in node.pdas),
                *(ctx.visit(a) for a in node.accounts),
                *(
                    ctx.visit(i)
                    for i in get_all_instructions_with_subs(node, leaves_only=True)
                ),
            ]
        )

    def visit_root(node: Node, ctx: VisitContext) -> RenderMap:
        programs = get_all_programs(node)
        return merge_render_maps(
            [
                page(
                    f"{HOOKS_DIR}/index.ts",
                    get_index_page_fragment([*get_all_accounts(node), *programs]),
                ),
                page(
                    f"{HOOKS_DIR}/instructions/index.ts",
                    get_index_page_fragment(get_all_instructions_with_subs(node, leaves_only=True)),
                ),
                page(f"{HOOKS_DIR}/pdas/index.ts", get_index_page_fragment(get_all_pdas(node))),
                *(ctx.visit(p) for p in programs),
            ]
        )

    visitor = extend_visitor(
        static_visitor(lambda node: create_render_map(), HOOK_PAGE_KINDS),
        {
            "accountNode": visit_account,
            "instructionNode": visit_instruction,
            "pdaNode": visit_pda,
            "programNode": visit_program,
            "rootNode": visit_root,
        },
    )
    visitor = record_node_stack_visitor(visitor, stack)
    visitor = intercept_visitor(visitor, wrap_pages)
    return record_linkables_on_first_visit_visitor(visitor, linkables)


def get_hooks_render_map(root: RootNode, options: HooksRenderOptions | None = None) -> RenderMap:
    return visit(root, get_render_map_visitor(options))


def render_hooks(
    root: RootNode, package_folder: Path, options: HooksRenderOptions | None = None
) -> RenderWriteResult:
    """Render hook modules into ``package_folder / generated_folder``.

    The full render map (and any formatting) is built before the output
    folder is cleared, so a failure leaves existing files untouched.

    Raises:
        ValueError: Unknown strategy, name transformer role or invalid path.
        FormatError: The configured formatter rejected a module.
        OSError: Propagated directly from deletion or writing.
    """
    options = options or HooksRenderOptions()
    render_map = get_hooks_render_map(root, options)
    return emit_render_map(
        render_map,
        generated_output_dir(package_folder, options.generated_folder),
        delete_folder_before_rendering=options.delete_folder_before_rendering,
        format_command=options.format_command,
    )
