"""Case conventions and the per-role NameApi."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

# ===--- Case helpers ---=== #

_UPPER_RE = re.compile(r"([A-Z])")
_WORD_SEPARATOR_RE = re.compile(r"[-_\s+.]")


def capitalize(value: str) -> str:
    if not value:
        return value
    return value[0].upper() + value[1:].lower()


def title_case(value: str) -> str:
    spaced = _UPPER_RE.sub(r" \1", value)
    words = [word for word in _WORD_SEPARATOR_RE.split(spaced) if word]
    return " ".join(capitalize(word) for word in words)


def pascal_case(value: str) -> str:
    return "".join(title_case(value).split(" "))


def camel_case(value: str) -> str:
    if not value:
        return value
    pascal = pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def kebab_case(value: str) -> str:
    return "-".join(title_case(value).split(" ")).lower()


def snake_case(value: str) -> str:
    return "_".join(title_case(value).split(" ")).lower()


@dataclass(frozen=True)
class NameTransformerHelpers:
    camel_case: Callable[[str], str] = camel_case
    capitalize: Callable[[str], str] = capitalize
    kebab_case: Callable[[str], str] = kebab_case
    pascal_case: Callable[[str], str] = pascal_case
    snake_case: Callable[[str], str] = snake_case
    title_case: Callable[[str], str] = title_case


CASE_HELPERS = NameTransformerHelpers()

NameTransformer = Callable[[str, NameTransformerHelpers], str]


# ===--- Default transformers ---=== #

CLIENT_NAME_TRANSFORMERS: dict[str, NameTransformer] = {
    "accountDecodeFunction": lambda name, h: f"decode{h.pascal_case(name)}",
    "accountFetchAllFunction": lambda name, h: f"fetchAll{h.pascal_case(name)}",
    "accountFetchFunction": lambda name, h: f"fetch{h.pascal_case(name)}",
    "accountFetchMaybeFunction": lambda name, h: f"fetchMaybe{h.pascal_case(name)}",
    "accountType": lambda name, h: h.pascal_case(name),
    "dataType": lambda name, h: h.pascal_case(name),
    "decoderFunction": lambda name, h: f"get{h.pascal_case(name)}Decoder",
    "encoderFunction": lambda name, h: f"get{h.pascal_case(name)}Encoder",
    "instructionAsyncFunction": lambda name, h: f"get{h.pascal_case(name)}InstructionAsync",
    "instructionAsyncInputType": lambda name, h: f"{h.pascal_case(name)}AsyncInput",
    "instructionSyncFunction": lambda name, h: f"get{h.pascal_case(name)}Instruction",
    "instructionSyncInputType": lambda name, h: f"{h.pascal_case(name)}Input",
    "pdaFindFunction": lambda name, h: f"find{h.pascal_case(name)}Pda",
    "pdaSeedsType": lambda name, h: f"{h.pascal_case(name)}Seeds",
    "programAddressConstant": lambda name, h: f"{h.snake_case(name).upper()}_PROGRAM_ADDRESS",
    "programErrorUnion": lambda name, h: f"{h.pascal_case(name)}Error",
    "programGetErrorMessageFunction": lambda name, h: f"get{h.pascal_case(name)}ErrorMessage",
    "programIsErrorFunction": lambda name, h: f"is{h.pascal_case(name)}Error",
}
"""Names of symbols exported by the generated JS client."""

HOOK_NAME_TRANSFORMERS: dict[str, NameTransformer] = {
    "accountFromSeedsHook": lambda name, h: f"use{h.pascal_case(name)}FromSeeds",
    "accountHook": lambda name, h: f"use{h.pascal_case(name)}",
    "batchAccountHook": lambda name, h: f"use{h.pascal_case(name)}s",
    "instructionHook": lambda name, h: f"use{h.pascal_case(name)}",
    "pdaHook": lambda name, h: f"use{h.pascal_case(name)}Address",
    "programHook": lambda name, h: f"useProgram{h.pascal_case(name)}",
}
"""Names of the generated React hooks."""


# ===--- NameApi ---=== #


class NameApi(Mapping[str, Callable[[str], str]]):
    """Role -> identifier function, e.g. ``api["pdaFindFunction"]("counter")``."""

    def __init__(
        self,
        transformers: Mapping[str, NameTransformer],
        helpers: NameTransformerHelpers = CASE_HELPERS,
    ):
        self._transformers = dict(transformers)
        self._helpers = helpers

    def __getitem__(self, role: str) -> Callable[[str], str]:
        transformer = self._transformers[role]
        return lambda name: transformer(name, self._helpers)

    def __iter__(self):
        return iter(self._transformers)

    def __len__(self) -> int:
        return len(self._transformers)


def get_name_api(
    defaults: Mapping[str, NameTransformer],
    overrides: Mapping[str, NameTransformer] | None = None,
) -> NameApi:
    """Build a NameApi from default transformers plus partial overrides.

    Raises:
        ValueError: If an override names a role the defaults do not define.
    """
    overrides = overrides or {}
    unknown = sorted(set(overrides) - set(defaults))
    if unknown:
        raise ValueError(f"Unknown name transformer role(s): {', '.join(unknown)}")
    return NameApi({**defaults, **overrides})


def template_name_transformer(template: str) -> NameTransformer:
    """Turn a ``str.format`` pattern into a transformer.

    Available fields: ``name`` (as declared) and one per case helper,
    e.g. ``"use{pascalCase}Account"``.
    """

    def _transform(name: str, helpers: NameTransformerHelpers) -> str:
        return template.format(
            name=name,
            camelCase=helpers.camel_case(name),
            capitalize=helpers.capitalize(name),
            kebabCase=helpers.kebab_case(name),
            pascalCase=helpers.pascal_case(name),
            snakeCase=helpers.snake_case(name),
            titleCase=helpers.title_case(name),
        )

    return _transform
