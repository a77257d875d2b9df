"""Render Markdown docs and React hooks from an on-chain program interface tree."""

from .docs import DocsRenderOptions, render_docs
from .hooks import HooksRenderOptions, render_hooks
from .nodes import load_root_node, root_node_from_dict, root_node_from_json

__all__ = [
    "DocsRenderOptions",
    "HooksRenderOptions",
    "load_root_node",
    "render_docs",
    "render_hooks",
    "root_node_from_dict",
    "root_node_from_json",
]
