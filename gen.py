"""Docs and React hooks generator for on-chain program interface trees.

Renders Markdown documentation or React hook modules from a JSON
interface tree (rootNode or programNode).

Usage:
    python gen.py docs --idl idl.json --output-dir packages/client
    python gen.py hooks --idl idl.json --module-resolution granular
"""

from idlrender.cli import main

if __name__ == "__main__":
    main()
