"""Render syntax trees for humans (Rich) and machines (JSON-compatible dicts)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape

if TYPE_CHECKING:
    from rich.console import Console
    from rich.tree import Tree

    from javacheck.tree.nodes import SyntaxNode, SyntaxTree


def _label(node: SyntaxNode) -> str:
    label = f"[bold]{node.kind.name}[/] [dim]line {node.line}[/]"
    if node.text is not None:
        label += f" [cyan]{escape(node.text)}[/]"
    return label


def _render_subtree(node: SyntaxNode, parent: Tree) -> None:
    for child in node.children:
        branch = parent.add(_label(child))
        _render_subtree(child, branch)


def render_tree(tree: SyntaxTree, console: Console) -> None:
    """Print *tree* as a Rich tree."""
    from rich.tree import Tree

    title = f"[bold blue]{escape(tree.path or '<source>')}[/]"
    root = Tree(title)
    branch = root.add(_label(tree.root))
    _render_subtree(tree.root, branch)
    console.print(root)


def tree_to_dict(node: SyntaxNode) -> dict[str, object]:
    """Convert the subtree rooted at *node* to a JSON-compatible dict."""
    data: dict[str, object] = {"kind": node.kind.name, "line": node.line}
    if node.text is not None:
        data["text"] = node.text
    data["children"] = [tree_to_dict(child) for child in node.children]
    return data
