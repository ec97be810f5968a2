"""Tree model: node kinds, the immutable node arena, and the Java front end."""

from javacheck.tree.java_parser import JavaSyntaxError, parse_file, parse_source
from javacheck.tree.nodes import (
    CLASS_KINDS,
    SCOPE_KINDS,
    NodeKind,
    NodeSpec,
    SyntaxNode,
    SyntaxTree,
    TreeBuilder,
    TreeShapeError,
    build_tree,
    node_spec,
)
from javacheck.tree.render import render_tree, tree_to_dict

__all__ = [
    "CLASS_KINDS",
    "SCOPE_KINDS",
    "JavaSyntaxError",
    "NodeKind",
    "NodeSpec",
    "SyntaxNode",
    "SyntaxTree",
    "TreeBuilder",
    "TreeShapeError",
    "build_tree",
    "node_spec",
    "parse_file",
    "parse_source",
    "render_tree",
    "tree_to_dict",
]
