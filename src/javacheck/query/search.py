"""Tree query primitives: descendant search and qualified-name reconstruction."""

from __future__ import annotations

from typing import TYPE_CHECKING

from javacheck.tree.nodes import CLASS_KINDS, NodeKind, TreeShapeError

if TYPE_CHECKING:
    from javacheck.tree.nodes import SyntaxNode

_NAME_KINDS = frozenset({NodeKind.IDENT, NodeKind.DOT})
_PACKAGE_OR_IMPORT = frozenset({NodeKind.PACKAGE_DEF, NodeKind.IMPORT, NodeKind.STATIC_IMPORT})


def _require_node(node: SyntaxNode | None) -> SyntaxNode:
    if node is None:
        msg = "root node must not be None"
        raise TreeShapeError(msg)
    return node


def find_first_descendant(root: SyntaxNode | None, kind: NodeKind) -> SyntaxNode | None:
    """Return the first node of *kind* in pre-order, *root* itself included.

    Unlike :meth:`SyntaxNode.find_child`, which only looks at direct
    children, this searches the whole subtree.

    Raises
    ------
    TreeShapeError
        When *root* is ``None``.
    """
    node = _require_node(root)
    for candidate in node.descendants(include_self=True):
        if candidate.kind is kind:
            return candidate
    return None


def find_all_descendants(root: SyntaxNode | None, kind: NodeKind) -> list[SyntaxNode]:
    """Return every node of *kind* strictly below *root*, in source order.

    Returns an empty list when nothing matches.

    Raises
    ------
    TreeShapeError
        When *root* is ``None``.
    """
    node = _require_node(root)
    return [candidate for candidate in node.descendants() if candidate.kind is kind]


def dotted_name(node: SyntaxNode) -> str:
    """Reconstruct ``a.b.c`` from an IDENT or a left-nested DOT chain.

    A chain for ``a.b.c`` has the shape ``DOT(DOT(IDENT a, IDENT b), IDENT c)``;
    segments are joined left to right.  A wildcard segment contributes ``*``.
    """
    segments: list[str] = []
    current = node
    while current.kind is NodeKind.DOT:
        children = current.children
        if len(children) < 2 or children[1].text is None:
            msg = f"malformed name chain at line {current.line}"
            raise TreeShapeError(msg)
        segments.append(children[1].text)
        current = children[0]
    if current.text is None:
        msg = f"{current.kind.name} at line {current.line} has no name text"
        raise TreeShapeError(msg)
    segments.append(current.text)
    return ".".join(reversed(segments))


def qualified_name(node: SyntaxNode) -> str:
    """Return the fully qualified name of a package declaration or import.

    For ``package a.b.c;`` this is ``"a.b.c"``; for ``import a.b.*;`` it is
    ``"a.b.*"``.  A single-segment name is returned as is.

    Raises
    ------
    TreeShapeError
        When *node* is not a PACKAGE_DEF, IMPORT or STATIC_IMPORT node, or
        carries no name.
    """
    if node.kind not in _PACKAGE_OR_IMPORT:
        msg = f"expected PACKAGE_DEF or IMPORT, got {node.kind.name}"
        raise TreeShapeError(msg)
    name = next((c for c in node.children if c.kind in _NAME_KINDS), None)
    if name is None:
        msg = f"{node.kind.name} at line {node.line} has no name"
        raise TreeShapeError(msg)
    return dotted_name(name)


def super_class_name(class_def: SyntaxNode) -> str | None:
    """Return the superclass named in the ``extends`` clause, or ``None``.

    The name is textual (``Base`` or ``com.acme.Base``) and is not resolved.
    """
    if class_def.kind not in CLASS_KINDS:
        msg = f"expected a class definition, got {class_def.kind.name}"
        raise TreeShapeError(msg)
    clause = class_def.find_child(NodeKind.EXTENDS_CLAUSE)
    if clause is None:
        return None
    name = next((c for c in clause.children if c.kind in _NAME_KINDS), None)
    return dotted_name(name) if name is not None else None


def annotation_name(annotation: SyntaxNode) -> str | None:
    """Return the (possibly qualified) name of an ANNOTATION node."""
    name = next((c for c in annotation.children if c.kind in _NAME_KINDS), None)
    return dotted_name(name) if name is not None else None


def has_annotation(node: SyntaxNode, name: str) -> bool:
    """Return True if any annotation in the subtree of *node* is named *name*.

    The comparison is exact and case-sensitive.
    """
    return any(
        annotation_name(annotation) == name
        for annotation in find_all_descendants(node, NodeKind.ANNOTATION)
    )
