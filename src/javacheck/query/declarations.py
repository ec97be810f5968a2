"""Declaration sites: declared names, enclosing scopes, and assignment targets."""

from __future__ import annotations

from typing import TYPE_CHECKING

from javacheck.tree.nodes import CLASS_KINDS, SCOPE_KINDS, NodeKind, TreeShapeError

if TYPE_CHECKING:
    from javacheck.tree.nodes import SyntaxNode

DECLARATION_KINDS: frozenset[NodeKind] = frozenset({NodeKind.VARIABLE_DEF, NodeKind.PARAMETER_DEF})

# VARIABLE_DEF / PARAMETER_DEF children: MODIFIERS, TYPE, IDENT, ...
_NAME_SLOT = 2


def declared_name(def_node: SyntaxNode) -> str:
    """Return the identifier declared by a VARIABLE_DEF or PARAMETER_DEF.

    Example: ``int count`` parses as::

        VARIABLE_DEF
        |- MODIFIERS
        |- TYPE
        |  `- PRIMITIVE_TYPE (int)
        `- IDENT (count)   <- returned
    """
    if def_node.kind not in DECLARATION_KINDS:
        msg = f"expected VARIABLE_DEF or PARAMETER_DEF, got {def_node.kind.name}"
        raise TreeShapeError(msg)
    children = def_node.children
    if len(children) <= _NAME_SLOT or children[_NAME_SLOT].kind is not NodeKind.IDENT:
        msg = f"{def_node.kind.name} at line {def_node.line} has no name after modifiers and type"
        raise TreeShapeError(msg)
    name = children[_NAME_SLOT].text
    if name is None:
        msg = f"{def_node.kind.name} at line {def_node.line} has an empty name"
        raise TreeShapeError(msg)
    return name


def enclosing_scope(node: SyntaxNode) -> SyntaxNode:
    """Return the nearest class, constructor or method node at or above *node*."""
    current: SyntaxNode | None = node
    while current is not None:
        if current.kind in SCOPE_KINDS:
            return current
        current = current.parent
    msg = f"{node.kind.name} at line {node.line} is not inside a class, constructor or method"
    raise TreeShapeError(msg)


def enclosing_class(node: SyntaxNode) -> SyntaxNode | None:
    """Return the nearest class definition strictly above *node*, or ``None``."""
    current = node.parent
    while current is not None and current.kind not in CLASS_KINDS:
        current = current.parent
    return current


def is_inner_class(class_def: SyntaxNode) -> bool:
    """Return True when *class_def* is nested inside another class."""
    return enclosing_class(class_def) is not None


def assignment_target(assign: SyntaxNode) -> SyntaxNode | None:
    """Return the IDENT node an ASSIGN assigns to, or ``None``.

    The target's position depends on where the assignment occurs:

    - variable initializer, ``int x = 10;``:
      ``VARIABLE_DEF(MODIFIERS, TYPE, IDENT, ASSIGN(EXPR(...)))``
    - annotation member, ``@Bean(name = "dao")``:
      ``ANNOTATION_MEMBER_VALUE_PAIR(IDENT, ASSIGN, EXPR)``
    - array element, ``result[0] = msg;``:
      ``ASSIGN(INDEX_OP(IDENT, EXPR), ...)``
    - field, ``this.login = user;``:
      ``ASSIGN(DOT(LITERAL_THIS, IDENT), ...)``
    - array initializer or lambda, ``String[] h = {"a"};``:
      ``VARIABLE_DEF(..., IDENT, ASSIGN(ARRAY_INIT(...)))``
    - plain reassignment, ``x = 10;``: ``ASSIGN(IDENT, ...)``
    """
    if assign.kind is not NodeKind.ASSIGN:
        msg = f"expected ASSIGN, got {assign.kind.name}"
        raise TreeShapeError(msg)

    parent = assign.parent
    first = assign.first_child
    if assign.find_child(NodeKind.EXPR) is not None:
        target = assign.previous_sibling
    elif parent is not None and parent.kind is NodeKind.ANNOTATION_MEMBER_VALUE_PAIR:
        target = assign.previous_sibling
    elif first is None:
        return None
    elif first.kind is NodeKind.INDEX_OP:
        target = first.first_child
        while target is not None and target.kind is NodeKind.INDEX_OP:
            target = target.first_child
    elif first.kind is NodeKind.DOT:
        head = first.first_child
        if head is None or head.kind is not NodeKind.LITERAL_THIS:
            return None
        target = first.find_child(NodeKind.IDENT)
    elif first.kind in (NodeKind.ARRAY_INIT, NodeKind.LAMBDA):
        target = assign.previous_sibling
    else:
        target = first

    if target is None or target.kind is not NodeKind.IDENT:
        return None
    return target


def assignment_target_name(assign: SyntaxNode) -> str | None:
    """Return the name of the variable an ASSIGN assigns to, or ``None``."""
    target = assignment_target(assign)
    return target.text if target is not None else None
