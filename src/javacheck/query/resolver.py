"""Symbol resolver: bind an identifier use to its variable or parameter definition.

Resolution uses only tree shape and line numbers; there is no symbol table.
The candidates are every VARIABLE_DEF and PARAMETER_DEF in the subtree of the
class that encloses the use, filtered by name, by line (no forward references)
and by scope.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from javacheck.query.declarations import declared_name, enclosing_class, enclosing_scope
from javacheck.query.search import find_all_descendants
from javacheck.tree.nodes import NodeKind, TreeShapeError

if TYPE_CHECKING:
    from javacheck.tree.nodes import SyntaxNode

logger = logging.getLogger(__name__)


def is_this_qualified(ident: SyntaxNode) -> bool:
    """Return True for the ``x`` of ``this.x``."""
    previous = ident.previous_sibling
    return previous is not None and previous.kind is NodeKind.LITERAL_THIS


def _find_variable_def(
    ident: SyntaxNode,
    class_def: SyntaxNode,
    use_scope: SyntaxNode,
    *,
    this_qualified: bool,
) -> SyntaxNode | None:
    found: SyntaxNode | None = None
    closest_line = 0
    for candidate in find_all_descendants(class_def, NodeKind.VARIABLE_DEF):
        if declared_name(candidate) != ident.text or candidate.line > ident.line:
            continue
        scope = enclosing_scope(candidate)
        if this_qualified:
            # ``this.x`` is always a field: first class-scope match wins.
            if scope == class_def:
                return candidate
            continue
        # Equal lines (several declarators in one statement): the later one wins.
        if candidate.line >= closest_line and scope in (use_scope, class_def):
            found = candidate
            closest_line = candidate.line
    return found


def _find_parameter_def(
    ident: SyntaxNode, class_def: SyntaxNode, use_scope: SyntaxNode
) -> SyntaxNode | None:
    found: SyntaxNode | None = None
    closest_line = 0
    for candidate in find_all_descendants(class_def, NodeKind.PARAMETER_DEF):
        if (
            declared_name(candidate) == ident.text
            and closest_line <= candidate.line <= ident.line
            and enclosing_scope(candidate).line == use_scope.line
        ):
            found = candidate
            closest_line = candidate.line
    return found


def resolve_declaration(ident: SyntaxNode) -> SyntaxNode | None:
    """Return the VARIABLE_DEF or PARAMETER_DEF that *ident* most plausibly binds to.

    Policy:

    - ``this.x`` resolves to the first field ``x`` of the enclosing class
      declared on or before the use line; parameters and locals are ignored.
    - An unqualified ``x`` resolves to the nearest preceding declaration whose
      scope is the scope of the use or the enclosing class itself.
    - A matching parameter of the use's method shadows any variable found.

    Returns ``None`` when nothing matches, including uses outside any class.

    Raises
    ------
    TreeShapeError
        When *ident* is not an IDENT node.
    """
    if ident.kind is not NodeKind.IDENT:
        msg = f"expected IDENT, got {ident.kind.name}"
        raise TreeShapeError(msg)

    class_def = enclosing_class(ident)
    if class_def is None:
        return None
    use_scope = enclosing_scope(ident)
    this_qualified = is_this_qualified(ident)

    variable = _find_variable_def(ident, class_def, use_scope, this_qualified=this_qualified)
    if this_qualified:
        return variable

    parameter = _find_parameter_def(ident, class_def, use_scope)
    if parameter is not None:
        logger.debug(
            "%r at line %d binds to parameter at line %d", ident.text, ident.line, parameter.line
        )
        return parameter
    return variable
