"""Rule forbidding reassignment of method and constructor parameters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from javacheck.query.declarations import assignment_target
from javacheck.query.resolver import resolve_declaration
from javacheck.rules.base import Rule
from javacheck.tree.nodes import NodeKind

if TYPE_CHECKING:
    from javacheck.rules.base import FileContext
    from javacheck.tree.nodes import SyntaxNode

# Assignments that declare or name something rather than reassign it.
_NON_REASSIGNING_PARENTS = frozenset(
    {NodeKind.VARIABLE_DEF, NodeKind.ANNOTATION_MEMBER_VALUE_PAIR}
)


class ParameterAssignmentRule(Rule):
    """Report ``p = ...`` where ``p`` resolves to a parameter.

    Element writes (``p[0] = ...``) and field writes (``this.p = ...``) do not
    rebind the parameter and are not reported.
    """

    rule_type = "forbid_parameter_assignment"
    tokens = frozenset({NodeKind.ASSIGN})

    def visit(self, node: SyntaxNode, context: FileContext) -> None:
        parent = node.parent
        if parent is not None and parent.kind in _NON_REASSIGNING_PARENTS:
            return
        first = node.first_child
        if first is None or first.kind is not NodeKind.IDENT:
            return
        target = assignment_target(node)
        if target is None:
            return
        declaration = resolve_declaration(target)
        if declaration is not None and declaration.kind is NodeKind.PARAMETER_DEF:
            self.log(
                context,
                node.line,
                f"parameter '{target.text}' (line {declaration.line}) is reassigned",
            )
