"""Naming-convention rule: classes with a given suffix must extend a base class."""

from __future__ import annotations

from typing import TYPE_CHECKING

from javacheck.query.declarations import is_inner_class
from javacheck.query.search import has_annotation, super_class_name
from javacheck.rules.base import Rule
from javacheck.tree.nodes import NodeKind

if TYPE_CHECKING:
    from javacheck.rules.base import FileContext
    from javacheck.tree.nodes import SyntaxNode


class ClassSuffixRule(Rule):
    """Every class named ``*<suffix>`` must extend ``superclass``.

    When ``annotation`` is set the class must also carry that annotation at
    class level.  With ``skip_inner`` nested classes are exempt.

    Example (suffix ``HTMLAction``, superclass ``HTMLActionSupport``)::

        class LoginHTMLAction extends HTMLActionSupport { }   // ok
        class LoginHTMLAction { }                             // violation
    """

    rule_type = "class_suffix"
    tokens = frozenset({NodeKind.CLASS_DEF})

    def __init__(
        self,
        name: str,
        *,
        suffix: str,
        superclass: str | None = None,
        annotation: str | None = None,
        skip_inner: bool = False,
        description: str = "",
        severity: str = "error",
    ) -> None:
        super().__init__(name, description=description, severity=severity)
        if not suffix:
            msg = f"Rule '{name}': suffix must be a non-empty string"
            raise ValueError(msg)
        if superclass is None and annotation is None:
            msg = f"Rule '{name}': at least one of 'extends' or 'annotation' is required"
            raise ValueError(msg)
        self.suffix = suffix
        self.superclass = superclass
        self.annotation = annotation
        self.skip_inner = skip_inner

    def visit(self, node: SyntaxNode, context: FileContext) -> None:
        ident = node.find_child(NodeKind.IDENT)
        if ident is None or ident.text is None or not ident.text.endswith(self.suffix):
            return
        if self.skip_inner and is_inner_class(node):
            return

        class_name = ident.text
        if self.superclass is not None:
            actual = super_class_name(node)
            if actual != self.superclass:
                if actual is None:
                    message = f"{class_name} must extend {self.superclass}"
                else:
                    message = f"{class_name} must extend {self.superclass}, not {actual}"
                self.log(context, node.line, message)

        if self.annotation is not None:
            modifiers = node.find_child(NodeKind.MODIFIERS)
            if modifiers is None or not has_annotation(modifiers, self.annotation):
                message = f"{class_name} must be annotated with @{self.annotation}"
                self.log(context, node.line, message)
