"""Package-dependency rule: a package must not import from another package."""

from __future__ import annotations

import fnmatch
from typing import TYPE_CHECKING

from javacheck.query.search import qualified_name
from javacheck.rules.base import Rule
from javacheck.tree.nodes import NodeKind

if TYPE_CHECKING:
    from javacheck.rules.base import FileContext
    from javacheck.tree.nodes import SyntaxNode

_GLOB_CHARS = frozenset("*?[")


def matches_package(name: str, pattern: str) -> bool:
    """Return True when *name* matches *pattern*.

    A pattern containing ``*``, ``?`` or ``[`` is an ``fnmatch`` glob;
    anything else is a plain prefix (``com.acme`` matches ``com.acme.web``).
    """
    if _GLOB_CHARS.intersection(pattern):
        return fnmatch.fnmatchcase(name, pattern)
    return name.startswith(pattern)


class ForbiddenImportRule(Rule):
    """Files in packages matching ``from_pattern`` must not import ``to_pattern``.

    Each package declaration decides whether the following imports are
    checked; the decision never carries over to the next file.
    """

    rule_type = "forbid_import"
    tokens = frozenset({NodeKind.PACKAGE_DEF, NodeKind.IMPORT, NodeKind.STATIC_IMPORT})

    def __init__(
        self,
        name: str,
        *,
        from_pattern: str,
        to_pattern: str,
        description: str = "",
        severity: str = "error",
    ) -> None:
        super().__init__(name, description=description, severity=severity)
        if not from_pattern.strip():
            msg = f"Rule '{name}': forbid_import.from must be a non-empty string"
            raise ValueError(msg)
        if not to_pattern.strip():
            msg = f"Rule '{name}': forbid_import.to must be a non-empty string"
            raise ValueError(msg)
        self.from_pattern = from_pattern
        self.to_pattern = to_pattern
        self._in_source_package = False

    def begin_file(self, context: FileContext) -> None:
        self._in_source_package = False

    def visit(self, node: SyntaxNode, context: FileContext) -> None:
        if node.kind is NodeKind.PACKAGE_DEF:
            self._in_source_package = matches_package(qualified_name(node), self.from_pattern)
            return
        if not self._in_source_package:
            return
        imported = qualified_name(node)
        if matches_package(imported, self.to_pattern):
            self.log(context, node.line, f"imports {imported} (forbidden: {self.to_pattern})")
