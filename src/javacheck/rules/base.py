"""Rule interface: the per-file context, violations, and the abstract Rule."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from javacheck.tree.nodes import NodeKind, SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)

VALID_RULE_SEVERITIES: frozenset[str] = frozenset({"error", "warn"})


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Violation:
    """A single rule violation."""

    rule_name: str
    rule_description: str
    rule_type: str  # "class_suffix" | "forbid_import" | ...
    severity: str  # "error" | "warn"
    file_path: str | None
    line_number: int
    message: str  # human-readable explanation


@dataclass
class FileContext:
    """Per-file state handed to every rule hook."""

    file_path: str | None
    tree: SyntaxTree
    violations: list[Violation] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Rule
# ---------------------------------------------------------------------------


class Rule(ABC):
    """Abstract base class for tree rules.

    Subclasses set ``rule_type`` and ``tokens`` and implement :meth:`visit`.
    The driver calls, for every file:

    1. :meth:`begin_file` once, before any node;
    2. :meth:`visit` for each node whose kind is in ``tokens``, in source order;
    3. :meth:`finish_file` once, after the last node.

    Per-file state must be reset in :meth:`begin_file`; a rule instance is
    reused for every file of a run.
    """

    rule_type: ClassVar[str]
    tokens: ClassVar[frozenset[NodeKind]]

    def __init__(self, name: str, *, description: str = "", severity: str = "error") -> None:
        if severity not in VALID_RULE_SEVERITIES:
            msg = f"Rule '{name}': invalid severity '{severity}'"
            raise ValueError(msg)
        self.name = name
        self.description = description
        self.severity = severity

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def begin_file(self, context: FileContext) -> None:  # noqa: B027
        """Reset per-file state.  The default does nothing."""

    @abstractmethod
    def visit(self, node: SyntaxNode, context: FileContext) -> None:
        """Inspect one node of a kind listed in ``tokens``."""

    def finish_file(self, context: FileContext) -> None:  # noqa: B027
        """Hook called after the last node of a file.  The default does nothing."""

    def log(self, context: FileContext, line: int, message: str) -> None:
        """Record a violation at *line* of the current file."""
        logger.debug("%s: %s:%d %s", self.name, context.file_path, line, message)
        context.violations.append(
            Violation(
                rule_name=self.name,
                rule_description=self.description,
                rule_type=self.rule_type,
                severity=self.severity,
                file_path=context.file_path,
                line_number=line,
                message=message,
            )
        )
