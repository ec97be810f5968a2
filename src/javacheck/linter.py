"""Linter orchestrator: load rules, parse sources, walk trees, format results."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from javacheck.query.search import qualified_name
from javacheck.rules.base import FileContext, Violation
from javacheck.rules.config import DEFAULT_RULES_PATH, LintConfig, build_rules, load_config
from javacheck.tree.java_parser import JavaSyntaxError, parse_file
from javacheck.tree.nodes import NodeKind, TreeShapeError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from javacheck.rules.base import Rule
    from javacheck.tree.nodes import SyntaxTree

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LintError(Exception):
    """Raised when lint encounters a configuration error."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileError:
    """A file (or one rule on one node) that could not be analysed."""

    file_path: str | None
    line_number: int | None
    message: str
    rule_name: str | None = None


@dataclass
class LintResult:
    """Result of a lint run."""

    violations: list[Violation] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)
    rules_evaluated: int = 0
    files_scanned: int = 0
    files_skipped: int = 0
    elapsed_ms: float = 0.0

    @property
    def error_count(self) -> int:
        """Number of violations with ``error`` severity."""
        return sum(1 for v in self.violations if v.severity == "error")


# ---------------------------------------------------------------------------
# Tree walk
# ---------------------------------------------------------------------------


def collect_sources(paths: Iterable[Path]) -> list[Path]:
    """Return the ``.java`` files named by or found under *paths*, sorted."""
    found: set[Path] = set()
    for path in paths:
        if path.is_dir():
            found.update(p for p in path.rglob("*.java") if p.is_file())
        elif path.suffix == ".java":
            found.add(path)
        else:
            logger.debug("Skipping non-Java path %s", path)
    return sorted(found)


def package_of(tree: SyntaxTree) -> str | None:
    """Return the package declared by *tree*, or ``None`` for the default package."""
    package = tree.root.find_child(NodeKind.PACKAGE_DEF)
    return qualified_name(package) if package is not None else None


def check_tree(
    tree: SyntaxTree,
    rules: Sequence[Rule],
    *,
    file_path: str | None = None,
) -> tuple[list[Violation], list[FileError]]:
    """Run *rules* over one tree and return ``(violations, errors)``.

    Every rule gets ``begin_file`` before the first node and ``finish_file``
    after the last; nodes are dispatched in source order to the rules whose
    ``tokens`` contain their kind.  A :class:`TreeShapeError` from one rule on
    one node is recorded and the walk continues.
    """
    context = FileContext(file_path=file_path, tree=tree)
    errors: list[FileError] = []

    dispatch: dict[NodeKind, list[Rule]] = {}
    for rule in rules:
        rule.begin_file(context)
        for kind in rule.tokens:
            dispatch.setdefault(kind, []).append(rule)

    for node in tree.iter_nodes():
        for rule in dispatch.get(node.kind, ()):
            try:
                rule.visit(node, context)
            except TreeShapeError as exc:
                logger.warning(
                    "%s: rule %s failed at line %d: %s", file_path, rule.name, node.line, exc
                )
                errors.append(
                    FileError(
                        file_path=file_path,
                        line_number=node.line,
                        message=str(exc),
                        rule_name=rule.name,
                    )
                )

    for rule in rules:
        rule.finish_file(context)

    return context.violations, errors


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def lint(
    paths: Sequence[Path],
    *,
    rules_path: Path | None = None,
    config: LintConfig | None = None,
) -> LintResult:
    """Run the lint process: load rules, parse every source, evaluate.

    Parameters
    ----------
    paths:
        Java files and/or directories to scan.
    rules_path:
        Optional explicit path to ``rules.yml``.  When *None* the default
        location ``./.javacheck/rules.yml`` is used.  Ignored when *config*
        is given.
    config:
        An already-loaded configuration.

    Returns
    -------
    LintResult
        Summary with violations, per-file errors, counts, and timing.

    Raises
    ------
    LintError
        When the rules file is present but contains invalid configuration.
    """
    start = time.monotonic()

    if config is None:
        if rules_path is None:
            rules_path = Path(DEFAULT_RULES_PATH)
        if not rules_path.is_file():
            logger.info("No rules file at %s, nothing to check", rules_path)
            return LintResult(elapsed_ms=(time.monotonic() - start) * 1000)
        try:
            config = load_config(rules_path)
        except ValueError as exc:
            msg = f"Invalid rules configuration: {exc}"
            raise LintError(msg) from exc

    rules = build_rules(config)
    result = LintResult(rules_evaluated=len(rules))

    for source in collect_sources(paths):
        try:
            tree = parse_file(source)
        except (JavaSyntaxError, OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot analyse %s: %s", source, exc)
            line = exc.line if isinstance(exc, JavaSyntaxError) else None
            result.errors.append(
                FileError(file_path=str(source), line_number=line, message=str(exc))
            )
            continue

        if config.ignore_packages is not None:
            package = package_of(tree)
            if package is not None and config.ignore_packages.search(package):
                logger.debug("Skipping %s (package %s is ignored)", source, package)
                result.files_skipped += 1
                continue

        violations, errors = check_tree(tree, rules, file_path=str(source))
        result.violations.extend(violations)
        result.errors.extend(errors)
        result.files_scanned += 1

    result.elapsed_ms = (time.monotonic() - start) * 1000
    logger.info(
        "Checked %d files with %d rules: %d violations",
        result.files_scanned,
        result.rules_evaluated,
        len(result.violations),
    )
    return result


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_rich(result: LintResult) -> str:
    """Format a LintResult as human-readable text.

    Example output with violations::

        Rules: 2 loaded
        Files: 25 scanned, 1 skipped

        x html-action-base
          HTML actions must extend HTMLActionSupport
          src/LoginHTMLAction.java:3 -> LoginHTMLAction must extend HTMLActionSupport

        1 violations found (2 rules evaluated, 0.8s)
    """
    lines: list[str] = []

    lines.append(f"Rules: {result.rules_evaluated} loaded")
    lines.append(f"Files: {result.files_scanned} scanned, {result.files_skipped} skipped")
    lines.append("")

    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"

    for v in result.violations:
        marker = "✗" if v.severity == "error" else "⚠"
        lines.append(f"{marker} {v.rule_name}")
        if v.rule_description:
            lines.append(f"  {v.rule_description}")
        loc = f"line {v.line_number}" if v.file_path is None else f"{v.file_path}:{v.line_number}"
        lines.append(f"  {loc} → {v.message}")
        lines.append("")

    for e in result.errors:
        loc = e.file_path or "<source>"
        if e.line_number is not None:
            loc += f":{e.line_number}"
        lines.append(f"! {loc} {e.message}")
    if result.errors:
        lines.append("")

    if result.violations:
        count = len(result.violations)
        lines.append(
            f"{count} violations found ({result.rules_evaluated} rules evaluated, {elapsed_str})"
        )
    else:
        lines.append(
            f"✓ No violations found ({result.rules_evaluated} rules evaluated, {elapsed_str})"
        )

    return "\n".join(lines)


def format_json(result: LintResult) -> str:
    """Format a LintResult as structured JSON.

    Returns a JSON string with ``violations`` and ``errors`` arrays and a
    ``summary`` object.
    """
    violations_list: list[dict[str, object]] = [
        {
            "rule_name": v.rule_name,
            "rule_type": v.rule_type,
            "severity": v.severity,
            "file_path": v.file_path,
            "line_number": v.line_number,
            "message": v.message,
        }
        for v in result.violations
    ]
    errors_list: list[dict[str, object]] = [
        {
            "file_path": e.file_path,
            "line_number": e.line_number,
            "rule_name": e.rule_name,
            "message": e.message,
        }
        for e in result.errors
    ]

    output: dict[str, object] = {
        "violations": violations_list,
        "errors": errors_list,
        "summary": {
            "rules_evaluated": result.rules_evaluated,
            "violations_count": len(result.violations),
            "errors_count": len(result.errors),
            "files_scanned": result.files_scanned,
            "files_skipped": result.files_skipped,
            "elapsed_ms": result.elapsed_ms,
        },
    }

    return json.dumps(output, indent=2)


def format_porcelain(result: LintResult) -> str:
    """Format a LintResult as machine-readable one-line-per-violation output.

    Format: ``rule_name:rule_type:severity:file_path:line:message``

    An empty file_path is represented as an empty string.
    Returns empty string when there are no violations.
    """
    if not result.violations:
        return ""

    lines: list[str] = []
    for v in result.violations:
        file_path = v.file_path if v.file_path is not None else ""
        lines.append(
            f"{v.rule_name}:{v.rule_type}:{v.severity}:{file_path}:{v.line_number}:{v.message}"
        )

    return "\n".join(lines)
