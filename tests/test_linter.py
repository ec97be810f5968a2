"""Tests for javacheck.linter: rule dispatch, lint orchestration, formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from shapes import cls, import_, package, unit

from javacheck.linter import (
    FileError,
    LintError,
    LintResult,
    check_tree,
    collect_sources,
    format_json,
    format_porcelain,
    format_rich,
    lint,
    package_of,
)
from javacheck.rules.base import Rule, Violation
from javacheck.tree.nodes import NodeKind, TreeShapeError

if TYPE_CHECKING:
    from pathlib import Path

    from javacheck.rules.base import FileContext
    from javacheck.tree.nodes import SyntaxNode


def _java_available() -> bool:
    try:
        import tree_sitter_java  # noqa: F401

        return True
    except ImportError:
        return False


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

RULES_YML = """\
version: 1
rules:
  - name: html-action-base
    description: HTML actions must extend HTMLActionSupport
    class_suffix:
      suffix: HTMLAction
      extends: HTMLActionSupport
  - name: processmanager-no-opc
    severity: warn
    forbid_import:
      from: a.b.processmanager
      to: a.b.opc
"""


@pytest.fixture()
def lint_project(tmp_path: Path) -> Path:
    """Create a project with rules and a few Java sources.

    Layout:
    - .javacheck/rules.yml with a class_suffix and a forbid_import rule
    - src/a/b/web/CatalogHTMLAction.java: no extends clause (error)
    - src/a/b/web/DummyHTMLAction.java: extends HTMLActionSupport (clean)
    - src/a/b/processmanager/Manager.java: imports a.b.opc (warning)
    - src/a/b/unrelated/Other.java: imports a.b.opc, not forbidden here
    """
    config_dir = tmp_path / ".javacheck"
    config_dir.mkdir()
    (config_dir / "rules.yml").write_text(RULES_YML)

    web = tmp_path / "src" / "a" / "b" / "web"
    web.mkdir(parents=True)
    (web / "CatalogHTMLAction.java").write_text(
        "package a.b.web;\n\npublic class CatalogHTMLAction {\n}\n"
    )
    (web / "DummyHTMLAction.java").write_text(
        "package a.b.web;\n\npublic class DummyHTMLAction extends HTMLActionSupport {\n}\n"
    )

    pm = tmp_path / "src" / "a" / "b" / "processmanager"
    pm.mkdir(parents=True)
    (pm / "Manager.java").write_text(
        "package a.b.processmanager;\n\nimport a.b.opc.Thing;\n\nclass Manager {\n}\n"
    )

    other = tmp_path / "src" / "a" / "b" / "unrelated"
    other.mkdir(parents=True)
    (other / "Other.java").write_text(
        "package a.b.unrelated;\n\nimport a.b.opc.Thing;\n\nclass Other {\n}\n"
    )
    return tmp_path


def _violation(severity: str = "error", file_path: str | None = "src/A.java") -> Violation:
    return Violation(
        rule_name="html-action-base",
        rule_description="HTML actions must extend HTMLActionSupport",
        rule_type="class_suffix",
        severity=severity,
        file_path=file_path,
        line_number=3,
        message="CatalogHTMLAction must extend HTMLActionSupport",
    )


class _ExplodingRule(Rule):
    rule_type = "exploding"
    tokens = frozenset({NodeKind.IMPORT})

    def visit(self, node: SyntaxNode, context: FileContext) -> None:
        if node.line == 2:
            msg = "unexpected shape"
            raise TreeShapeError(msg)
        self.log(context, node.line, "seen")


class _LifecycleRule(Rule):
    rule_type = "lifecycle"
    tokens = frozenset({NodeKind.CLASS_DEF})

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.events: list[str] = []

    def begin_file(self, context: FileContext) -> None:
        self.events.append(f"begin:{context.file_path}")

    def visit(self, node: SyntaxNode, context: FileContext) -> None:
        self.events.append(f"visit:{node.line}")

    def finish_file(self, context: FileContext) -> None:
        self.events.append(f"finish:{context.file_path}")


# ---------------------------------------------------------------------------
# check_tree
# ---------------------------------------------------------------------------


class TestCheckTree:
    def test_lifecycle_order(self) -> None:
        rule = _LifecycleRule("life")
        check_tree(unit(cls(1, "A"), cls(3, "B")), [rule], file_path="X.java")
        assert rule.events == ["begin:X.java", "visit:1", "visit:3", "finish:X.java"]

    def test_shape_error_recorded_and_walk_continues(self) -> None:
        tree = unit(import_(1, "a.B"), import_(2, "a.C"), import_(3, "a.D"))
        violations, errors = check_tree(tree, [_ExplodingRule("boom")], file_path="X.java")
        assert [v.line_number for v in violations] == [1, 3]
        assert errors == [
            FileError(
                file_path="X.java",
                line_number=2,
                message="unexpected shape",
                rule_name="boom",
            )
        ]

    def test_no_rules(self) -> None:
        violations, errors = check_tree(unit(cls(1, "A")), [])
        assert violations == []
        assert errors == []


class TestPackageOf:
    def test_declared(self) -> None:
        assert package_of(unit(package(1, "a.b.c"), cls(2, "A"))) == "a.b.c"

    def test_default_package(self) -> None:
        assert package_of(unit(cls(1, "A"))) is None


class TestCollectSources:
    def test_directories_and_files(self, tmp_path: Path) -> None:
        (tmp_path / "pkg").mkdir()
        (tmp_path / "pkg" / "B.java").write_text("class B {}\n")
        (tmp_path / "pkg" / "notes.txt").write_text("not java\n")
        single = tmp_path / "A.java"
        single.write_text("class A {}\n")
        found = collect_sources([tmp_path / "pkg", single, single])
        assert found == sorted([tmp_path / "pkg" / "B.java", single])

    def test_non_java_file_skipped(self, tmp_path: Path) -> None:
        readme = tmp_path / "README.md"
        readme.write_text("# hi\n")
        assert collect_sources([readme]) == []


# ---------------------------------------------------------------------------
# lint()
# ---------------------------------------------------------------------------


class TestLintConfiguration:
    def test_no_rules_file(self, tmp_path: Path) -> None:
        result = lint([tmp_path], rules_path=tmp_path / "missing.yml")
        assert result.violations == []
        assert result.rules_evaluated == 0
        assert result.files_scanned == 0

    def test_invalid_rules_file(self, tmp_path: Path) -> None:
        rules = tmp_path / "rules.yml"
        rules.write_text("version: 99\nrules: []\n")
        with pytest.raises(LintError, match="Invalid rules configuration"):
            lint([tmp_path], rules_path=rules)


@pytest.mark.skipif(not _java_available(), reason="tree-sitter-java not installed")
class TestLint:
    def test_scenarios(self, lint_project: Path) -> None:
        result = lint(
            [lint_project / "src"],
            rules_path=lint_project / ".javacheck" / "rules.yml",
        )
        assert result.rules_evaluated == 2
        assert result.files_scanned == 4
        assert result.errors == []

        by_rule = {(v.rule_name, v.file_path, v.line_number) for v in result.violations}
        assert by_rule == {
            (
                "html-action-base",
                str(lint_project / "src" / "a" / "b" / "web" / "CatalogHTMLAction.java"),
                3,
            ),
            (
                "processmanager-no-opc",
                str(lint_project / "src" / "a" / "b" / "processmanager" / "Manager.java"),
                3,
            ),
        }
        assert result.error_count == 1

    def test_ignore_packages(self, lint_project: Path) -> None:
        rules = lint_project / ".javacheck" / "rules.yml"
        rules.write_text(
            RULES_YML.replace("version: 1\n", "version: 1\nignore_packages: '\\.web$'\n")
        )
        result = lint([lint_project / "src"], rules_path=rules)
        assert result.files_skipped == 2
        assert result.files_scanned == 2
        assert [v.rule_name for v in result.violations] == ["processmanager-no-opc"]

    def test_syntax_error_recorded(self, lint_project: Path) -> None:
        broken = lint_project / "src" / "Broken.java"
        broken.write_text("class Broken {\n  void m( {\n}\n")
        result = lint(
            [lint_project / "src"],
            rules_path=lint_project / ".javacheck" / "rules.yml",
        )
        assert len(result.errors) == 1
        assert result.errors[0].file_path == str(broken)
        assert result.files_scanned == 4

    def test_undecodable_file_recorded(self, lint_project: Path) -> None:
        latin1 = lint_project / "src" / "Legacy.java"
        latin1.write_bytes('class Legacy { String s = "ação"; }\n'.encode("latin-1"))
        result = lint(
            [lint_project / "src"],
            rules_path=lint_project / ".javacheck" / "rules.yml",
        )
        assert [e.file_path for e in result.errors] == [str(latin1)]
        assert result.errors[0].line_number is None
        assert result.files_scanned == 4
        assert "html-action-base" in {v.rule_name for v in result.violations}

    def test_default_rules_location(
        self, lint_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(lint_project)
        result = lint([lint_project / "src"])
        assert result.rules_evaluated == 2


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class TestFormatRich:
    def test_with_violations(self) -> None:
        result = LintResult(
            violations=[_violation()],
            rules_evaluated=2,
            files_scanned=4,
            files_skipped=1,
            elapsed_ms=800,
        )
        output = format_rich(result)
        assert "Rules: 2 loaded" in output
        assert "Files: 4 scanned, 1 skipped" in output
        assert "✗ html-action-base" in output
        assert "src/A.java:3 → CatalogHTMLAction must extend HTMLActionSupport" in output
        assert "1 violations found (2 rules evaluated, 0.8s)" in output

    def test_warning_marker(self) -> None:
        output = format_rich(LintResult(violations=[_violation(severity="warn")]))
        assert "⚠ html-action-base" in output

    def test_clean(self) -> None:
        output = format_rich(LintResult(rules_evaluated=1, files_scanned=3))
        assert "✓ No violations found" in output

    def test_file_errors_listed(self) -> None:
        result = LintResult(
            errors=[FileError(file_path="B.java", line_number=2, message="syntax error")]
        )
        assert "! B.java:2 syntax error" in format_rich(result)


class TestFormatJson:
    def test_structure(self) -> None:
        result = LintResult(
            violations=[_violation()],
            errors=[FileError(file_path="B.java", line_number=None, message="unreadable")],
            rules_evaluated=2,
            files_scanned=4,
        )
        data = json.loads(format_json(result))
        assert data["violations"] == [
            {
                "rule_name": "html-action-base",
                "rule_type": "class_suffix",
                "severity": "error",
                "file_path": "src/A.java",
                "line_number": 3,
                "message": "CatalogHTMLAction must extend HTMLActionSupport",
            }
        ]
        assert data["errors"][0]["file_path"] == "B.java"
        assert data["summary"]["violations_count"] == 1
        assert data["summary"]["errors_count"] == 1
        assert data["summary"]["files_scanned"] == 4


class TestFormatPorcelain:
    def test_one_line_per_violation(self) -> None:
        result = LintResult(violations=[_violation(), _violation(severity="warn", file_path=None)])
        lines = format_porcelain(result).splitlines()
        assert lines == [
            "html-action-base:class_suffix:error:src/A.java:3:"
            "CatalogHTMLAction must extend HTMLActionSupport",
            "html-action-base:class_suffix:warn::3:"
            "CatalogHTMLAction must extend HTMLActionSupport",
        ]

    def test_empty(self) -> None:
        assert format_porcelain(LintResult()) == ""
