"""Rules configuration: parse rules.yml and instantiate rule objects."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from javacheck.rules.base import VALID_RULE_SEVERITIES
from javacheck.rules.class_suffix import ClassSuffixRule
from javacheck.rules.forbid_import import ForbiddenImportRule
from javacheck.rules.parameter_assignment import ParameterAssignmentRule

if TYPE_CHECKING:
    from pathlib import Path

    from javacheck.rules.base import Rule

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})
RULE_TYPES: tuple[str, ...] = ("class_suffix", "forbid_import", "forbid_parameter_assignment")
DEFAULT_RULES_PATH = ".javacheck/rules.yml"

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleSpec:
    """One validated entry of the ``rules`` list."""

    name: str
    description: str
    severity: str
    rule_type: str
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LintConfig:
    """Parsed rules.yml."""

    rules: tuple[RuleSpec, ...] = ()
    ignore_packages: re.Pattern[str] | None = None


# ---------------------------------------------------------------------------
# YAML parsing
# ---------------------------------------------------------------------------


def _optional_str(name: str, block: str, data: dict[str, object], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        msg = f"Rule '{name}': {block}.{key} must be a non-empty string"
        raise ValueError(msg)
    return value


def _parse_class_suffix(name: str, data: dict[str, object]) -> dict[str, Any]:
    """Parse the 'class_suffix' block of a rule."""
    suffix = _optional_str(name, "class_suffix", data, "suffix")
    if suffix is None:
        msg = f"Rule '{name}': class_suffix.suffix is required"
        raise ValueError(msg)
    superclass = _optional_str(name, "class_suffix", data, "extends")
    annotation = _optional_str(name, "class_suffix", data, "annotation")
    if superclass is None and annotation is None:
        msg = f"Rule '{name}': class_suffix needs 'extends' or 'annotation'"
        raise ValueError(msg)
    skip_inner = data.get("skip_inner", False)
    if not isinstance(skip_inner, bool):
        msg = f"Rule '{name}': class_suffix.skip_inner must be a boolean"
        raise ValueError(msg)
    return {
        "suffix": suffix,
        "superclass": superclass,
        "annotation": annotation,
        "skip_inner": skip_inner,
    }


def _parse_forbid_import(name: str, data: dict[str, object]) -> dict[str, Any]:
    """Parse the 'forbid_import' block of a rule."""
    from_pattern = _optional_str(name, "forbid_import", data, "from")
    to_pattern = _optional_str(name, "forbid_import", data, "to")
    if from_pattern is None:
        msg = f"Rule '{name}': forbid_import.from must be a non-empty string"
        raise ValueError(msg)
    if to_pattern is None:
        msg = f"Rule '{name}': forbid_import.to must be a non-empty string"
        raise ValueError(msg)
    return {"from_pattern": from_pattern, "to_pattern": to_pattern}


def _parse_ignore_packages(data: dict[str, object]) -> re.Pattern[str] | None:
    raw = data.get("ignore_packages")
    if raw is None:
        return None
    if not isinstance(raw, str) or not raw:
        msg = "rules.yml: 'ignore_packages' must be a non-empty string"
        raise ValueError(msg)
    try:
        return re.compile(raw)
    except re.error as exc:
        msg = f"rules.yml: invalid 'ignore_packages' pattern: {exc}"
        raise ValueError(msg) from exc


def load_config(rules_path: Path) -> LintConfig:
    """Parse rules.yml and return a validated :class:`LintConfig`.

    Raises ``ValueError`` on schema errors (missing version, unknown rule
    type, duplicate names, etc.).
    """
    with rules_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict):
        msg = "rules.yml must be a YAML mapping"
        raise ValueError(msg)

    version = data.get("version")
    if version is None:
        msg = "rules.yml: missing required 'version' field"
        raise ValueError(msg)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        expected = sorted(SUPPORTED_SCHEMA_VERSIONS)
        msg = f"rules.yml: unsupported version {version}, expected one of {expected}"
        raise ValueError(msg)

    ignore_packages = _parse_ignore_packages(data)

    rules_data = data.get("rules", [])
    if rules_data is None:
        rules_data = []
    if not isinstance(rules_data, list):
        msg = "rules.yml: 'rules' must be a list"
        raise ValueError(msg)

    seen_names: set[str] = set()
    specs: list[RuleSpec] = []

    for idx, rule_data in enumerate(rules_data):
        if not isinstance(rule_data, dict):
            msg = f"rules.yml: rule at index {idx} must be a mapping"
            raise ValueError(msg)

        name = rule_data.get("name")
        if name is None or not isinstance(name, str) or not name.strip():
            msg = f"rules.yml: rule at index {idx} missing required 'name' field"
            raise ValueError(msg)
        if name in seen_names:
            msg = f"rules.yml: Duplicate rule name '{name}'"
            raise ValueError(msg)
        seen_names.add(name)

        description = str(rule_data.get("description", ""))
        severity = str(rule_data.get("severity", "error"))
        if severity not in VALID_RULE_SEVERITIES:
            msg = (
                f"rules.yml: rule '{name}' has invalid severity '{severity}', "
                f"must be one of {sorted(VALID_RULE_SEVERITIES)}"
            )
            raise ValueError(msg)

        present = [key for key in RULE_TYPES if key in rule_data]
        if len(present) != 1:
            msg = (
                f"rules.yml: rule '{name}' must have exactly one of "
                + ", ".join(f"'{key}'" for key in RULE_TYPES)
            )
            raise ValueError(msg)
        rule_type = present[0]

        block = rule_data[rule_type]
        if block is None:
            block = {}
        if not isinstance(block, dict):
            msg = f"Rule '{name}': '{rule_type}' must be a mapping"
            raise ValueError(msg)

        if rule_type == "class_suffix":
            options = _parse_class_suffix(name, block)
        elif rule_type == "forbid_import":
            options = _parse_forbid_import(name, block)
        else:
            options = {}

        specs.append(
            RuleSpec(
                name=name,
                description=description,
                severity=severity,
                rule_type=rule_type,
                options=options,
            )
        )

    return LintConfig(rules=tuple(specs), ignore_packages=ignore_packages)


# ---------------------------------------------------------------------------
# Instantiation
# ---------------------------------------------------------------------------

_RULE_CLASSES: dict[str, type[Rule]] = {
    "class_suffix": ClassSuffixRule,
    "forbid_import": ForbiddenImportRule,
    "forbid_parameter_assignment": ParameterAssignmentRule,
}


def build_rules(config: LintConfig) -> list[Rule]:
    """Instantiate a fresh rule object for every entry of *config*.

    Rule objects hold per-file state, so every lint run gets its own set.
    """
    return [
        _RULE_CLASSES[spec.rule_type](
            spec.name,
            description=spec.description,
            severity=spec.severity,
            **spec.options,
        )
        for spec in config.rules
    ]
