"""Query engine: tree search, declaration sites, and symbol resolution."""

from javacheck.query.declarations import (
    DECLARATION_KINDS,
    assignment_target,
    assignment_target_name,
    declared_name,
    enclosing_class,
    enclosing_scope,
    is_inner_class,
)
from javacheck.query.resolver import is_this_qualified, resolve_declaration
from javacheck.query.search import (
    annotation_name,
    dotted_name,
    find_all_descendants,
    find_first_descendant,
    has_annotation,
    qualified_name,
    super_class_name,
)

__all__ = [
    "DECLARATION_KINDS",
    "annotation_name",
    "assignment_target",
    "assignment_target_name",
    "declared_name",
    "dotted_name",
    "enclosing_class",
    "enclosing_scope",
    "find_all_descendants",
    "find_first_descendant",
    "has_annotation",
    "is_inner_class",
    "is_this_qualified",
    "qualified_name",
    "resolve_declaration",
    "super_class_name",
]
