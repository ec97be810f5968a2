"""Java front end: tree-sitter parsing and lowering into a :class:`SyntaxTree`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser

from javacheck.tree.nodes import NodeKind, TreeBuilder

if TYPE_CHECKING:
    from pathlib import Path

    from tree_sitter import Node as TSNode

    from javacheck.tree.nodes import SyntaxTree

logger = logging.getLogger(__name__)


class JavaSyntaxError(Exception):
    """Raised when tree-sitter cannot parse a Java source cleanly."""

    def __init__(self, message: str, *, line: int) -> None:
        super().__init__(message)
        self.line = line


# ---------------------------------------------------------------------------
# Grammar loading
# ---------------------------------------------------------------------------

# Cache for the loaded grammar (one entry per language name).
_LANG_CACHE: dict[str, Language] = {}


def get_language() -> Language:
    """Return the tree-sitter Java language, loading the grammar on first use."""
    if "java" not in _LANG_CACHE:
        import tree_sitter_java as tsjava

        _LANG_CACHE["java"] = Language(tsjava.language())
    return _LANG_CACHE["java"]


def clear_cache() -> None:
    """Clear the language cache (useful for testing)."""
    _LANG_CACHE.clear()


# ---------------------------------------------------------------------------
# Lowering tables
# ---------------------------------------------------------------------------

_ANNOTATION_TYPES = frozenset({"annotation", "marker_annotation"})

_PRIMITIVE_TYPES = frozenset({"integral_type", "floating_point_type", "boolean_type", "void_type"})

_LITERAL_TYPES = frozenset(
    {
        "decimal_integer_literal",
        "hex_integer_literal",
        "octal_integer_literal",
        "binary_integer_literal",
        "decimal_floating_point_literal",
        "hex_floating_point_literal",
        "string_literal",
        "character_literal",
        "text_block",
        "true",
        "false",
        "null_literal",
    }
)

# Node types dropped entirely.
_SKIPPED_TYPES = frozenset({"line_comment", "block_comment", "dimensions", "receiver_parameter"})

# Node types lowered to STATEMENT, besides every ``*_statement``.
_STATEMENT_TYPES = frozenset(
    {
        "catch_clause",
        "finally_clause",
        "switch_expression",
        "switch_block_statement_group",
        "switch_rule",
    }
)

_STATEMENT_SUFFIXES = ("_statement", "_clause", "_expression", "_block_statement_group")


def _line(node: TSNode) -> int:
    # tree-sitter uses 0-based rows; we want 1-based lines.
    return node.start_point.row + 1


def _text(node: TSNode) -> str:
    return node.text.decode("utf-8") if node.text else ""


def _either(node: TSNode | None, fallback: TSNode) -> TSNode:
    return node if node is not None else fallback


def _child_of_type(node: TSNode, *types: str) -> TSNode | None:
    for child in node.children:
        if child.type in types:
            return child
    return None


def _statement_text(node_type: str) -> str:
    for suffix in _STATEMENT_SUFFIXES:
        if node_type.endswith(suffix):
            return node_type[: -len(suffix)]
    return node_type


class _Lowering:
    """Walk a tree-sitter tree and emit the equivalent :class:`SyntaxTree` nodes."""

    def __init__(self) -> None:
        self._builder = TreeBuilder()

    def run(self, root: TSNode, *, path: str | None) -> SyntaxTree:
        index = self._builder.add(NodeKind.COMPILATION_UNIT, parent=None, line=1)
        self._lower_children(root, index)
        return self._builder.build(path=path)

    # -- helpers ------------------------------------------------------------

    def _add(
        self, kind: NodeKind, node: TSNode, parent: int, *, text: str | None = None
    ) -> int:
        return self._builder.add(kind, parent=parent, line=_line(node), text=text)

    def _leaf(self, kind: NodeKind, node: TSNode, parent: int) -> int:
        return self._add(kind, node, parent, text=_text(node))

    def _lower_children(self, node: TSNode, parent: int) -> None:
        for child in node.children:
            self.lower(child, parent)

    def _wrapped(self, node: TSNode, parent: int) -> None:
        """Lower *node* inside an EXPR wrapper."""
        expr = self._add(NodeKind.EXPR, node, parent)
        self.lower(node, expr)

    def _modifiers(self, owner: TSNode, parent: int) -> None:
        """Emit a MODIFIERS node for *owner*, empty when it has none."""
        mods = _child_of_type(owner, "modifiers")
        if mods is None:
            self._add(NodeKind.MODIFIERS, owner, parent)
        else:
            self.lower(mods, parent)

    def _type(self, type_node: TSNode | None, owner: TSNode, parent: int) -> None:
        """Emit a TYPE node wrapping *type_node* (empty when absent)."""
        if type_node is None:
            self._add(NodeKind.TYPE, owner, parent)
            return
        index = self._add(NodeKind.TYPE, type_node, parent)
        self.lower(type_node, index)

    def _keyword(self, owner: TSNode, keyword: str, parent: int) -> None:
        token = _child_of_type(owner, keyword)
        self._add(NodeKind.KEYWORD, _either(token, owner), parent, text=keyword)

    def _inferred_parameter(self, ident: TSNode, parent: int) -> None:
        param = self._add(NodeKind.PARAMETER_DEF, ident, parent)
        self._add(NodeKind.MODIFIERS, ident, param)
        self._add(NodeKind.TYPE, ident, param)
        self.lower(ident, param)

    # -- dispatch -----------------------------------------------------------

    def lower(self, node: TSNode, parent: int) -> None:
        """Lower one tree-sitter node (and its subtree) under *parent*."""
        if not node.is_named or node.type in _SKIPPED_TYPES:
            return
        handler = getattr(self, f"_lower_{node.type}", None)
        if handler is not None:
            handler(node, parent)
        elif node.type in _PRIMITIVE_TYPES:
            self._leaf(NodeKind.PRIMITIVE_TYPE, node, parent)
        elif node.type in _LITERAL_TYPES:
            self._leaf(NodeKind.LITERAL, node, parent)
        elif node.type in _STATEMENT_TYPES or node.type.endswith("_statement"):
            index = self._add(NodeKind.STATEMENT, node, parent, text=_statement_text(node.type))
            self._lower_children(node, index)
        else:
            # Structural wrappers (parenthesized expressions, type lists, ...)
            # contribute their children directly.
            self._lower_children(node, parent)

    # -- leaves -------------------------------------------------------------

    def _lower_identifier(self, node: TSNode, parent: int) -> None:
        self._leaf(NodeKind.IDENT, node, parent)

    def _lower_type_identifier(self, node: TSNode, parent: int) -> None:
        self._leaf(NodeKind.IDENT, node, parent)

    def _lower_this(self, node: TSNode, parent: int) -> None:
        self._leaf(NodeKind.LITERAL_THIS, node, parent)

    def _lower_super(self, node: TSNode, parent: int) -> None:
        self._leaf(NodeKind.LITERAL_SUPER, node, parent)

    def _lower_asterisk(self, node: TSNode, parent: int) -> None:
        self._leaf(NodeKind.STAR, node, parent)

    # -- names --------------------------------------------------------------

    def _lower_scoped_identifier(self, node: TSNode, parent: int) -> None:
        dot = self._add(NodeKind.DOT, node, parent)
        scope = node.child_by_field_name("scope")
        name = node.child_by_field_name("name")
        if scope is not None:
            self.lower(scope, dot)
        if name is not None:
            self.lower(name, dot)

    def _lower_scoped_type_identifier(self, node: TSNode, parent: int) -> None:
        parts = [c for c in node.named_children if c.type not in _ANNOTATION_TYPES]
        dot = self._add(NodeKind.DOT, node, parent)
        self.lower(parts[0], dot)
        if len(parts) > 1:
            self.lower(parts[-1], dot)

    # -- compilation unit ---------------------------------------------------

    def _lower_package_declaration(self, node: TSNode, parent: int) -> None:
        package = self._add(NodeKind.PACKAGE_DEF, node, parent)
        annotations = self._add(NodeKind.ANNOTATIONS, node, package)
        for child in node.named_children:
            if child.type in _ANNOTATION_TYPES:
                self.lower(child, annotations)
        name = _child_of_type(node, "scoped_identifier", "identifier")
        if name is not None:
            self.lower(name, package)

    def _lower_import_declaration(self, node: TSNode, parent: int) -> None:
        is_static = _child_of_type(node, "static") is not None
        kind = NodeKind.STATIC_IMPORT if is_static else NodeKind.IMPORT
        index = self._add(kind, node, parent)
        if is_static:
            self._keyword(node, "static", index)
        name = _child_of_type(node, "scoped_identifier", "identifier")
        star = _child_of_type(node, "asterisk")
        if name is None:
            return
        if star is None:
            self.lower(name, index)
            return
        dot = self._add(NodeKind.DOT, name, index)
        self.lower(name, dot)
        self.lower(star, dot)

    # -- type declarations --------------------------------------------------

    def _type_declaration(self, node: TSNode, parent: int, kind: NodeKind, keyword: str) -> None:
        index = self._add(kind, node, parent)
        self._modifiers(node, index)
        self._keyword(node, keyword, index)
        name = node.child_by_field_name("name")
        if name is not None:
            self.lower(name, index)
        for child in node.named_children:
            if child.type in ("type_parameters", "formal_parameters"):
                self.lower(child, index)
            elif child.type in ("superclass", "extends_interfaces"):
                clause = self._add(NodeKind.EXTENDS_CLAUSE, child, index)
                self._lower_children(child, clause)
            elif child.type == "super_interfaces":
                clause = self._add(NodeKind.IMPLEMENTS_CLAUSE, child, index)
                self._lower_children(child, clause)
        body = node.child_by_field_name("body")
        if body is not None:
            self.lower(body, index)

    def _lower_class_declaration(self, node: TSNode, parent: int) -> None:
        self._type_declaration(node, parent, NodeKind.CLASS_DEF, "class")

    def _lower_interface_declaration(self, node: TSNode, parent: int) -> None:
        self._type_declaration(node, parent, NodeKind.INTERFACE_DEF, "interface")

    def _lower_enum_declaration(self, node: TSNode, parent: int) -> None:
        self._type_declaration(node, parent, NodeKind.ENUM_DEF, "enum")

    def _lower_record_declaration(self, node: TSNode, parent: int) -> None:
        self._type_declaration(node, parent, NodeKind.RECORD_DEF, "record")

    def _lower_annotation_type_declaration(self, node: TSNode, parent: int) -> None:
        self._type_declaration(node, parent, NodeKind.ANNOTATION_DEF, "@interface")

    def _lower_class_body(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.OBJBLOCK, node, parent)
        self._lower_children(node, index)

    _lower_interface_body = _lower_class_body
    _lower_enum_body = _lower_class_body
    _lower_annotation_type_body = _lower_class_body

    def _lower_enum_constant(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.ENUM_CONSTANT_DEF, node, parent)
        self._lower_children(node, index)

    def _lower_type_parameters(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.TYPE_PARAMETERS, node, parent)
        self._lower_children(node, index)

    def _lower_type_arguments(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.TYPE_ARGUMENTS, node, parent)
        self._lower_children(node, index)

    def _lower_modifiers(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.MODIFIERS, node, parent)
        for child in node.children:
            if child.is_named:
                self.lower(child, index)
            else:
                self._leaf(NodeKind.MODIFIER, child, index)

    # -- members ------------------------------------------------------------

    def _variable_declaration(self, node: TSNode, parent: int) -> None:
        type_node = node.child_by_field_name("type")
        for declarator in node.children_by_field_name("declarator"):
            # Every declarator of one statement shares the statement's line.
            variable = self._add(NodeKind.VARIABLE_DEF, node, parent)
            self._modifiers(node, variable)
            self._type(type_node, node, variable)
            self._declarator(declarator, variable)

    def _declarator(self, declarator: TSNode, variable: int) -> None:
        name = declarator.child_by_field_name("name")
        if name is not None:
            self.lower(name, variable)
        value = declarator.child_by_field_name("value")
        if value is None:
            return
        operator = _child_of_type(declarator, "=")
        assign = self._add(NodeKind.ASSIGN, _either(operator, value), variable, text="=")
        if value.type == "array_initializer":
            self.lower(value, assign)
        else:
            self._wrapped(value, assign)

    _lower_field_declaration = _variable_declaration
    _lower_local_variable_declaration = _variable_declaration
    _lower_constant_declaration = _variable_declaration

    def _lower_method_declaration(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.METHOD_DEF, node, parent)
        self._modifiers(node, index)
        type_parameters = _child_of_type(node, "type_parameters")
        if type_parameters is not None:
            self.lower(type_parameters, index)
        self._type(node.child_by_field_name("type"), node, index)
        self._callable_tail(node, index)

    def _lower_constructor_declaration(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.CTOR_DEF, node, parent)
        self._modifiers(node, index)
        type_parameters = _child_of_type(node, "type_parameters")
        if type_parameters is not None:
            self.lower(type_parameters, index)
        self._callable_tail(node, index)

    def _lower_compact_constructor_declaration(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.CTOR_DEF, node, parent)
        self._modifiers(node, index)
        self._callable_tail(node, index)

    def _callable_tail(self, node: TSNode, index: int) -> None:
        """Name, parameters, throws clause and body of a method or constructor."""
        name = node.child_by_field_name("name")
        if name is not None:
            self.lower(name, index)
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            self.lower(parameters, index)
        throws = _child_of_type(node, "throws")
        if throws is not None:
            clause = self._add(NodeKind.LITERAL_THROWS, throws, index)
            self._lower_children(throws, clause)
        body = node.child_by_field_name("body")
        if body is not None:
            self.lower(body, index)

    def _lower_annotation_type_element_declaration(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.ANNOTATION_FIELD_DEF, node, parent)
        self._modifiers(node, index)
        self._type(node.child_by_field_name("type"), node, index)
        name = node.child_by_field_name("name")
        if name is not None:
            self.lower(name, index)
        value = node.child_by_field_name("value")
        if value is not None:
            self._wrapped(value, index)

    def _lower_static_initializer(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.STATIC_INIT, node, parent)
        self._lower_children(node, index)

    def _lower_formal_parameters(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.PARAMETERS, node, parent)
        self._lower_children(node, index)

    def _lower_formal_parameter(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.PARAMETER_DEF, node, parent)
        self._modifiers(node, index)
        self._type(node.child_by_field_name("type"), node, index)
        name = node.child_by_field_name("name")
        if name is not None:
            self.lower(name, index)

    def _lower_spread_parameter(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.PARAMETER_DEF, node, parent)
        self._modifiers(node, index)
        type_node = next(
            (c for c in node.named_children if c.type not in ("modifiers", "variable_declarator")),
            None,
        )
        self._type(type_node, node, index)
        declarator = _child_of_type(node, "variable_declarator")
        if declarator is not None:
            self._declarator(declarator, index)

    def _lower_catch_formal_parameter(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.PARAMETER_DEF, node, parent)
        self._modifiers(node, index)
        self._type(_child_of_type(node, "catch_type"), node, index)
        name = node.child_by_field_name("name")
        if name is not None:
            self.lower(name, index)

    # -- statements ---------------------------------------------------------

    def _lower_block(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.SLIST, node, parent)
        self._lower_children(node, index)

    _lower_constructor_body = _lower_block

    def _lower_expression_statement(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.EXPR, node, parent)
        self._lower_children(node, index)

    def _lower_enhanced_for_statement(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.STATEMENT, node, parent, text="for")
        type_node = node.child_by_field_name("type")
        variable = self._add(NodeKind.VARIABLE_DEF, _either(type_node, node), index)
        self._modifiers(node, variable)
        self._type(type_node, node, variable)
        name = node.child_by_field_name("name")
        if name is not None:
            self.lower(name, variable)
        value = node.child_by_field_name("value")
        if value is not None:
            self._wrapped(value, index)
        body = node.child_by_field_name("body")
        if body is not None:
            self.lower(body, index)

    def _lower_resource(self, node: TSNode, parent: int) -> None:
        type_node = node.child_by_field_name("type")
        if type_node is None:
            self._lower_children(node, parent)
            return
        variable = self._add(NodeKind.VARIABLE_DEF, node, parent)
        self._modifiers(node, variable)
        self._type(type_node, node, variable)
        self._declarator(node, variable)

    # -- expressions --------------------------------------------------------

    def _lower_assignment_expression(self, node: TSNode, parent: int) -> None:
        operator = node.child_by_field_name("operator")
        text = _text(operator) if operator is not None else "="
        index = self._add(NodeKind.ASSIGN, _either(operator, node), parent, text=text)
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is not None:
            self.lower(left, index)
        if right is not None:
            self.lower(right, index)

    def _lower_field_access(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.DOT, node, parent)
        obj = node.child_by_field_name("object")
        field = node.child_by_field_name("field")
        if obj is not None:
            self.lower(obj, index)
        if field is not None:
            self.lower(field, index)

    def _lower_array_access(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.INDEX_OP, node, parent)
        array = node.child_by_field_name("array")
        subscript = node.child_by_field_name("index")
        if array is not None:
            self.lower(array, index)
        if subscript is not None:
            self._wrapped(subscript, index)

    def _lower_method_invocation(self, node: TSNode, parent: int) -> None:
        call = self._add(NodeKind.METHOD_CALL, node, parent)
        obj = node.child_by_field_name("object")
        name = node.child_by_field_name("name")
        if obj is not None:
            dot = self._add(NodeKind.DOT, obj, call)
            self.lower(obj, dot)
            if name is not None:
                self.lower(name, dot)
        elif name is not None:
            self.lower(name, call)
        arguments = node.child_by_field_name("arguments")
        if arguments is not None:
            self.lower(arguments, call)

    def _lower_explicit_constructor_invocation(self, node: TSNode, parent: int) -> None:
        call = self._add(NodeKind.METHOD_CALL, node, parent)
        self._lower_children(node, call)

    def _lower_argument_list(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.ELIST, node, parent)
        for child in node.named_children:
            if child.type not in _SKIPPED_TYPES:
                self._wrapped(child, index)

    def _lower_object_creation_expression(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.LITERAL_NEW, node, parent, text="new")
        self._lower_children(node, index)

    _lower_array_creation_expression = _lower_object_creation_expression

    def _lower_array_initializer(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.ARRAY_INIT, node, parent)
        for child in node.named_children:
            if child.type == "array_initializer":
                self.lower(child, index)
            elif child.type not in _SKIPPED_TYPES:
                self._wrapped(child, index)

    def _lower_lambda_expression(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.LAMBDA, node, parent)
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            if parameters.type == "formal_parameters":
                self.lower(parameters, index)
            else:
                params = self._add(NodeKind.PARAMETERS, parameters, index)
                if parameters.type == "identifier":
                    idents = [parameters]
                else:
                    idents = [c for c in parameters.named_children if c.type == "identifier"]
                for ident in idents:
                    self._inferred_parameter(ident, params)
        body = node.child_by_field_name("body")
        if body is None:
            return
        if body.type == "block":
            self.lower(body, index)
        else:
            self._wrapped(body, index)

    def _operation(self, node: TSNode, parent: int, operator: str) -> None:
        index = self._add(NodeKind.OPERATION, node, parent, text=operator)
        self._lower_children(node, index)

    def _lower_binary_expression(self, node: TSNode, parent: int) -> None:
        operator = node.child_by_field_name("operator")
        self._operation(node, parent, _text(operator) if operator is not None else "")

    def _lower_unary_expression(self, node: TSNode, parent: int) -> None:
        operator = next((c for c in node.children if not c.is_named), None)
        self._operation(node, parent, _text(operator) if operator is not None else "")

    _lower_update_expression = _lower_unary_expression

    def _lower_ternary_expression(self, node: TSNode, parent: int) -> None:
        self._operation(node, parent, "?")

    def _lower_instanceof_expression(self, node: TSNode, parent: int) -> None:
        self._operation(node, parent, "instanceof")

    def _lower_cast_expression(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.TYPECAST, node, parent)
        self._type(node.child_by_field_name("type"), node, index)
        value = node.child_by_field_name("value")
        if value is not None:
            self.lower(value, index)

    # -- annotations --------------------------------------------------------

    def _lower_marker_annotation(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.ANNOTATION, node, parent)
        name = node.child_by_field_name("name")
        if name is not None:
            self.lower(name, index)

    def _lower_annotation(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.ANNOTATION, node, parent)
        name = node.child_by_field_name("name")
        if name is not None:
            self.lower(name, index)
        arguments = node.child_by_field_name("arguments")
        if arguments is None:
            return
        for child in arguments.named_children:
            if child.type == "element_value_pair":
                self.lower(child, index)
            elif child.type not in _SKIPPED_TYPES:
                self._wrapped(child, index)

    def _lower_element_value_pair(self, node: TSNode, parent: int) -> None:
        index = self._add(NodeKind.ANNOTATION_MEMBER_VALUE_PAIR, node, parent)
        key = node.child_by_field_name("key")
        if key is not None:
            self.lower(key, index)
        operator = _child_of_type(node, "=")
        self._add(NodeKind.ASSIGN, _either(operator, node), index, text="=")
        value = node.child_by_field_name("value")
        if value is not None:
            self._wrapped(value, index)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _first_error(root: TSNode) -> TSNode | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed(node.children))
    return None


def parse_source(source: str | bytes, *, path: str | None = None) -> SyntaxTree:
    """Parse Java *source* and lower it into a :class:`SyntaxTree`.

    Raises
    ------
    JavaSyntaxError
        When tree-sitter reports a syntax error or a missing token.
    """
    content = source.encode("utf-8") if isinstance(source, str) else source
    parser = Parser(get_language())
    ts_tree = parser.parse(content)
    root = ts_tree.root_node

    if root.has_error:
        error = _first_error(root)
        line = _line(error) if error is not None else 1
        where = path or "<source>"
        msg = f"{where}:{line}: syntax error"
        raise JavaSyntaxError(msg, line=line)

    tree = _Lowering().run(root, path=path)
    logger.debug("Lowered %s into %d nodes", path or "<source>", len(tree))
    return tree


def parse_file(file_path: Path) -> SyntaxTree:
    """Read and parse a Java source file."""
    content = file_path.read_bytes()
    return parse_source(content, path=str(file_path))
