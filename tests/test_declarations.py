"""Tests for javacheck.query.declarations: declared names, scopes, assignment targets."""

from __future__ import annotations

import pytest
from shapes import (
    assign,
    cls,
    ident,
    literal,
    method,
    name_chain,
    nodes_of,
    param,
    unit,
    var,
)

from javacheck.query.declarations import (
    assignment_target,
    assignment_target_name,
    declared_name,
    enclosing_class,
    enclosing_scope,
    is_inner_class,
)
from javacheck.tree.nodes import NodeKind, TreeShapeError, node_spec


class TestDeclaredName:
    def test_variable(self) -> None:
        tree = unit(cls(1, "A", var(2, "count")))
        (variable,) = nodes_of(tree, NodeKind.VARIABLE_DEF)
        assert declared_name(variable) == "count"

    def test_parameter(self) -> None:
        tree = unit(cls(1, "A", method(2, "m", (param(2, "user", type_name="String"),))))
        (parameter,) = nodes_of(tree, NodeKind.PARAMETER_DEF)
        assert declared_name(parameter) == "user"

    def test_rejects_other_kinds(self) -> None:
        tree = unit(cls(1, "A"))
        with pytest.raises(TreeShapeError, match="VARIABLE_DEF"):
            declared_name(tree.root.children[0])

    def test_rejects_missing_name_slot(self) -> None:
        broken = node_spec("VARIABLE_DEF", 2, node_spec("MODIFIERS", 2), ident(2, "x"))
        tree = unit(cls(1, "A", broken))
        (variable,) = nodes_of(tree, NodeKind.VARIABLE_DEF)
        with pytest.raises(TreeShapeError, match="no name"):
            declared_name(variable)


class TestEnclosingScope:
    def test_field_scope_is_class(self) -> None:
        tree = unit(cls(1, "A", var(2, "x")))
        (variable,) = nodes_of(tree, NodeKind.VARIABLE_DEF)
        assert enclosing_scope(variable) == tree.root.children[0]

    def test_local_scope_is_method(self) -> None:
        tree = unit(cls(1, "A", method(2, "m", (), var(3, "x"))))
        (variable,) = nodes_of(tree, NodeKind.VARIABLE_DEF)
        (method_def,) = nodes_of(tree, NodeKind.METHOD_DEF)
        assert enclosing_scope(variable) == method_def

    def test_parameter_scope_is_constructor(self) -> None:
        tree = unit(cls(1, "A", method(2, "A", (param(2, "x"),), kind="CTOR_DEF")))
        (parameter,) = nodes_of(tree, NodeKind.PARAMETER_DEF)
        (ctor,) = nodes_of(tree, NodeKind.CTOR_DEF)
        assert enclosing_scope(parameter) == ctor

    def test_scope_node_is_its_own_scope(self) -> None:
        tree = unit(cls(1, "A"))
        class_def = tree.root.children[0]
        assert enclosing_scope(class_def) == class_def

    def test_outside_any_scope(self) -> None:
        tree = unit(node_spec("PACKAGE_DEF", 1, ident(1, "app")))
        with pytest.raises(TreeShapeError, match="not inside"):
            enclosing_scope(tree.root.children[0])


class TestEnclosingClass:
    def test_top_level_class(self) -> None:
        tree = unit(cls(1, "A"))
        assert enclosing_class(tree.root.children[0]) is None

    def test_member(self) -> None:
        tree = unit(cls(1, "A", method(2, "m", (), var(3, "x"))))
        (variable,) = nodes_of(tree, NodeKind.VARIABLE_DEF)
        assert enclosing_class(variable) == tree.root.children[0]

    def test_inner_class(self) -> None:
        tree = unit(cls(1, "Outer", cls(2, "Inner", cls(3, "Innermost"))))
        outer, inner, innermost = nodes_of(tree, NodeKind.CLASS_DEF)
        assert not is_inner_class(outer)
        assert is_inner_class(inner)
        assert is_inner_class(innermost)
        assert enclosing_class(innermost) == inner

    def test_interface_counts_as_class(self) -> None:
        interface = node_spec(
            "INTERFACE_DEF",
            1,
            node_spec("MODIFIERS", 1),
            ident(1, "Api"),
            node_spec("OBJBLOCK", 1, cls(2, "Impl")),
        )
        tree = unit(interface)
        (impl,) = nodes_of(tree, NodeKind.CLASS_DEF)
        assert is_inner_class(impl)


class TestAssignmentTarget:
    def test_variable_initializer(self) -> None:
        # int x = 10;
        tree = unit(cls(1, "A", method(2, "m", (), var(3, "x", literal(3, "10")))))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target_name(node) == "x"

    def test_annotation_member(self) -> None:
        # @Bean(name = "dao")
        pair = node_spec(
            "ANNOTATION_MEMBER_VALUE_PAIR",
            2,
            ident(2, "name"),
            node_spec("ASSIGN", 2, text="="),
            node_spec("EXPR", 2, literal(2, '"dao"')),
        )
        annotation = node_spec("ANNOTATION", 2, ident(2, "Bean"), pair)
        tree = unit(cls(3, "A", node_spec("MODIFIERS", 2, annotation)))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target_name(node) == "name"

    def test_array_element(self) -> None:
        # result[0] = msg;
        index_op = node_spec("INDEX_OP", 3, ident(3, "result"), node_spec("EXPR", 3, literal(3)))
        tree = unit(cls(1, "A", method(2, "m", (), assign(3, index_op, ident(3, "msg")))))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target_name(node) == "result"

    def test_multi_dimensional_array_element(self) -> None:
        # grid[i][j] = 1;
        inner = node_spec("INDEX_OP", 3, ident(3, "grid"), node_spec("EXPR", 3, ident(3, "i")))
        outer = node_spec("INDEX_OP", 3, inner, node_spec("EXPR", 3, ident(3, "j")))
        tree = unit(cls(1, "A", method(2, "m", (), assign(3, outer, literal(3, "1")))))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target_name(node) == "grid"

    def test_this_field(self) -> None:
        # this.login = user;
        this_login = node_spec(
            "DOT", 3, node_spec("LITERAL_THIS", 3, text="this"), ident(3, "login")
        )
        tree = unit(cls(1, "A", method(2, "m", (), assign(3, this_login, ident(3, "user")))))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        target = assignment_target(node)
        assert target is not None
        assert target.text == "login"
        assert target.parent is not None
        assert target.parent.kind is NodeKind.DOT

    def test_other_member_access(self) -> None:
        # a.b = c;  not a this-qualified field
        tree = unit(
            cls(1, "A", method(2, "m", (), assign(3, name_chain(3, "a.b"), ident(3, "c"))))
        )
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target(node) is None

    def test_plain_reassignment(self) -> None:
        # x = 10;
        tree = unit(cls(1, "A", method(2, "m", (), assign(3, ident(3, "x"), literal(3, "10")))))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target_name(node) == "x"

    def test_compound_assignment(self) -> None:
        statement = node_spec(
            "EXPR", 3, node_spec("ASSIGN", 3, ident(3, "total"), ident(3, "n"), text="+=")
        )
        tree = unit(cls(1, "A", method(2, "m", (), statement)))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target_name(node) == "total"

    def test_array_initializer(self) -> None:
        # String[] headers = {"a", "b"};
        init = node_spec(
            "ASSIGN",
            3,
            node_spec(
                "ARRAY_INIT",
                3,
                node_spec("EXPR", 3, literal(3, '"a"')),
                node_spec("EXPR", 3, literal(3, '"b"')),
            ),
            text="=",
        )
        variable = node_spec(
            "VARIABLE_DEF",
            3,
            node_spec("MODIFIERS", 3),
            node_spec("TYPE", 3, ident(3, "String")),
            ident(3, "headers"),
            init,
        )
        tree = unit(cls(1, "A", method(2, "m", (), variable)))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target_name(node) == "headers"

    def test_empty_assign(self) -> None:
        tree = unit(cls(1, "A", method(2, "m", (), node_spec("ASSIGN", 3, text="="))))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target(node) is None

    def test_target_not_an_identifier(self) -> None:
        # (a = b) where the left side is a literal: nothing to name
        tree = unit(cls(1, "A", method(2, "m", (), assign(3, literal(3), ident(3, "b")))))
        (node,) = nodes_of(tree, NodeKind.ASSIGN)
        assert assignment_target(node) is None

    def test_rejects_non_assign(self) -> None:
        tree = unit(cls(1, "A"))
        with pytest.raises(TreeShapeError, match="ASSIGN"):
            assignment_target(tree.root.children[0])
