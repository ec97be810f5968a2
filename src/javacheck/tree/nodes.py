"""Syntax tree model: node kinds, an immutable arena of nodes, and node handles."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class TreeShapeError(ValueError):
    """Raised when a node does not have the kind or shape a query requires."""


class NodeKind(enum.Enum):
    """Closed set of node kinds produced by the front end."""

    COMPILATION_UNIT = "compilation_unit"
    PACKAGE_DEF = "package_def"
    IMPORT = "import"
    STATIC_IMPORT = "static_import"

    # Type declarations and their members.
    CLASS_DEF = "class_def"
    INTERFACE_DEF = "interface_def"
    ENUM_DEF = "enum_def"
    RECORD_DEF = "record_def"
    ANNOTATION_DEF = "annotation_def"
    OBJBLOCK = "objblock"
    ENUM_CONSTANT_DEF = "enum_constant_def"
    METHOD_DEF = "method_def"
    CTOR_DEF = "ctor_def"
    ANNOTATION_FIELD_DEF = "annotation_field_def"
    STATIC_INIT = "static_init"
    VARIABLE_DEF = "variable_def"
    PARAMETER_DEF = "parameter_def"
    PARAMETERS = "parameters"

    # Declaration parts.
    MODIFIERS = "modifiers"
    MODIFIER = "modifier"
    KEYWORD = "keyword"
    TYPE = "type"
    TYPE_ARGUMENTS = "type_arguments"
    TYPE_PARAMETERS = "type_parameters"
    EXTENDS_CLAUSE = "extends_clause"
    IMPLEMENTS_CLAUSE = "implements_clause"
    LITERAL_THROWS = "literal_throws"
    ANNOTATIONS = "annotations"
    ANNOTATION = "annotation"
    ANNOTATION_MEMBER_VALUE_PAIR = "annotation_member_value_pair"

    # Statements and expressions.
    SLIST = "slist"
    STATEMENT = "statement"
    EXPR = "expr"
    ELIST = "elist"
    ASSIGN = "assign"
    DOT = "dot"
    INDEX_OP = "index_op"
    METHOD_CALL = "method_call"
    LITERAL_NEW = "literal_new"
    LAMBDA = "lambda"
    ARRAY_INIT = "array_init"
    TYPECAST = "typecast"
    OPERATION = "operation"

    # Leaves.
    IDENT = "ident"
    PRIMITIVE_TYPE = "primitive_type"
    LITERAL = "literal"
    LITERAL_THIS = "literal_this"
    LITERAL_SUPER = "literal_super"
    STAR = "star"


# Kinds that introduce a class-like scope.
CLASS_KINDS: frozenset[NodeKind] = frozenset(
    {
        NodeKind.CLASS_DEF,
        NodeKind.INTERFACE_DEF,
        NodeKind.ENUM_DEF,
        NodeKind.RECORD_DEF,
        NodeKind.ANNOTATION_DEF,
    }
)

# Kinds that delimit the scope of a declaration.
SCOPE_KINDS: frozenset[NodeKind] = CLASS_KINDS | {NodeKind.CTOR_DEF, NodeKind.METHOD_DEF}


class SyntaxTree:
    """An immutable arena of nodes stored in pre-order.

    Every node is addressed by its index.  Because nodes are stored in
    pre-order, the subtree of node ``i`` is the contiguous index range
    ``[i, end(i))``.  Use :class:`TreeBuilder` to create one.
    """

    def __init__(
        self,
        *,
        kinds: Sequence[NodeKind],
        texts: Sequence[str | None],
        lines: Sequence[int],
        parents: Sequence[int | None],
        children: Sequence[tuple[int, ...]],
        positions: Sequence[int],
        ends: Sequence[int],
        path: str | None = None,
    ) -> None:
        if not kinds:
            msg = "a syntax tree needs at least a root node"
            raise TreeShapeError(msg)
        self._kinds = tuple(kinds)
        self._texts = tuple(texts)
        self._lines = tuple(lines)
        self._parents = tuple(parents)
        self._children = tuple(children)
        self._positions = tuple(positions)
        self._ends = tuple(ends)
        self.path = path

    def __len__(self) -> int:
        return len(self._kinds)

    def __repr__(self) -> str:
        return f"SyntaxTree(path={self.path!r}, nodes={len(self)})"

    @property
    def root(self) -> SyntaxNode:
        return SyntaxNode(self, 0)

    def node(self, index: int) -> SyntaxNode:
        """Return the handle for *index*."""
        if not 0 <= index < len(self._kinds):
            msg = f"node index {index} out of range"
            raise IndexError(msg)
        return SyntaxNode(self, index)

    def iter_nodes(self) -> Iterator[SyntaxNode]:
        """Yield every node in pre-order (source order)."""
        for index in range(len(self._kinds)):
            yield SyntaxNode(self, index)


@dataclass(frozen=True)
class SyntaxNode:
    """A read-only handle to one node of a :class:`SyntaxTree`.

    Handles compare equal when they address the same index of the same tree,
    so node identity is structural.
    """

    tree: SyntaxTree = field(repr=False)
    index: int

    @property
    def kind(self) -> NodeKind:
        return self.tree._kinds[self.index]

    @property
    def text(self) -> str | None:
        return self.tree._texts[self.index]

    @property
    def line(self) -> int:
        return self.tree._lines[self.index]

    @property
    def parent(self) -> SyntaxNode | None:
        parent = self.tree._parents[self.index]
        return None if parent is None else SyntaxNode(self.tree, parent)

    @property
    def children(self) -> tuple[SyntaxNode, ...]:
        return tuple(SyntaxNode(self.tree, i) for i in self.tree._children[self.index])

    @property
    def first_child(self) -> SyntaxNode | None:
        kids = self.tree._children[self.index]
        return SyntaxNode(self.tree, kids[0]) if kids else None

    @property
    def previous_sibling(self) -> SyntaxNode | None:
        return self._sibling(-1)

    @property
    def next_sibling(self) -> SyntaxNode | None:
        return self._sibling(1)

    def _sibling(self, offset: int) -> SyntaxNode | None:
        parent = self.tree._parents[self.index]
        if parent is None:
            return None
        siblings = self.tree._children[parent]
        position = self.tree._positions[self.index] + offset
        if 0 <= position < len(siblings):
            return SyntaxNode(self.tree, siblings[position])
        return None

    def find_child(self, kind: NodeKind) -> SyntaxNode | None:
        """Return the first direct child of *kind*, or ``None``."""
        for index in self.tree._children[self.index]:
            if self.tree._kinds[index] is kind:
                return SyntaxNode(self.tree, index)
        return None

    def descendants(self, *, include_self: bool = False) -> Iterator[SyntaxNode]:
        """Yield the nodes of this subtree in pre-order."""
        start = self.index if include_self else self.index + 1
        for index in range(start, self.tree._ends[self.index]):
            yield SyntaxNode(self.tree, index)

    def __repr__(self) -> str:
        if self.text is None:
            return f"SyntaxNode({self.kind.name}, line={self.line})"
        return f"SyntaxNode({self.kind.name}, line={self.line}, text={self.text!r})"


class TreeBuilder:
    """Incrementally build a :class:`SyntaxTree` in pre-order.

    A node may only be attached to the most recently added node or to one of
    its ancestors, which keeps the arena in source order.
    """

    def __init__(self) -> None:
        self._kinds: list[NodeKind] = []
        self._texts: list[str | None] = []
        self._lines: list[int] = []
        self._parents: list[int | None] = []
        self._children: list[list[int]] = []
        self._positions: list[int] = []
        self._open: list[int] = []

    def add(
        self,
        kind: NodeKind,
        *,
        parent: int | None,
        line: int,
        text: str | None = None,
    ) -> int:
        """Append a node and return its index."""
        if line < 1:
            msg = f"line numbers are 1-based, got {line}"
            raise TreeShapeError(msg)
        if parent is None:
            if self._kinds:
                msg = "a syntax tree has exactly one root"
                raise TreeShapeError(msg)
        else:
            if parent not in self._open:
                msg = f"parent {parent} is not on the current pre-order path"
                raise TreeShapeError(msg)
            while self._open[-1] != parent:
                self._open.pop()

        index = len(self._kinds)
        self._kinds.append(kind)
        self._texts.append(text)
        self._lines.append(line)
        self._parents.append(parent)
        self._children.append([])
        if parent is None:
            self._positions.append(0)
        else:
            self._positions.append(len(self._children[parent]))
            self._children[parent].append(index)
        self._open.append(index)
        return index

    def build(self, *, path: str | None = None) -> SyntaxTree:
        ends = [i + 1 for i in range(len(self._kinds))]
        for index in range(len(self._kinds) - 1, 0, -1):
            parent = self._parents[index]
            if parent is not None and ends[index] > ends[parent]:
                ends[parent] = ends[index]
        return SyntaxTree(
            kinds=self._kinds,
            texts=self._texts,
            lines=self._lines,
            parents=self._parents,
            children=[tuple(c) for c in self._children],
            positions=self._positions,
            ends=ends,
            path=path,
        )


@dataclass
class NodeSpec:
    """Declarative description of a subtree, turned into a tree by :func:`build_tree`."""

    kind: NodeKind
    line: int
    text: str | None = None
    children: list[NodeSpec] = field(default_factory=list)


def node_spec(
    kind: NodeKind | str, line: int, *children: NodeSpec, text: str | None = None
) -> NodeSpec:
    """Shorthand for :class:`NodeSpec`; *kind* may be given by name (``"CLASS_DEF"``)."""
    resolved = NodeKind[kind] if isinstance(kind, str) else kind
    return NodeSpec(kind=resolved, line=line, text=text, children=list(children))


def build_tree(root: NodeSpec, *, path: str | None = None) -> SyntaxTree:
    """Build a :class:`SyntaxTree` from a :class:`NodeSpec` hierarchy."""
    builder = TreeBuilder()
    stack: list[tuple[NodeSpec, int | None]] = [(root, None)]
    while stack:
        spec, parent = stack.pop()
        index = builder.add(spec.kind, parent=parent, line=spec.line, text=spec.text)
        stack.extend((child, index) for child in reversed(spec.children))
    return builder.build(path=path)
