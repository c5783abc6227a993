"""
SwarmMind Decision Tree Engine
===============================
Generic, side-effect-free decision trees: typed context in, typed
result out. Independent of the swarm modules.

Node kinds:
- leaf(result):                        return result
- conditional(pred, if_true, if_false): branch on pred(context)
- multiway(cases, default):            first matching case in declared
                                       order, else default, else error
- passthrough(next, label):            forward to next (labelling only)

Nodes live in an arena and refer to children by integer index.
A child must exist before its parent is created, so every child
index is smaller than its parent's and cycles cannot be built.
String ids ("multiway-3") are for error messages and rendering only.

Example:
--------
>>> b = DecisionTreeBuilder()
>>> tree = b.build(b.conditional(lambda ctx: ctx > 5, b.leaf("big"), b.leaf("small")))
>>> tree.evaluate(10)
'big'
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

C = TypeVar("C")
R = TypeVar("R")

Predicate = Callable[[Any], bool]


class DecisionTreeError(Exception):
    """A tree reached a dead end: a misconfigured behaviour tree."""

    def __init__(self, node_id: str, message: Optional[str] = None):
        self.node_id = node_id
        super().__init__(
            message or f"Decision tree dead end at node '{node_id}': "
                       f"no case matched and no default is set"
        )


class NodeKind(Enum):
    LEAF = "leaf"
    CONDITIONAL = "conditional"
    MULTIWAY = "multiway"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class LeafNode:
    node_id: str
    result: Any

    kind = NodeKind.LEAF


@dataclass(frozen=True)
class ConditionalNode:
    node_id: str
    predicate: Predicate
    if_true: int
    if_false: int

    kind = NodeKind.CONDITIONAL


@dataclass(frozen=True)
class MultiwayCase:
    predicate: Predicate
    target: int


@dataclass(frozen=True)
class MultiwayNode:
    node_id: str
    cases: Tuple[MultiwayCase, ...]
    default: Optional[int] = None

    kind = NodeKind.MULTIWAY


@dataclass(frozen=True)
class PassthroughNode:
    node_id: str
    next: int
    label: Optional[str] = None

    kind = NodeKind.PASSTHROUGH


DecisionNode = Union[LeafNode, ConditionalNode, MultiwayNode, PassthroughNode]


class DecisionTree(Generic[C, R]):
    """
    Immutable tree handle: a node arena plus a root index.

    Safe to share between agents and to evaluate repeatedly; all
    inputs arrive through the context passed to ``evaluate``.
    """

    def __init__(self, nodes: Tuple[DecisionNode, ...], root: int):
        if not 0 <= root < len(nodes):
            raise ValueError(f"Root index {root} is not in the node arena")
        self._nodes = nodes
        self._root = root

    @property
    def root(self) -> int:
        return self._root

    @property
    def root_node(self) -> DecisionNode:
        return self._nodes[self._root]

    def node(self, ref: int) -> DecisionNode:
        return self._nodes[ref]

    def evaluate(self, context: C) -> R:
        """
        Walk from the root to a leaf and return its result.

        Raises:
            DecisionTreeError: a multiway node had no matching case
                and no default
        """
        node = self._nodes[self._root]
        while True:
            if isinstance(node, LeafNode):
                return node.result

            if isinstance(node, ConditionalNode):
                ref = node.if_true if node.predicate(context) else node.if_false

            elif isinstance(node, MultiwayNode):
                ref = node.default
                for case in node.cases:
                    if case.predicate(context):
                        ref = case.target
                        break
                if ref is None:
                    raise DecisionTreeError(node.node_id)

            elif isinstance(node, PassthroughNode):
                ref = node.next

            else:
                raise TypeError(f"Unknown decision node type: {type(node).__name__}")

            node = self._nodes[ref]

    def describe(self) -> str:
        """Indented text rendering of the tree, one node per line"""
        lines: List[str] = []
        self._describe(self._root, 0, "", lines)
        return "\n".join(lines)

    def _describe(self, ref: int, depth: int, prefix: str, lines: List[str]) -> None:
        node = self._nodes[ref]
        pad = "  " * depth
        if isinstance(node, LeafNode):
            lines.append(f"{pad}{prefix}{node.node_id} -> {node.result!r}")
        elif isinstance(node, ConditionalNode):
            lines.append(f"{pad}{prefix}{node.node_id}")
            self._describe(node.if_true, depth + 1, "true: ", lines)
            self._describe(node.if_false, depth + 1, "false: ", lines)
        elif isinstance(node, MultiwayNode):
            lines.append(f"{pad}{prefix}{node.node_id}")
            for i, case in enumerate(node.cases):
                self._describe(case.target, depth + 1, f"case {i}: ", lines)
            if node.default is not None:
                self._describe(node.default, depth + 1, "default: ", lines)
        else:
            label = f" [{node.label}]" if node.label else ""
            lines.append(f"{pad}{prefix}{node.node_id}{label}")
            self._describe(node.next, depth + 1, "", lines)


class DecisionTreeBuilder(Generic[C, R]):
    """
    Creates nodes in an arena and binds trees to a root.

    Constructors return the new node's arena index. Children must be
    indices returned earlier by the same builder.
    """

    def __init__(self):
        self._nodes: List[DecisionNode] = []
        self._id_counter = 0

    def _next_id(self, kind: NodeKind) -> str:
        node_id = f"{kind.value}-{self._id_counter}"
        self._id_counter += 1
        return node_id

    def _check_ref(self, ref: int) -> int:
        if not isinstance(ref, int) or not 0 <= ref < len(self._nodes):
            raise ValueError(f"Node reference {ref!r} was not created by this builder")
        return ref

    def _add(self, node: DecisionNode) -> int:
        self._nodes.append(node)
        return len(self._nodes) - 1

    def leaf(self, result: R) -> int:
        return self._add(LeafNode(self._next_id(NodeKind.LEAF), result))

    def conditional(self, predicate: Callable[[C], bool], if_true: int, if_false: int) -> int:
        return self._add(ConditionalNode(
            self._next_id(NodeKind.CONDITIONAL),
            predicate,
            self._check_ref(if_true),
            self._check_ref(if_false),
        ))

    def multiway(self, cases: Sequence[Tuple[Callable[[C], bool], int]],
                 default: Optional[int] = None) -> int:
        built = tuple(MultiwayCase(predicate, self._check_ref(target))
                      for predicate, target in cases)
        if default is not None:
            self._check_ref(default)
        return self._add(MultiwayNode(self._next_id(NodeKind.MULTIWAY), built, default))

    def passthrough(self, next_ref: int, label: Optional[str] = None) -> int:
        return self._add(PassthroughNode(
            self._next_id(NodeKind.PASSTHROUGH),
            self._check_ref(next_ref),
            label,
        ))

    def node_id(self, ref: int) -> str:
        return self._nodes[self._check_ref(ref)].node_id

    def build(self, root: int) -> DecisionTree[C, R]:
        """Bind a tree to ``root`` over a snapshot of the current arena"""
        return DecisionTree(tuple(self._nodes), self._check_ref(root))

    def reset(self) -> None:
        """Start a fresh arena; trees built earlier keep their snapshot"""
        self._nodes = []
        self._id_counter = 0
