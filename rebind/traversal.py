"""
Structural traversal of expression trees.

Every operation in REBIND that walks a tree goes through the functions in
this module. They dispatch on the node's `kind` tag in one place, so adding
a node kind means extending `_raw_children` and `with_children` and nothing
else.

None of the traversals recurse: they keep an explicit work stack, so trees
deeper than the interpreter's recursion limit (long chains of && built by
repeated composition, for instance) are handled.
"""

from typing import Any, Callable, Iterator, List, Sequence, Set, Tuple, TypeVar

from .errors import MalformedTreeError
from .nodes import (
    Node, NodeKind, Parameter, MemberAccess, Unary, Binary,
    Conditional, Call, Lambda,
)

R = TypeVar("R")


# ============================================================
# Children
# ============================================================

def _raw_children(node: Node) -> Tuple[Tuple[str, Any], ...]:
    """(field, value) pairs of a node's children, unvalidated."""
    kind = node.kind
    if kind is NodeKind.LITERAL or kind is NodeKind.PARAMETER:
        return ()
    if kind is NodeKind.MEMBER_ACCESS:
        if node.expression is None:
            return ()  # static member
        return (("expression", node.expression),)
    if kind is NodeKind.UNARY:
        return (("operand", node.operand),)
    if kind is NodeKind.BINARY:
        return (("left", node.left), ("right", node.right))
    if kind is NodeKind.CONDITIONAL:
        return (("test", node.test), ("if_true", node.if_true),
                ("if_false", node.if_false))
    if kind is NodeKind.CALL:
        return (("function", node.function),) + tuple(
            (f"arguments[{i}]", arg) for i, arg in enumerate(node.arguments)
        )
    if kind is NodeKind.LAMBDA:
        return tuple(
            (f"parameters[{i}]", p) for i, p in enumerate(node.parameters)
        ) + (("body", node.body),)
    raise MalformedTreeError(f"unknown node kind: {kind!r}", node=node)


def check_node(value: Any) -> Node:
    """Return `value` if it is a node, raise MalformedTreeError otherwise."""
    if not isinstance(value, Node):
        raise MalformedTreeError(
            f"expected an expression node, got {type(value).__name__}",
            node=value,
        )
    return value


def children(node: Node) -> Tuple[Node, ...]:
    """
    Return the children of a node, in a fixed order per kind.

    Lambda children are its parameters followed by its body. Call children
    are the function followed by the arguments.

    Raises:
        MalformedTreeError: If `node` is not a node, a required child is
            missing, or a child is not a node.
    """
    check_node(node)
    result = []
    for field, child in _raw_children(node):
        if child is None:
            raise MalformedTreeError(
                f"{type(node).__name__} is missing its {field}", node=node
            )
        if not isinstance(child, Node):
            raise MalformedTreeError(
                f"{type(node).__name__}.{field} is not a node: {child!r}",
                node=node,
            )
        if field.startswith("parameters") and child.kind is not NodeKind.PARAMETER:
            raise MalformedTreeError(
                f"Lambda.{field} is not a parameter: {child!r}", node=node
            )
        result.append(child)
    return tuple(result)


def with_children(node: Node, new_children: Sequence[Node]) -> Node:
    """
    Rebuild a node of the same kind and metadata with new children.

    Returns `node` itself when every new child is the old child, so sub-trees
    that a rewrite does not touch are shared between input and output.
    """
    old = children(node)
    if len(new_children) != len(old):
        raise ValueError(
            f"{type(node).__name__} takes {len(old)} children, "
            f"got {len(new_children)}"
        )
    if all(a is b for a, b in zip(old, new_children)):
        return node

    kind = node.kind
    if kind is NodeKind.MEMBER_ACCESS:
        return MemberAccess(new_children[0], node.member,
                            type_=node.type_, owner=node.owner)
    if kind is NodeKind.UNARY:
        return Unary(node.op, new_children[0], type_=node.type_)
    if kind is NodeKind.BINARY:
        return Binary(node.op, new_children[0], new_children[1], type_=node.type_)
    if kind is NodeKind.CONDITIONAL:
        return Conditional(*new_children, type_=node.type_)
    if kind is NodeKind.CALL:
        return Call(new_children[0], new_children[1:], type_=node.type_)
    if kind is NodeKind.LAMBDA:
        parameters = new_children[:-1]
        for p in parameters:
            if not isinstance(p, Parameter):
                raise TypeError(
                    f"lambda parameters must be Parameter nodes, got {p!r}"
                )
        return Lambda(parameters, new_children[-1])
    # Literal and Parameter have no children and returned above
    raise MalformedTreeError(f"unknown node kind: {kind!r}", node=node)


# ============================================================
# Walking and folding
# ============================================================

def walk(node: Node) -> Iterator[Node]:
    """Iterate over every node of a tree in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def fold_tree(node: Node, combine: Callable[[Node, List[R]], R]) -> R:
    """
    Post-order fold over a tree.

    `combine(node, child_results)` is called once per node occurrence, after
    all of its children, with the results for those children in order.

    Example:
        # count nodes
        fold_tree(tree, lambda n, kids: 1 + sum(kids))
    """
    results: List[R] = []
    stack: List[Tuple[Node, Any]] = [(node, None)]
    while stack:
        current, kids = stack.pop()
        if kids is None:
            kids = children(current)
            stack.append((current, kids))
            for child in reversed(kids):
                stack.append((child, None))
            continue
        count = len(kids)
        if count:
            args = results[-count:]
            del results[-count:]
        else:
            args = []
        results.append(combine(current, args))
    return results[0]


# ============================================================
# Equality
# ============================================================

def _same(a: Any, b: Any) -> bool:
    return a is b or bool(a == b)


def _same_metadata(a: Node, b: Node) -> bool:
    if a.type_ is not b.type_:
        return False
    kind = a.kind
    if kind is NodeKind.LITERAL:
        return _same(a.value, b.value)
    if kind is NodeKind.MEMBER_ACCESS:
        return a.member == b.member and a.owner is b.owner
    if kind is NodeKind.UNARY or kind is NodeKind.BINARY:
        return a.op is b.op
    return True


def structurally_equal(a: Node, b: Node) -> bool:
    """
    Check if two trees have the same shape, metadata and parameters.

    Parameters match only when they are the same object.
    """
    pairs = [(a, b)]
    while pairs:
        x, y = pairs.pop()
        if x is y:
            continue
        if not isinstance(x, Node) or not isinstance(y, Node):
            if not _same(x, y):
                return False
            continue
        if x.kind is not y.kind or x.kind is NodeKind.PARAMETER:
            return False
        if not _same_metadata(x, y):
            return False
        xs, ys = _raw_children(x), _raw_children(y)
        if len(xs) != len(ys):
            return False
        pairs.extend((cx, cy) for (_, cx), (_, cy) in zip(xs, ys))
    return True


# ============================================================
# Parameter queries
# ============================================================

def parameter_references(node: Node) -> List[Parameter]:
    """
    Every Parameter occurrence in a tree, in pre-order.

    Lambda parameter declarations count as occurrences.
    """
    return [n for n in walk(node) if n.kind is NodeKind.PARAMETER]


def free_parameters(node: Node) -> List[Parameter]:
    """
    Parameters referenced in a tree but not bound by a Lambda inside it.

    Returns each free parameter once, in order of first occurrence. For a
    well-formed Lambda the result is empty.
    """
    check_node(node)
    seen: Set[Parameter] = set()
    free: List[Parameter] = []
    stack = [(node, frozenset())]
    while stack:
        current, bound = stack.pop()
        if current.kind is NodeKind.PARAMETER:
            if current not in bound and current not in seen:
                seen.add(current)
                free.append(current)
            continue
        kids = children(current)
        if current.kind is NodeKind.LAMBDA:
            bound = bound | frozenset(current.parameters)
            kids = (current.body,)
        stack.extend((k, bound) for k in reversed(kids))
    return free


# ============================================================
# Formatting
# ============================================================

def _format_literal(value: Any) -> str:
    if callable(value) and hasattr(value, "__qualname__"):
        return value.__qualname__
    return repr(value)


def format_node(node: Node, show_ids: bool = False) -> str:
    """
    Format a tree as an s-expression.

    Args:
        node: Tree to format
        show_ids: If True, suffix parameters with their uid so that distinct
                  parameters sharing a name can be told apart.

    Examples:
        (lambda (x) (&& (> x 0) (< x 10)))
        (lambda (p) (p.name.startswith 'A'))
        (lambda (x#3) (> x#3 0))            # show_ids=True
    """
    def render(n: Node, parts: List[str]) -> str:
        kind = n.kind
        if kind is NodeKind.LITERAL:
            return _format_literal(n.value)
        if kind is NodeKind.PARAMETER:
            return f"{n.name}#{n.uid}" if show_ids else n.name
        if kind is NodeKind.MEMBER_ACCESS:
            if parts:
                return f"{parts[0]}.{n.member}"
            owner = getattr(n.owner, "__name__", repr(n.owner))
            return f"{owner}.{n.member}"
        if kind is NodeKind.UNARY:
            return f"({n.op.value} {parts[0]})"
        if kind is NodeKind.BINARY:
            return f"({n.op.value} {parts[0]} {parts[1]})"
        if kind is NodeKind.CONDITIONAL:
            return f"(if {' '.join(parts)})"
        if kind is NodeKind.CALL:
            return f"({' '.join(parts)})"
        if kind is NodeKind.LAMBDA:
            return f"(lambda ({' '.join(parts[:-1])}) {parts[-1]})"
        raise MalformedTreeError(f"unknown node kind: {kind!r}", node=n)

    return fold_tree(node, render)
