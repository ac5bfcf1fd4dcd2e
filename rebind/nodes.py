"""
Expression tree node types for REBIND.

A predicate is a tree of immutable nodes. Every node carries a `kind` tag
(NodeKind) and a static type `type_` (a Python type, `object` when unknown):

    LITERAL        Literal(value)                    5, "abc", None
    PARAMETER      Parameter(name)                   x
    MEMBER_ACCESS  MemberAccess(expression, member)  x.age
    UNARY          Unary(op, operand)                (not x)
    BINARY         Binary(op, left, right)           (> x 0)
    CONDITIONAL    Conditional(test, a, b)           (if c a b)
    CALL           Call(function, arguments)         (len x)
    LAMBDA         Lambda(parameters, body)          (lambda (x) body)

Parameters are compared by identity, never by name: two parameters called
"x" built for two different predicates are different parameters. All other
nodes compare structurally.

Constructors do not validate children. A missing or non-node child is
reported as a MalformedTreeError when the tree is traversed.
"""

import itertools
from collections.abc import Callable as CallableABC
from enum import Enum
from typing import Any, Iterable, Optional, Union


class NodeKind(Enum):
    """Closed set of node kinds."""

    LITERAL = "literal"
    PARAMETER = "parameter"
    MEMBER_ACCESS = "member"
    UNARY = "unary"
    BINARY = "binary"
    CONDITIONAL = "if"
    CALL = "call"
    LAMBDA = "lambda"


class BinaryOp(Enum):
    """Binary operators, keyed by their symbol."""

    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    FLOOR_DIVIDE = "//"
    MODULO = "%"
    POWER = "**"
    # Comparison
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS = "<"
    LESS_EQUAL = "<="
    GREATER = ">"
    GREATER_EQUAL = ">="
    CONTAINS = "in"
    # Eager logical / bitwise
    AND = "&"
    OR = "|"
    XOR = "^"
    # Short-circuit logical
    AND_ALSO = "&&"
    OR_ELSE = "||"

    @property
    def is_short_circuit(self) -> bool:
        """True for && and ||, whose right operand is evaluated on demand."""
        return self in _SHORT_CIRCUIT

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISON

    @property
    def is_arithmetic(self) -> bool:
        return self in _ARITHMETIC


_SHORT_CIRCUIT = frozenset({BinaryOp.AND_ALSO, BinaryOp.OR_ELSE})
_COMPARISON = frozenset({
    BinaryOp.EQUAL, BinaryOp.NOT_EQUAL, BinaryOp.LESS, BinaryOp.LESS_EQUAL,
    BinaryOp.GREATER, BinaryOp.GREATER_EQUAL, BinaryOp.CONTAINS,
})
_ARITHMETIC = frozenset({
    BinaryOp.ADD, BinaryOp.SUBTRACT, BinaryOp.MULTIPLY, BinaryOp.DIVIDE,
    BinaryOp.FLOOR_DIVIDE, BinaryOp.MODULO, BinaryOp.POWER,
})


class UnaryOp(Enum):
    """Unary operators, keyed by their symbol."""

    NOT = "not"
    NEGATE = "-"
    INVERT = "~"


# Parameter uids, in construction order
_uids = itertools.count(1)


def _static_type(node: Any) -> type:
    """Static type of a child, `object` for anything that is not a node."""
    return getattr(node, "type_", object) if isinstance(node, Node) else object


def _numeric_type(t: type) -> type:
    """Arithmetic on bools produces ints."""
    return int if t is bool else t


def _binary_type(op: BinaryOp, left: Any, right: Any) -> type:
    if op.is_comparison or op.is_short_circuit:
        return bool
    lt, rt = _static_type(left), _static_type(right)
    if op.is_arithmetic:
        lt, rt = _numeric_type(lt), _numeric_type(rt)
        if op is BinaryOp.DIVIDE:
            numeric = (int, float)
            return float if lt in numeric and rt in numeric else object
        if op is BinaryOp.POWER:
            # int ** negative int is a float, float ** fraction may be complex
            return object
    return lt if lt is rt else object


class Node:
    """
    Base class for all expression tree nodes.

    Nodes are immutable: assigning an attribute after construction raises
    AttributeError. Equality is structural (see traversal.structurally_equal);
    only parameters are hashable.
    """

    __slots__ = ()
    kind: NodeKind

    def __setattr__(self, name: str, value: Any):
        raise AttributeError(f"{type(self).__name__} nodes are immutable")

    def __delattr__(self, name: str):
        raise AttributeError(f"{type(self).__name__} nodes are immutable")

    def _set(self, **fields):
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        from .traversal import structurally_equal
        return structurally_equal(self, other)

    __hash__ = None

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __repr__(self) -> str:
        from .errors import MalformedTreeError
        from .traversal import format_node
        try:
            return format_node(self)
        except MalformedTreeError:
            return f"<{type(self).__name__} (malformed)>"


class Literal(Node):
    """A constant value. `type_` defaults to the value's own type."""

    __slots__ = ("value", "type_")
    kind = NodeKind.LITERAL

    def __init__(self, value: Any, type_: Optional[type] = None):
        self._set(value=value, type_=type_ if type_ is not None else type(value))


class Parameter(Node):
    """
    A formal parameter of a Lambda, and every reference to it.

    Identity is the parameter object itself; `uid` is a unique integer
    assigned at construction, used only for display.
    """

    __slots__ = ("name", "type_", "uid")
    kind = NodeKind.PARAMETER

    def __init__(self, name: str, type_: type = object):
        self._set(name=name, type_=type_, uid=next(_uids))

    def __eq__(self, other):
        return self is other

    __hash__ = object.__hash__


class MemberAccess(Node):
    """
    Read `member` from the value of `expression`.

    When `expression` is None the member is static and is read from
    `owner` (a class or module).
    """

    __slots__ = ("expression", "member", "owner", "type_")
    kind = NodeKind.MEMBER_ACCESS

    def __init__(self, expression: Optional[Node], member: str,
                 type_: type = object, owner: Any = None):
        self._set(expression=expression, member=member, owner=owner, type_=type_)


class Unary(Node):
    """Apply a unary operator to `operand`."""

    __slots__ = ("op", "operand", "type_")
    kind = NodeKind.UNARY

    def __init__(self, op: Union[UnaryOp, str], operand: Node,
                 type_: Optional[type] = None):
        op = UnaryOp(op)
        if type_ is None:
            type_ = bool if op is UnaryOp.NOT else _numeric_type(_static_type(operand))
        self._set(op=op, operand=operand, type_=type_)


class Binary(Node):
    """
    Apply a binary operator to `left` and `right`.

    Comparisons and logical operators have static type bool.
    """

    __slots__ = ("op", "left", "right", "type_")
    kind = NodeKind.BINARY

    def __init__(self, op: Union[BinaryOp, str], left: Node, right: Node,
                 type_: Optional[type] = None):
        op = BinaryOp(op)
        if type_ is None:
            type_ = _binary_type(op, left, right)
        self._set(op=op, left=left, right=right, type_=type_)


class Conditional(Node):
    """`if_true` when `test` holds, otherwise `if_false`."""

    __slots__ = ("test", "if_true", "if_false", "type_")
    kind = NodeKind.CONDITIONAL

    def __init__(self, test: Node, if_true: Node, if_false: Node,
                 type_: Optional[type] = None):
        if type_ is None:
            type_ = _static_type(if_true)
        self._set(test=test, if_true=if_true, if_false=if_false, type_=type_)


class Call(Node):
    """Call the value of `function` with the values of `arguments`."""

    __slots__ = ("function", "arguments", "type_")
    kind = NodeKind.CALL

    def __init__(self, function: Node, arguments: Iterable[Node] = (),
                 type_: type = object):
        self._set(function=function, arguments=tuple(arguments), type_=type_)


class Lambda(Node):
    """
    A function of `parameters` whose result is `body`.

    A Lambda compiles to a Python callable and can be called directly:

        x = Parameter("x", int)
        positive = Lambda([x], Binary(">", x, Literal(0)))
        positive(5)            # => True

    Predicates combine with & and |, which unify the parameters of the
    right-hand lambda with those of the left-hand one:

        small = Lambda([y], Binary("<", y, Literal(10)))
        (positive & small)(20) # => False
    """

    __slots__ = ("parameters", "body", "type_", "_compiled")
    kind = NodeKind.LAMBDA

    def __init__(self, parameters: Iterable[Parameter], body: Node):
        self._set(parameters=tuple(parameters), body=body,
                  type_=CallableABC, _compiled=None)

    @property
    def arity(self) -> int:
        """Number of parameters."""
        return len(self.parameters)

    def compile(self, operators=None):
        """Compile to a Python callable (see compiler.compile_lambda)."""
        from .compiler import compile_lambda
        return compile_lambda(self, operators=operators)

    def __call__(self, *args):
        if self._compiled is None:
            self._set(_compiled=self.compile())
        return self._compiled(*args)

    def __and__(self, other: "Lambda") -> "Lambda":
        from .compose import and_
        return and_(self, other)

    def __or__(self, other: "Lambda") -> "Lambda":
        from .compose import or_
        return or_(self, other)


def is_node(value: Any) -> bool:
    """Check if a value is an expression tree node."""
    return isinstance(value, Node)
