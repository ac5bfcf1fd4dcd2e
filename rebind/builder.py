"""
Expression builder for REBIND.

Building trees node by node is verbose; the E builder keeps predicate
definitions readable and wraps plain Python values as literals:

    from rebind import E

    p = E.param("p")
    adult = E.lambda_([p], E.op(">=", E.member(p, "age"), 18))
    named = E.lambda_([p], E.call(E.member(p, "name.startswith"), "A"))

    (adult & named)({"age": 30, "name": "Ada"})   # => True
"""

from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from .compose import and_also, or_else
from .nodes import (
    Node, Literal, Parameter, MemberAccess, Unary, Binary, Conditional,
    Call, Lambda, BinaryOp, UnaryOp,
)

_UNARY_SYMBOLS = {op.value for op in UnaryOp}
_BINARY_SYMBOLS = {op.value for op in BinaryOp}


def to_node(value: Any) -> Node:
    """Return `value` unchanged if it is a node, otherwise wrap it as a Literal."""
    if isinstance(value, Node):
        return value
    return Literal(value)


class _ExprBuilder:
    """
    Expression builder for REBIND.

    Examples:
        from rebind import E

        x = E.param("x", int)
        E.op(">", x, 0)                  # (> x 0)
        E.op("not", E.op("==", x, 1))    # (not (== x 1))
        E.member(x, "real")              # x.real
        E.call(len, E.param("s"))        # (len s)
        E.lambda_([x], E.op(">", x, 0))  # (lambda (x) (> x 0))
    """

    def __call__(self, value: Any) -> Node:
        """
        Wrap a value as a node.

        Examples:
            E(5) -> Literal(5)
            E(x) -> x (nodes are returned unchanged)
        """
        return to_node(value)

    def param(self, name: str, type_: type = object) -> Parameter:
        """
        Create a new parameter.

        Every call creates a distinct parameter, even for the same name.
        """
        return Parameter(name, type_)

    def params(self, *names: str, type_: type = object) -> Tuple[Parameter, ...]:
        """
        Create several parameters for unpacking.

        Example:
            x, y = E.params("x", "y", type_=int)
        """
        return tuple(Parameter(name, type_) for name in names)

    def const(self, value: Any, type_: Optional[type] = None) -> Literal:
        """Create a literal, optionally with an explicit static type."""
        return Literal(value, type_)

    def member(self, expression: Any, path: str, type_: type = object) -> MemberAccess:
        """
        Access a member, or a dotted path of members.

        Intermediate links get static type object; `type_` applies to the
        last member.

        Examples:
            E.member(p, "age")          -> p.age
            E.member(p, "address.zip")  -> p.address.zip
        """
        names = path.split(".")
        node = to_node(expression)
        for name in names[:-1]:
            node = MemberAccess(node, name)
        return MemberAccess(node, names[-1], type_=type_)

    def static(self, owner: Any, member: str, type_: type = object) -> MemberAccess:
        """
        Access a static member of a class or module.

        Example:
            E.static(math, "pi")  -> math.pi
        """
        return MemberAccess(None, member, type_=type_, owner=owner)

    def op(self, symbol: Union[str, BinaryOp, UnaryOp], *operands: Any) -> Node:
        """
        Apply an operator. One operand builds a unary node, two a binary one.

        "-" is negation with one operand and subtraction with two.

        Examples:
            E.op("+", x, 1)      -> (+ x 1)
            E.op("&&", a, b)     -> (&& a b)
            E.op("-", x)         -> (- x)
            E.op("not", flag)    -> (not flag)
        """
        if isinstance(symbol, (BinaryOp, UnaryOp)):
            symbol = symbol.value
        if len(operands) == 1 and symbol in _UNARY_SYMBOLS:
            return Unary(symbol, to_node(operands[0]))
        if len(operands) == 2 and symbol in _BINARY_SYMBOLS:
            return Binary(symbol, to_node(operands[0]), to_node(operands[1]))
        raise ValueError(
            f"no {len(operands)}-operand operator '{symbol}'"
        )

    def and_also(self, left: Any, right: Any) -> Binary:
        """Short-circuit AND."""
        return and_also(to_node(left), to_node(right))

    def or_else(self, left: Any, right: Any) -> Binary:
        """Short-circuit OR."""
        return or_else(to_node(left), to_node(right))

    def cond(self, test: Any, if_true: Any, if_false: Any) -> Conditional:
        """Conditional expression: (if test if_true if_false)."""
        return Conditional(to_node(test), to_node(if_true), to_node(if_false))

    def call(self, function: Any, *arguments: Any, type_: type = object) -> Call:
        """
        Call a function. Python callables are wrapped as literals.

        Examples:
            E.call(len, s)                          -> (len s)
            E.call(E.member(s, "startswith"), "A")  -> (s.startswith 'A')
        """
        return Call(to_node(function), [to_node(a) for a in arguments], type_=type_)

    def lambda_(self, parameters: Iterable[Parameter], body: Any) -> Lambda:
        """Create a lambda over `parameters`."""
        return Lambda(parameters, to_node(body))

    def all_of(self, *conditions: Any) -> Node:
        """
        Chain conditions with &&, left to right.

        Example:
            E.all_of(a, b, c) -> (&& (&& a b) c)
        """
        return self._chain(conditions, and_also, True)

    def any_of(self, *conditions: Any) -> Node:
        """Chain conditions with ||, left to right. E.any_of() is False."""
        return self._chain(conditions, or_else, False)

    @staticmethod
    def _chain(conditions: Sequence[Any], join, empty: bool) -> Node:
        nodes: List[Node] = [to_node(c) for c in conditions]
        if not nodes:
            return Literal(empty)
        result = nodes[0]
        for node in nodes[1:]:
            result = join(result, node)
        return result

    def __repr__(self) -> str:
        return "E (expression builder)"


# Singleton instance
E = _ExprBuilder()
