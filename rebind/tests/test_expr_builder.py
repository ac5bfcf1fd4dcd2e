"""Tests for the expression builder E."""

import math
import pytest

from rebind import (
    E, Node, Literal, Parameter, MemberAccess, Unary, Binary, Conditional,
    Call, Lambda, BinaryOp, UnaryOp, NodeKind, to_node, evaluate,
)


class TestExprBuilder:
    """Tests for E expression builder."""

    def test_wrap_value(self):
        """E() wraps plain values as literals."""
        assert E(5) == Literal(5)
        assert E("x") == Literal("x")
        assert E(None) == Literal(None)

    def test_wrap_node(self):
        """E() returns nodes unchanged."""
        x = E.param("x")
        assert E(x) is x
        assert to_node(x) is x

    def test_param(self):
        """E.param() creates a parameter."""
        x = E.param("x", int)
        assert isinstance(x, Parameter)
        assert x.name == "x"
        assert x.type_ is int

    def test_param_distinct(self):
        """Every E.param() call is a new parameter."""
        assert E.param("x") != E.param("x")

    def test_params(self):
        """E.params() creates several parameters for unpacking."""
        x, y, z = E.params("x", "y", "z", type_=float)
        assert [p.name for p in (x, y, z)] == ["x", "y", "z"]
        assert all(p.type_ is float for p in (x, y, z))

    def test_params_single(self):
        """E.params() works with a single name."""
        (x,) = E.params("x")
        assert x.name == "x"

    def test_const(self):
        """E.const() creates literals."""
        assert E.const(5) == Literal(5)
        assert E.const(5, float).type_ is float


class TestMembers:
    """Tests for E.member() and E.static()."""

    def test_member(self):
        """A single member."""
        p = E.param("p")
        node = E.member(p, "age", type_=int)
        assert isinstance(node, MemberAccess)
        assert node.expression is p
        assert node.member == "age"
        assert node.type_ is int

    def test_dotted_path(self):
        """A dotted path builds a chain, innermost first."""
        p = E.param("p")
        node = E.member(p, "address.zip", type_=str)
        assert node.member == "zip"
        assert node.type_ is str
        assert node.expression.member == "address"
        assert node.expression.type_ is object
        assert node.expression.expression is p

    def test_member_of_value(self):
        """Plain values are wrapped before member access."""
        node = E.member("abc", "upper")
        assert node.expression == Literal("abc")

    def test_static(self):
        """E.static() builds an owner-bound member."""
        node = E.static(math, "pi", type_=float)
        assert node.expression is None
        assert node.owner is math
        assert evaluate(node) == math.pi


class TestOperators:
    """Tests for E.op() and friends."""

    def test_binary(self):
        """Two operands build a binary node."""
        x = E.param("x")
        node = E.op(">", x, 0)
        assert isinstance(node, Binary)
        assert node.op is BinaryOp.GREATER
        assert node.right == Literal(0)

    def test_unary(self):
        """One operand builds a unary node."""
        node = E.op("not", True)
        assert isinstance(node, Unary)
        assert node.op is UnaryOp.NOT

    def test_minus(self):
        """'-' is negation with one operand, subtraction with two."""
        assert E.op("-", 1).op is UnaryOp.NEGATE
        assert E.op("-", 1, 2).op is BinaryOp.SUBTRACT

    def test_enum_symbol(self):
        """Operators can be given as enum members."""
        assert E.op(BinaryOp.ADD, 1, 2) == E.op("+", 1, 2)
        assert E.op(UnaryOp.INVERT, 1) == E.op("~", 1)

    def test_nested(self):
        """E.op() nests."""
        x = E.param("x")
        node = E.op("+", x, E.op("*", 2, x))
        assert node.right.op is BinaryOp.MULTIPLY
        assert evaluate(node, {x: 3}) == 9

    def test_unknown_operator(self):
        """Unknown operators are rejected."""
        with pytest.raises(ValueError):
            E.op("dd", 1, 2)

    def test_wrong_operand_count(self):
        """Operators take one or two operands."""
        with pytest.raises(ValueError):
            E.op("+", 1, 2, 3)
        with pytest.raises(ValueError):
            E.op("not", 1, 2)
        with pytest.raises(ValueError):
            E.op("+")

    def test_short_circuit(self):
        """E.and_also() and E.or_else() build && and ||."""
        assert E.and_also(True, False).op is BinaryOp.AND_ALSO
        assert E.or_else(True, False).op is BinaryOp.OR_ELSE
        assert E.and_also(1, 2).type_ is bool

    def test_cond(self):
        """E.cond() builds a conditional."""
        node = E.cond(True, 1, 2)
        assert isinstance(node, Conditional)
        assert evaluate(node) == 1

    def test_call(self):
        """E.call() wraps Python callables as literals."""
        s = E.param("s")
        node = E.call(len, s, type_=int)
        assert isinstance(node, Call)
        assert node.function == Literal(len)
        assert node.arguments == (s,)
        assert node.type_ is int

    def test_lambda(self):
        """E.lambda_() builds a lambda."""
        x = E.param("x")
        node = E.lambda_([x], 1)
        assert isinstance(node, Lambda)
        assert node.parameters == (x,)
        assert node.body == Literal(1)
        assert node.arity == 1


class TestChains:
    """Tests for E.all_of() and E.any_of()."""

    def test_all_of(self):
        """all_of chains with && left to right."""
        a, b, c = E.params("a", "b", "c")
        assert E.all_of(a, b, c) == E.and_also(E.and_also(a, b), c)

    def test_any_of(self):
        """any_of chains with || left to right."""
        a, b = E.params("a", "b")
        assert E.any_of(a, b) == E.or_else(a, b)

    def test_single(self):
        """A single condition is returned as is."""
        a = E.param("a")
        assert E.all_of(a) is a

    def test_empty(self):
        """Empty chains are the identity of their operator."""
        assert E.all_of() == Literal(True)
        assert E.any_of() == Literal(False)


class TestBuilderUsage:
    """E methods work together naturally."""

    def test_repr(self):
        """The builder has a readable repr."""
        assert repr(E) == "E (expression builder)"

    def test_nodes(self):
        """Everything the builder returns is a node."""
        x = E.param("x")
        built = [E(1), x, E.member(x, "a"), E.op("-", x), E.op("+", x, 1),
                 E.cond(x, 1, 2),
                 E.call(len, x), E.lambda_([x], x)]
        assert all(isinstance(n, Node) for n in built)
        assert [n.kind for n in built] == list(NodeKind)

    def test_records(self):
        """Predicates over dicts and strings."""
        p = E.param("p")
        adult = E.lambda_([p], E.op(">=", E.member(p, "age"), 18))
        named = E.lambda_([p], E.call(E.member(p, "name.startswith"), "A"))
        both = adult & named
        assert both({"age": 30, "name": "Ada"}) == True
        assert both({"age": 12, "name": "Ada"}) == False
        assert both({"age": 30, "name": "Bob"}) == False
