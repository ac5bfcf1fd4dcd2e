"""Tests for the execution engine."""

import math
import pytest

from rebind import (
    E, Literal, Lambda, Binary, BinaryOp, UnaryOp,
    compile_lambda, evaluate, resolve_operators, DEFAULT_OPERATORS,
    EvaluationError, UnboundParameterError, MalformedTreeError,
)


class Ambiguous:
    """A value whose truth cannot be decided."""

    def __bool__(self):
        raise ValueError("truth value is ambiguous")


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y


class TestCompileLambda:
    """Tests for compile_lambda()."""

    def test_simple_predicate(self):
        """A one-parameter predicate compiles to a callable."""
        x = E.param("x", int)
        check = compile_lambda(E.lambda_([x], E.op(">", x, 0)))
        assert check(1) == True
        assert check(0) == False

    def test_two_parameters(self):
        """Arguments bind positionally."""
        x, y = E.params("x", "y")
        sub = compile_lambda(E.lambda_([x, y], E.op("-", x, y)))
        assert sub(10, 3) == 7

    def test_zero_parameters(self):
        """A zero-parameter lambda is a thunk."""
        assert compile_lambda(E.lambda_([], E.op("*", 6, 7)))() == 42

    def test_wrong_argument_count(self):
        """Calling with the wrong number of arguments is a TypeError."""
        x = E.param("x")
        fn = compile_lambda(E.lambda_([x], x))
        with pytest.raises(TypeError):
            fn(1, 2)

    def test_not_a_lambda(self):
        """Only lambdas compile."""
        with pytest.raises(TypeError):
            compile_lambda(E.op("+", 1, 2))

    def test_malformed(self):
        """Malformed trees fail at compile time."""
        with pytest.raises(MalformedTreeError):
            compile_lambda(Lambda([], Binary("+", Literal(1), None)))

    def test_deep_tree_compiles(self):
        """Compilation does not recurse."""
        x = E.param("x", bool)
        body = x
        for _ in range(5000):
            body = E.op("not", body)
        # compile only; executing would nest 5000 calls
        assert callable(compile_lambda(E.lambda_([x], body)))


class TestOperators:
    """Operator semantics."""

    @pytest.mark.parametrize("symbol,left,right,expected", [
        ("+", 2, 3, 5),
        ("-", 2, 3, -1),
        ("*", 2, 3, 6),
        ("/", 3, 2, 1.5),
        ("//", 7, 2, 3),
        ("%", 7, 2, 1),
        ("**", 2, 10, 1024),
        ("==", 1, 1, True),
        ("!=", 1, 1, False),
        ("<", 1, 2, True),
        ("<=", 2, 2, True),
        (">", 1, 2, False),
        (">=", 1, 2, False),
        ("in", 2, [1, 2], True),
        ("&", 6, 3, 2),
        ("|", 6, 3, 7),
        ("^", 6, 3, 5),
    ])
    def test_binary(self, symbol, left, right, expected):
        """Binary operators follow Python semantics."""
        assert evaluate(E.op(symbol, left, right)) == expected

    def test_unary(self):
        """Unary operators."""
        assert evaluate(E.op("not", True)) == False
        assert evaluate(E.op("-", 5)) == -5
        assert evaluate(E.op("~", 5)) == -6

    def test_conditional(self):
        """Only the selected branch is evaluated."""
        x = E.param("x")
        tree = E.cond(E.op(">", x, 0), "pos", E.op("/", 1, 0))
        assert evaluate(tree, {x: 1}) == "pos"

    def test_and_also_short_circuits(self):
        """&& skips its right operand when the left fails."""
        x = E.param("x")
        tree = E.and_also(E.op("!=", x, 0), E.op(">", E.op("/", 10, x), 1))
        assert evaluate(tree, {x: 0}) == False
        assert evaluate(tree, {x: 5}) == True

    def test_or_else_short_circuits(self):
        """|| skips its right operand when the left holds."""
        x = E.param("x")
        tree = E.or_else(E.op("==", x, 0), E.op(">", E.op("/", 10, x), 1))
        assert evaluate(tree, {x: 0}) == True

    def test_short_circuit_returns_bool(self):
        """&& and || produce bools, not operands."""
        assert evaluate(E.and_also(1, "yes")) is True
        assert evaluate(E.or_else(0, "")) is False

    def test_eager_and_evaluates_both(self):
        """& always evaluates its right operand."""
        tree = E.op("&", False, E.op("/", 1, 0))
        with pytest.raises(EvaluationError):
            evaluate(tree)


class TestMembersAndCalls:
    """Member reads and calls."""

    def test_attribute(self):
        """Objects are read by attribute."""
        p = E.param("p")
        assert evaluate(E.member(p, "x"), {p: Point(3, 4)}) == 3

    def test_mapping_key(self):
        """Mappings are read by key."""
        p = E.param("p")
        record = {"address": {"zip": "12345"}}
        assert evaluate(E.member(p, "address.zip"), {p: record}) == "12345"

    def test_static_member(self):
        """Static members are read from their owner."""
        assert evaluate(E.static(math, "pi")) == math.pi

    def test_static_member_without_owner(self):
        """A static member needs an owner."""
        with pytest.raises(MalformedTreeError):
            evaluate(E.static(None, "pi"))

    def test_call_function(self):
        """Literal functions are called with evaluated arguments."""
        s = E.param("s")
        assert evaluate(E.call(len, s), {s: "abcd"}) == 4

    def test_method_call(self):
        """Bound methods read through member access."""
        s = E.param("s")
        tree = E.call(E.member(s, "startswith"), "ab")
        assert evaluate(tree, {s: "abc"}) == True

    def test_nested_lambda(self):
        """Nested lambdas close over outer parameters."""
        x, y = E.params("x", "y")
        add_x = E.lambda_([y], E.op("+", x, y))
        outer = E.lambda_([x], E.call(add_x, 10))
        assert compile_lambda(outer)(5) == 15

    def test_nested_lambda_calls_are_independent(self):
        """Each call of an inner lambda binds its own arguments."""
        x, y = E.params("x", "y")
        add_x = E.lambda_([y], E.op("+", x, y))
        body = E.op("*", E.call(add_x, 1), E.call(add_x, 2))
        outer = compile_lambda(E.lambda_([x], E.op("+", body, y)))
        with pytest.raises(UnboundParameterError):
            # y is only bound inside add_x
            outer(10)

    def test_inner_parameter_shadows_outer(self):
        """A lambda reusing an outer parameter sees its own argument."""
        x = E.param("x")
        inner = E.lambda_([x], E.op("*", x, 2))
        outer = E.lambda_([x], E.op("+", x, E.call(inner, 100)))
        assert compile_lambda(outer)(1) == 201


class TestErrors:
    """Evaluation failures."""

    def test_division_by_zero(self):
        """Operator failures become EvaluationError."""
        node = E.op("/", 1, 0)
        with pytest.raises(EvaluationError) as info:
            evaluate(node)
        assert info.value.node is node
        assert isinstance(info.value.__cause__, ZeroDivisionError)

    def test_missing_attribute(self):
        """Missing members become EvaluationError."""
        p = E.param("p")
        node = E.member(p, "nope")
        with pytest.raises(EvaluationError) as info:
            evaluate(node, {p: Point(1, 2)})
        assert info.value.node is node
        assert isinstance(info.value.__cause__, AttributeError)

    def test_missing_key(self):
        """Missing mapping keys become EvaluationError."""
        p = E.param("p")
        with pytest.raises(EvaluationError):
            evaluate(E.member(p, "nope"), {p: {}})

    def test_none_dereference(self):
        """Reading a member of None is an EvaluationError."""
        p = E.param("p")
        with pytest.raises(EvaluationError):
            evaluate(E.member(p, "x"), {p: None})

    def test_unbound_parameter(self):
        """Reading an unbound parameter fails."""
        x = E.param("x")
        with pytest.raises(UnboundParameterError) as info:
            evaluate(E.op("+", x, 1))
        assert info.value.parameter is x
        assert isinstance(info.value, EvaluationError)

    def test_innermost_node_reported(self):
        """The error names the node that failed, not its ancestors."""
        bad = E.op("/", 1, 0)
        with pytest.raises(EvaluationError) as info:
            evaluate(E.op("+", 1, bad))
        assert info.value.node is bad

    def test_calling_non_callable(self):
        """Calling a non-callable value fails."""
        with pytest.raises(EvaluationError):
            evaluate(E.call(5))

    @pytest.mark.parametrize("build", [
        lambda v: E.and_also(v, True),
        lambda v: E.and_also(True, v),
        lambda v: E.or_else(v, False),
        lambda v: E.or_else(False, v),
        lambda v: E.cond(v, 1, 2),
    ])
    def test_truth_test_failure(self, build):
        """A failing __bool__ in && || or a conditional becomes EvaluationError."""
        node = build(Literal(Ambiguous()))
        with pytest.raises(EvaluationError) as info:
            evaluate(node)
        assert info.value.node is node
        assert isinstance(info.value.__cause__, ValueError)


class TestOperatorOverrides:
    """Operator tables."""

    def test_override(self):
        """Overrides replace operator behaviour."""
        ops = {BinaryOp.EQUAL: lambda a, b: str(a).lower() == str(b).lower()}
        s = E.param("s")
        check = compile_lambda(E.lambda_([s], E.op("==", s, "ABC")), operators=ops)
        assert check("abc") == True

    def test_override_keeps_defaults(self):
        """A partial table keeps the other operators."""
        ops = resolve_operators({UnaryOp.NEGATE: lambda a: a})
        assert ops[BinaryOp.ADD] is DEFAULT_OPERATORS[BinaryOp.ADD]
        assert evaluate(E.op("-", 5), operators={UnaryOp.NEGATE: lambda a: a}) == 5

    def test_no_override_returns_defaults(self):
        """No overrides means the default table."""
        assert resolve_operators(None) is DEFAULT_OPERATORS

    def test_short_circuit_not_overridable(self):
        """&& and || are control flow."""
        with pytest.raises(ValueError):
            resolve_operators({BinaryOp.AND_ALSO: lambda a, b: a})

    def test_bad_key(self):
        """Keys must be operators."""
        with pytest.raises(ValueError):
            resolve_operators({"+": lambda a, b: a})
