"""
Execution engine: compile expression trees into Python callables.

A tree is compiled bottom-up into nested closures, each taking an
environment (a mapping from Parameter to value). Compilation itself uses the
explicit-stack fold from traversal, so any tree that can be built can be
compiled. Running the result nests one Python call per tree level.

    x = E.param("x", int)
    in_range = E.lambda_([x], E.and_also(E.op(">", x, 0), E.op("<", x, 10)))

    check = compile_lambda(in_range)
    check(5)     # => True
    check(20)    # => False

Failures while running a tree are raised as EvaluationError carrying the
node that failed, with the original exception chained. Reading a parameter
that has no value raises UnboundParameterError.
"""

import logging
from collections import ChainMap
from collections.abc import Mapping as MappingABC
from typing import Any, Callable, List, Mapping, Optional

from .errors import EvaluationError, MalformedTreeError, UnboundParameterError
from .nodes import BinaryOp, Lambda, Node, NodeKind, Parameter
from .operators import OperatorTable, resolve_operators
from .traversal import fold_tree

logger = logging.getLogger(__name__)

Env = Mapping[Parameter, Any]
Closure = Callable[[Env], Any]


def _apply(node: Node, fn: Callable[..., Any], *args: Any) -> Any:
    """Call fn(*args), reporting any failure against `node`."""
    try:
        return fn(*args)
    except EvaluationError:
        raise
    except Exception as exc:
        raise EvaluationError(
            f"evaluating {node!r} raised {type(exc).__name__}: {exc}", node=node
        ) from exc


def _truth(node: Node, value: Any) -> bool:
    """Truth value of an operand, reporting a failing __bool__ against `node`."""
    return _apply(node, bool, value)


def _read_member(node: Node, target: Any, member: str) -> Any:
    """Mappings are read by key, everything else by attribute."""
    try:
        if isinstance(target, MappingABC):
            return target[member]
        return getattr(target, member)
    except Exception as exc:
        raise EvaluationError(
            f"reading member '{member}' in {node!r} raised "
            f"{type(exc).__name__}: {exc}",
            node=node,
        ) from exc


def _combiner(operators: OperatorTable) -> Callable[[Node, List[Closure]], Closure]:
    """Build the fold step turning a node and its compiled children into a closure."""

    def combine(node: Node, kids: List[Closure]) -> Closure:
        kind = node.kind

        if kind is NodeKind.LITERAL:
            value = node.value
            return lambda env: value

        if kind is NodeKind.PARAMETER:
            def read_parameter(env: Env) -> Any:
                try:
                    return env[node]
                except KeyError:
                    raise UnboundParameterError(node) from None
            return read_parameter

        if kind is NodeKind.MEMBER_ACCESS:
            member = node.member
            if kids:
                target = kids[0]
                return lambda env: _read_member(node, target(env), member)
            owner = node.owner
            if owner is None:
                raise MalformedTreeError(
                    f"static member '{member}' has no owner", node=node
                )
            return lambda env: _read_member(node, owner, member)

        if kind is NodeKind.UNARY:
            fn = operators[node.op]
            operand = kids[0]
            return lambda env: _apply(node, fn, operand(env))

        if kind is NodeKind.BINARY:
            left, right = kids
            if node.op is BinaryOp.AND_ALSO:
                return lambda env: _truth(node, left(env)) and _truth(node, right(env))
            if node.op is BinaryOp.OR_ELSE:
                return lambda env: _truth(node, left(env)) or _truth(node, right(env))
            fn = operators[node.op]
            return lambda env: _apply(node, fn, left(env), right(env))

        if kind is NodeKind.CONDITIONAL:
            test, if_true, if_false = kids
            return lambda env: (
                if_true(env) if _truth(node, test(env)) else if_false(env)
            )

        if kind is NodeKind.CALL:
            function, arguments = kids[0], kids[1:]
            return lambda env: _apply(
                node, function(env), *[arg(env) for arg in arguments]
            )

        if kind is NodeKind.LAMBDA:
            parameters = node.parameters
            body = kids[-1]

            def make_function(env: Env) -> Callable[..., Any]:
                def invoke(*args: Any) -> Any:
                    if len(args) != len(parameters):
                        raise TypeError(
                            f"lambda takes {len(parameters)} arguments "
                            f"but {len(args)} were given"
                        )
                    return body(ChainMap(dict(zip(parameters, args)), env))
                return invoke
            return make_function

        raise MalformedTreeError(f"unknown node kind: {kind!r}", node=node)

    return combine


def compile_lambda(lam: Lambda, operators: Optional[OperatorTable] = None) -> Callable[..., Any]:
    """
    Compile a Lambda into a Python callable.

    Args:
        lam: The lambda to compile
        operators: Optional operator overrides (see operators.resolve_operators)

    Returns:
        A function taking one positional argument per lambda parameter

    Raises:
        TypeError: If `lam` is not a Lambda
        MalformedTreeError: If the tree is malformed
    """
    if not isinstance(lam, Lambda):
        raise TypeError(f"compile_lambda expects a Lambda, got {type(lam).__name__}")
    closure = fold_tree(lam, _combiner(resolve_operators(operators)))
    logger.debug("compiled lambda of arity %d", lam.arity)
    return closure({})


def evaluate(node: Node, bindings: Optional[Mapping[Parameter, Any]] = None,
             operators: Optional[OperatorTable] = None) -> Any:
    """
    Evaluate any node against explicit parameter values.

    Args:
        node: Tree to evaluate
        bindings: Values for the free parameters of the tree
        operators: Optional operator overrides

    Returns:
        The value of the tree

    Raises:
        EvaluationError: If evaluation fails
        UnboundParameterError: If a parameter has no value in `bindings`
    """
    closure = fold_tree(node, _combiner(resolve_operators(operators)))
    return closure(dict(bindings or {}))
