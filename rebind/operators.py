"""
Operator tables for the execution engine.

An operator table maps a BinaryOp or UnaryOp to the Python callable that
implements it. The compiler looks every operator up in a table, so callers
can change what an operator means without touching the tree:

    from rebind import compile_lambda, DEFAULT_OPERATORS, BinaryOp

    # Case-insensitive string equality
    ops = {BinaryOp.EQUAL: lambda a, b: str(a).lower() == str(b).lower()}
    matches = compile_lambda(predicate, operators=ops)

Overrides are merged onto DEFAULT_OPERATORS, so a partial table is enough.
The short-circuit operators && and || are control flow, not functions, and
cannot be overridden.
"""

import operator
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .nodes import BinaryOp, UnaryOp

OperatorKey = Union[BinaryOp, UnaryOp]
OperatorTable = Mapping[OperatorKey, Callable[..., Any]]


def _contains(item: Any, container: Any) -> bool:
    """(in item container) - note the argument order of operator.contains."""
    return item in container


# Arithmetic operators
ARITHMETIC_OPERATORS: Dict[OperatorKey, Callable[..., Any]] = {
    BinaryOp.ADD: operator.add,
    BinaryOp.SUBTRACT: operator.sub,
    BinaryOp.MULTIPLY: operator.mul,
    BinaryOp.DIVIDE: operator.truediv,
    BinaryOp.FLOOR_DIVIDE: operator.floordiv,
    BinaryOp.MODULO: operator.mod,
    BinaryOp.POWER: operator.pow,
}

# Comparison and membership
COMPARISON_OPERATORS: Dict[OperatorKey, Callable[..., Any]] = {
    BinaryOp.EQUAL: operator.eq,
    BinaryOp.NOT_EQUAL: operator.ne,
    BinaryOp.LESS: operator.lt,
    BinaryOp.LESS_EQUAL: operator.le,
    BinaryOp.GREATER: operator.gt,
    BinaryOp.GREATER_EQUAL: operator.ge,
    BinaryOp.CONTAINS: _contains,
}

# Eager logical / bitwise operators: both operands are always evaluated
BITWISE_OPERATORS: Dict[OperatorKey, Callable[..., Any]] = {
    BinaryOp.AND: operator.and_,
    BinaryOp.OR: operator.or_,
    BinaryOp.XOR: operator.xor,
}

UNARY_OPERATORS: Dict[OperatorKey, Callable[..., Any]] = {
    UnaryOp.NOT: operator.not_,
    UnaryOp.NEGATE: operator.neg,
    UnaryOp.INVERT: operator.invert,
}

# Everything the compiler needs by default
DEFAULT_OPERATORS: Dict[OperatorKey, Callable[..., Any]] = {
    **ARITHMETIC_OPERATORS,
    **COMPARISON_OPERATORS,
    **BITWISE_OPERATORS,
    **UNARY_OPERATORS,
}


def resolve_operators(overrides: Optional[OperatorTable] = None) -> OperatorTable:
    """
    Merge an override table onto DEFAULT_OPERATORS.

    Args:
        overrides: Partial table of replacement operators, or None

    Returns:
        A complete operator table

    Raises:
        ValueError: If the overrides try to replace && or ||
    """
    if not overrides:
        return DEFAULT_OPERATORS
    for key in overrides:
        if isinstance(key, BinaryOp) and key.is_short_circuit:
            raise ValueError(
                f"short-circuit operator {key.value} cannot be overridden"
            )
        if not isinstance(key, (BinaryOp, UnaryOp)):
            raise ValueError(f"not an operator: {key!r}")
    return {**DEFAULT_OPERATORS, **overrides}
