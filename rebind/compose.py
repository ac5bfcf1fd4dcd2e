"""
Predicate composition.

Two predicates built independently each bind their own parameters. To
combine them, the parameters of the second are replaced, position by
position, with those of the first, and the two bodies are joined:

    x = E.param("x", int)
    y = E.param("y", int)
    positive = E.lambda_([x], E.op(">", x, 0))
    small = E.lambda_([y], E.op("<", y, 10))

    and_(positive, small)   # => (lambda (x) (&& (> x 0) (< x 10)))
    or_(positive, small)    # => (lambda (x) (|| (> x 0) (< x 10)))

The result reuses the first lambda's parameters; the second lambda's
parameters do not appear in it.
"""

import logging
from typing import Callable

from .errors import ArityMismatchError
from .nodes import Binary, BinaryOp, Lambda, Node
from .rebinder import replace_parameters

logger = logging.getLogger(__name__)

MergeFunc = Callable[[Node, Node], Node]


def and_also(left: Node, right: Node) -> Binary:
    """Short-circuit AND: `right` is only evaluated when `left` holds."""
    return Binary(BinaryOp.AND_ALSO, left, right, type_=bool)


def or_else(left: Node, right: Node) -> Binary:
    """Short-circuit OR: `right` is only evaluated when `left` fails."""
    return Binary(BinaryOp.OR_ELSE, left, right, type_=bool)


def compose(first: Lambda, second: Lambda, merge: MergeFunc) -> Lambda:
    """
    Merge two lambdas of the same arity into one.

    Args:
        first: Lambda whose parameters the result keeps
        second: Lambda whose parameters are replaced by those of `first`
        merge: Builds the new body from (first.body, rewritten second.body)

    Returns:
        Lambda(first.parameters, merge(first.body, second body rebound))

    Raises:
        TypeError: If either argument is not a Lambda
        ArityMismatchError: If the parameter counts differ
    """
    for name, value in (("first", first), ("second", second)):
        if not isinstance(value, Lambda):
            raise TypeError(
                f"compose: {name} must be a Lambda, got {type(value).__name__}"
            )
    if len(first.parameters) != len(second.parameters):
        raise ArityMismatchError(len(first.parameters), len(second.parameters))

    mapping = dict(zip(second.parameters, first.parameters))
    second_body = replace_parameters(mapping, second.body)
    logger.debug("composing lambdas of arity %d", len(first.parameters))
    return Lambda(first.parameters, merge(first.body, second_body))


def and_(first: Lambda, second: Lambda) -> Lambda:
    """Compose two predicates with short-circuit AND."""
    return compose(first, second, and_also)


def or_(first: Lambda, second: Lambda) -> Lambda:
    """Compose two predicates with short-circuit OR."""
    return compose(first, second, or_else)
