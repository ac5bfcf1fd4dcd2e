"""
Exception hierarchy for REBIND.

Every error raised by the library derives from RebindError, so callers can
catch the whole family at once:

    try:
        value = fold(node)
    except EvaluationError as e:
        print(f"cannot fold {e.node!r}: {e.__cause__}")
"""

from typing import Any, Optional


class RebindError(Exception):
    """Base class for all REBIND errors."""


class MalformedTreeError(RebindError, ValueError):
    """A node is missing a required child, or a child is not a node."""

    def __init__(self, message: str, node: Any = None):
        super().__init__(message)
        self.node = node


class EvaluationError(RebindError):
    """
    Evaluating a sub-tree failed.

    The offending node is kept on `node`. When the failure came from an
    operator, member read or call, the original exception is chained as
    __cause__.
    """

    def __init__(self, message: str, node: Any = None):
        super().__init__(message)
        self.node = node


class UnboundParameterError(EvaluationError):
    """A parameter was evaluated with no value bound to it."""

    def __init__(self, parameter: Any):
        super().__init__(
            f"parameter '{parameter.name}' has no bound value", node=parameter
        )
        self.parameter = parameter


class ArityMismatchError(RebindError, ValueError):
    """Two lambdas with different parameter counts cannot be composed."""

    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        super().__init__(
            message
            or f"cannot compose lambdas of different arity: {expected} != {actual}"
        )
        self.expected = expected
        self.actual = actual
