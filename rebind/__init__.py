"""
REBIND - Reusable Expression Binders

Build predicates as expression trees, inspect and fold their constant parts,
and combine independently written predicates into one.

Quick Start:
    from rebind import E, and_, or_

    x = E.param("x", int)
    y = E.param("y", int)
    positive = E.lambda_([x], E.op(">", x, 0))
    small = E.lambda_([y], E.op("<", y, 10))

    in_range = and_(positive, small)   # (lambda (x) (&& (> x 0) (< x 10)))
    in_range(5)                        # => True
    or_(positive, small)(-1)           # => True

Trees:
    Literal, Parameter, MemberAccess, Unary, Binary, Conditional, Call and
    Lambda nodes. Nodes are immutable; parameters are matched by identity,
    never by name.

Operations:
    is_constant_subtree(node)         - literal, or member chain rooted at one
    is_parameter_free(node)           - not a parameter or member chain over one
    fold(node)                        - evaluate a constant sub-tree to a Literal
    fold_constants(tree)              - fold every constant sub-tree
    replace_parameters(mapping, tree) - substitute parameters
    compose(f, g, merge)              - merge two lambdas with any combinator
    and_(f, g) / or_(f, g)            - merge with short-circuit && / ||
"""

import logging

__version__ = "0.1.0"

# Tree model
from .nodes import (
    NodeKind,
    BinaryOp,
    UnaryOp,
    Node,
    Literal,
    Parameter,
    MemberAccess,
    Unary,
    Binary,
    Conditional,
    Call,
    Lambda,
    is_node,
)

# Errors
from .errors import (
    RebindError,
    MalformedTreeError,
    EvaluationError,
    UnboundParameterError,
    ArityMismatchError,
)

# Traversal
from .traversal import (
    children,
    with_children,
    walk,
    fold_tree,
    structurally_equal,
    parameter_references,
    free_parameters,
    format_node,
)

# Execution
from .operators import (
    ARITHMETIC_OPERATORS,
    COMPARISON_OPERATORS,
    BITWISE_OPERATORS,
    UNARY_OPERATORS,
    DEFAULT_OPERATORS,
    resolve_operators,
)
from .compiler import compile_lambda, evaluate

# Core operations
from .classify import is_constant_subtree, is_parameter_free, depends_on_bound_parameter
from .folding import fold, fold_constants, FoldStep, FoldTrace
from .rebinder import replace_parameters
from .compose import compose, and_, or_, and_also, or_else

# Expression builder
from .builder import E, to_node

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [
    # Version
    "__version__",
    # Tree model
    "NodeKind",
    "BinaryOp",
    "UnaryOp",
    "Node",
    "Literal",
    "Parameter",
    "MemberAccess",
    "Unary",
    "Binary",
    "Conditional",
    "Call",
    "Lambda",
    "is_node",
    # Errors
    "RebindError",
    "MalformedTreeError",
    "EvaluationError",
    "UnboundParameterError",
    "ArityMismatchError",
    # Traversal
    "children",
    "with_children",
    "walk",
    "fold_tree",
    "structurally_equal",
    "parameter_references",
    "free_parameters",
    "format_node",
    # Operator tables
    "ARITHMETIC_OPERATORS",
    "COMPARISON_OPERATORS",
    "BITWISE_OPERATORS",
    "UNARY_OPERATORS",
    "DEFAULT_OPERATORS",
    "resolve_operators",
    # Execution
    "compile_lambda",
    "evaluate",
    # Classification
    "is_constant_subtree",
    "is_parameter_free",
    "depends_on_bound_parameter",
    # Folding
    "fold",
    "fold_constants",
    "FoldStep",
    "FoldTrace",
    # Rebinding and composition
    "replace_parameters",
    "compose",
    "and_",
    "or_",
    "and_also",
    "or_else",
    # Expression builder
    "E",
    "to_node",
]
