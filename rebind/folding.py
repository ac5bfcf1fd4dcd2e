"""
Constant folding: replace sub-trees with their pre-computed values.

    fold(E.op("+", 5, 3))   # => Literal(8)

fold() evaluates exactly the node it is given and lets failures propagate.
fold_constants() walks a whole tree and folds every sub-tree that needs no
input, leaving the rest alone:

    order = E.param("order")
    limit = E.member(E.const(settings), "limits.max_total")
    tree = E.lambda_([order], E.op("<=", E.member(order, "total"), limit))

    fold_constants(tree)
    # => (lambda (order) (<= order.total 500))

With trace=True, fold_constants also returns a FoldTrace listing each
sub-tree it replaced.
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .classify import is_constant_subtree, is_parameter_free
from .compiler import compile_lambda
from .errors import EvaluationError
from .nodes import Lambda, Literal, Node, NodeKind
from .operators import OperatorTable
from .traversal import fold_tree, format_node, with_children

logger = logging.getLogger(__name__)


def fold(node: Node, operators: Optional[OperatorTable] = None) -> Literal:
    """
    Evaluate a node with no inputs and wrap the result as a Literal.

    The node is compiled as the body of a zero-parameter lambda and called
    once. The literal keeps the node's static type, or the value's own type
    when the node's type is unknown.

    Args:
        node: The sub-tree to fold
        operators: Optional operator overrides

    Returns:
        Literal holding the value of `node`

    Raises:
        EvaluationError: If evaluation fails, including
            UnboundParameterError when `node` reads a parameter
    """
    value = compile_lambda(Lambda([], node), operators=operators)()
    type_ = node.type_ if node.type_ is not object else type(value)
    return Literal(value, type_=type_)


# ============================================================
# Fold trace
# ============================================================

class FoldStep:
    """A single sub-tree replaced by a literal."""

    def __init__(self, before: Node, after: Literal):
        self.before = before
        self.after = after

    def __repr__(self) -> str:
        return f"{format_node(self.before)} → {format_node(self.after)}"

    def to_dict(self) -> Dict:
        """Convert step to dictionary for serialization."""
        return {
            "before": format_node(self.before),
            "after": format_node(self.after),
            "value": self.after.value,
        }


class FoldTrace:
    """
    A trace of the folds performed by fold_constants.

    Provides multiple formatting options:
        - Default repr: one line per fold
        - format("compact"): initial and final tree on one line
        - to_dict(): JSON-friendly dictionary
    """

    def __init__(self):
        self.steps: List[FoldStep] = []
        self.skipped: List[Node] = []
        self.initial: Optional[Node] = None
        self.final: Optional[Node] = None

    def add_step(self, step: FoldStep):
        self.steps.append(step)

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace.

        Args:
            style: "verbose" (default) or "compact"
        """
        if style == "compact":
            return f"{format_node(self.initial)} --[{len(self.steps)} folds]--> {format_node(self.final)}"
        return repr(self)

    def __repr__(self) -> str:
        lines = [f"Initial: {format_node(self.initial)}"]
        for i, step in enumerate(self.steps, 1):
            lines.append(f"  {i}. {step}")
        lines.append(f"Final: {format_node(self.final)}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[FoldStep]:
        return iter(self.steps)

    def __bool__(self) -> bool:
        """True if anything was folded."""
        return len(self.steps) > 0

    def to_dict(self) -> Dict:
        return {
            "initial": format_node(self.initial),
            "final": format_node(self.final),
            "steps": [step.to_dict() for step in self.steps],
            "skipped": [format_node(node) for node in self.skipped],
        }

    def summary(self) -> str:
        if not self.steps:
            return "No folding performed"
        return f"{len(self.steps)} sub-trees folded, {len(self.skipped)} left in place"


# ============================================================
# Folding pass
# ============================================================

_OPERATOR_KINDS = (NodeKind.UNARY, NodeKind.BINARY, NodeKind.CONDITIONAL)


def _foldable(node: Node, fold_calls: bool) -> bool:
    kind = node.kind
    if kind is NodeKind.MEMBER_ACCESS:
        return is_constant_subtree(node) and is_parameter_free(node)
    if kind in _OPERATOR_KINDS:
        return all(child.kind is NodeKind.LITERAL for child in _operands(node))
    if kind is NodeKind.CALL:
        return fold_calls and node.function.kind is NodeKind.LITERAL and all(
            arg.kind is NodeKind.LITERAL for arg in node.arguments
        )
    return False


def _operands(node: Node) -> Tuple[Node, ...]:
    if node.kind is NodeKind.UNARY:
        return (node.operand,)
    if node.kind is NodeKind.BINARY:
        return (node.left, node.right)
    return (node.test, node.if_true, node.if_false)


def fold_constants(
    node: Node,
    strict: bool = False,
    fold_calls: bool = False,
    trace: bool = False,
    operators: Optional[OperatorTable] = None,
) -> Union[Node, Tuple[Node, FoldTrace]]:
    """
    Fold every sub-tree of `node` that can be computed without input.

    Works bottom-up, so folding the operands of an operator can make the
    operator itself foldable. Folded are:
        - member chains rooted at a literal (const.a.b)
        - operators and conditionals whose operands are all literals
        - calls whose function and arguments are literals, if fold_calls

    Parameters, lambdas and anything reading a parameter are never folded.
    Calls are not folded by default because they may have side effects.

    Args:
        node: Tree to fold
        strict: If True, an EvaluationError while folding propagates.
                If False (default), the failing sub-tree is left as is.
        fold_calls: Also fold calls with literal function and arguments
        trace: If True, return (result, FoldTrace)
        operators: Optional operator overrides

    Returns:
        The folded tree, or (tree, FoldTrace) when trace=True
    """
    trace_obj = FoldTrace()
    trace_obj.initial = node

    def step(current: Node, new_children: List[Node]) -> Node:
        current = with_children(current, new_children)
        if not _foldable(current, fold_calls):
            return current
        try:
            folded = fold(current, operators=operators)
        except EvaluationError as e:
            if strict:
                raise
            logger.debug("left %r unfolded: %s", current, e)
            trace_obj.skipped.append(current)
            return current
        logger.debug("folded %r to %r", current, folded)
        trace_obj.add_step(FoldStep(current, folded))
        return folded

    result = fold_tree(node, step)
    trace_obj.final = result
    if trace:
        return result, trace_obj
    return result
