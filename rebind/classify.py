"""
Shallow classification of sub-trees.

Both checks only look along a chain of member accesses (a.b.c) down to its
innermost owning expression. They do not analyse the rest of the tree: use
traversal.free_parameters when a full answer is needed.

    order = E.param("order")
    is_constant_subtree(E.member(E.const(config), "limits.max"))  # => True
    is_parameter_free(E.member(order, "total"))                    # => False
"""

from typing import Optional

from .errors import MalformedTreeError
from .nodes import Node, NodeKind
from .traversal import check_node


def _owning_expression(link: Node) -> Optional[Node]:
    """The owning expression of a member access, None for a static member."""
    expression = link.expression
    if expression is not None and not isinstance(expression, Node):
        raise MalformedTreeError(
            f"MemberAccess.expression is not a node: {expression!r}", node=link
        )
    return expression


def _as_member_access(node: Optional[Node]) -> Optional[Node]:
    if node is not None and node.kind is NodeKind.MEMBER_ACCESS:
        return node
    return None


def is_constant_subtree(node: Node) -> bool:
    """
    Check if a node is a literal, or a member chain rooted at a literal.

    Only the innermost owning expression of the chain decides: (x.a).b is
    not constant, 5.real is, and any other kind of node (a parameter, a
    call, an operator) is not.

    Args:
        node: The node to classify

    Returns:
        True if the value of `node` can be computed without any input
    """
    check_node(node)
    if node.kind is NodeKind.LITERAL:
        return True
    constant = False
    link = _as_member_access(node)
    while link is not None:
        expression = _owning_expression(link)
        if expression is None:
            if link.kind is NodeKind.LITERAL:
                constant = True
            link = None
        else:
            constant = expression.kind is NodeKind.LITERAL
            link = _as_member_access(expression)
    return constant


def is_parameter_free(node: Node) -> bool:
    """
    Check if a node is not a parameter, or a member chain over one.

    Returns False for a bare parameter and for x.a.b where x is a parameter.
    Every other node is reported as parameter free, whatever its children.

    Args:
        node: The node to classify

    Returns:
        True if `node` does not read a bound parameter along its member chain
    """
    check_node(node)
    if node.kind is NodeKind.PARAMETER:
        return False
    link = _as_member_access(node)
    while link is not None:
        expression = _owning_expression(link)
        if expression is None:
            break
        if expression.kind is NodeKind.PARAMETER:
            return False
        link = _as_member_access(expression)
    return True


def depends_on_bound_parameter(node: Node) -> bool:
    """
    Same answer as is_parameter_free, under the classifier's historical name.

    False for x and x.a.b where x is a parameter, True for everything else.
    New code should call is_parameter_free, whose name says what it returns.
    """
    return is_parameter_free(node)
