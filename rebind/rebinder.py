"""
Parameter rebinding: substitute parameters throughout a tree.

    x, y = E.params("x", "y")
    body = E.op("<", y, 10)

    replace_parameters({y: x}, body)   # => (< x 10)

The rewrite copies only the path from the root to each replaced parameter;
every sub-tree that contains no mapped parameter is shared with the input.
The input tree is never modified.
"""

from typing import List, Mapping, Optional

from .nodes import Node, NodeKind, Parameter
from .traversal import fold_tree, with_children

SubstitutionMap = Mapping[Parameter, Parameter]


def replace_parameters(mapping: Optional[SubstitutionMap], node: Node) -> Node:
    """
    Rewrite a tree, replacing each parameter found in `mapping`.

    Parameters are matched by identity. Parameters not in the mapping are
    kept as they are, and every other node is rebuilt with the same kind,
    operator, member and static type. Lambda parameter declarations are
    rewritten along with references.

    Args:
        mapping: Old parameter -> new parameter. None is the same as {}.
        node: Tree to rewrite

    Returns:
        The rewritten tree (`node` itself if nothing was replaced)

    Raises:
        TypeError: If a mapping value is not a Parameter
        MalformedTreeError: If the tree is malformed
    """
    mapping = mapping or {}
    for old, new in mapping.items():
        if not isinstance(new, Parameter):
            raise TypeError(
                f"parameter '{getattr(old, 'name', old)}' must be replaced by "
                f"a Parameter, got {type(new).__name__}"
            )
    if not mapping:
        # Still traverse, so malformed trees are reported the same way
        return fold_tree(node, with_children)

    def rebind(current: Node, new_children: List[Node]) -> Node:
        if current.kind is NodeKind.PARAMETER:
            return mapping.get(current, current)
        return with_children(current, new_children)

    return fold_tree(node, rebind)
