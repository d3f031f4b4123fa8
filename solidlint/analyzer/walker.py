"""Single-pass traversal of a SyntaxNode tree with per-kind callbacks."""
import logging
from collections import defaultdict
from typing import Callable, Dict, Iterator, List, Optional

from .syntax import SyntaxNode

logger = logging.getLogger(__name__)

# Nesting deeper than this is truncated rather than followed
DEFAULT_MAX_DEPTH = 500

NodeHandler = Callable[[SyntaxNode], None]


def iter_subtree(node: SyntaxNode, max_depth: int = DEFAULT_MAX_DEPTH,
                 include_root: bool = False) -> Iterator[SyntaxNode]:
    """Yield the descendants of node in source order.

    Explicit stack, no recursion. Nodes nested more than max_depth levels
    below node are skipped together with their subtrees.
    """
    stack = [(node, 0)]
    truncated = False
    while stack:
        current, depth = stack.pop()
        if depth > 0 or include_root:
            yield current
        if depth >= max_depth:
            if current.children and not truncated:
                truncated = True
                logger.debug("Subtree at line %d exceeds depth %d; truncating",
                             current.start_line, max_depth)
            continue
        stack.extend((child, depth + 1) for child in reversed(current.children))


class TreeWalker:
    """Visits every node once, in source order, dispatching on node kind.

    Handlers must not mutate the tree. End-of-file hooks run after the
    traversal, in registration order.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth
        self._handlers: Dict[str, List[NodeHandler]] = defaultdict(list)
        self._any_handlers: List[NodeHandler] = []
        self._end_hooks: List[Callable[[], None]] = []

    def on(self, kind: Optional[str], handler: NodeHandler) -> None:
        """Register handler for a node kind (None means every node)."""
        if kind is None:
            self._any_handlers.append(handler)
        else:
            self._handlers[kind].append(handler)

    def on_end(self, hook: Callable[[], None]) -> None:
        self._end_hooks.append(hook)

    def walk(self, root: SyntaxNode) -> int:
        """Traverse root and run the end-of-file hooks.

        Returns:
            Number of nodes visited
        """
        visited = 0
        for node in iter_subtree(root, self.max_depth, include_root=True):
            visited += 1
            for handler in self._any_handlers:
                handler(node)
            for handler in self._handlers.get(node.kind, ()):
                handler(node)

        for hook in self._end_hooks:
            hook()
        return visited
