"""Inheritance resolution over a per-file class graph using NetworkX."""
from typing import Iterator, List, Optional, Tuple
import networkx as nx

from .registry import ClassRecord, MethodRecord, SymbolRegistry


class InheritanceResolver:
    """Track subclass -> superclass edges and answer inheritance queries.

    Edge (A, B) in the graph means "A extends B". A class has at most one
    parent: recording a new parent replaces the old edge. Walks stop at the
    first unknown parent, and a name seen twice ends the walk, so cyclic
    declarations are never an error.
    """

    def __init__(self, registry: SymbolRegistry):
        self.registry = registry
        self.graph = nx.DiGraph()

    def record_edge(self, child: str, parent: Optional[str]):
        """Record that child extends parent; a missing parent clears the old edge."""
        if not child:
            return
        if self.graph.has_node(child):
            for old_parent in list(self.graph.successors(child)):
                self.graph.remove_edge(child, old_parent)
        if parent:
            self.graph.add_edge(child, parent)

    def parent_of(self, child: str) -> Optional[str]:
        if not self.graph.has_node(child):
            return None
        for parent in self.graph.successors(child):
            return parent
        return None

    def ancestors(self, class_name: str) -> Iterator[str]:
        """Yield parent, grandparent, ... of class_name, stopping on a repeat."""
        visited = {class_name}
        current = self.parent_of(class_name)
        while current is not None and current not in visited:
            visited.add(current)
            yield current
            current = self.parent_of(current)

    def find_inherited(self, class_name: str,
                       method_name: str) -> Optional[Tuple[ClassRecord, MethodRecord]]:
        """Nearest ancestor of class_name declaring method_name.

        Returns:
            (ancestor record, its method) or None when the chain reaches an
            unknown class first
        """
        for ancestor_name in self.ancestors(class_name):
            record = self.registry.get(ancestor_name)
            if record is None:
                return None
            method = record.get_method(method_name)
            if method is not None:
                return record, method
        return None

    def is_inherited(self, class_name: str, method_name: str) -> bool:
        return self.find_inherited(class_name, method_name) is not None

    def subclasses(self, class_name: str) -> List[str]:
        if not self.graph.has_node(class_name):
            return []
        return sorted(self.graph.predecessors(class_name))
