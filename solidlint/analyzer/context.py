"""Per-file analysis state shared by every detector."""
from collections import defaultdict
from typing import Dict, List

from .inheritance import InheritanceResolver
from .registry import ClassRecord, SymbolRegistry
from .reporter import DiagnosticReporter
from .syntax import NodeKind, SyntaxNode
from .usage import UsageTracker
from .walker import DEFAULT_MAX_DEPTH, TreeWalker

TYPESCRIPT_SUFFIXES = ('.ts', '.tsx', '.mts', '.cts')


class AnalysisContext:
    """Everything one file's analysis accumulates.

    Created fresh for each file and discarded after its diagnostics are
    returned. collect() walks the tree once; afterwards the registry,
    inheritance graph, usage counts and node index are complete and
    detectors only read them (and report).
    """

    def __init__(self, file_path: str, root: SyntaxNode, max_depth: int = DEFAULT_MAX_DEPTH):
        self.file_path = str(file_path).replace('\\', '/')
        self.root = root
        self.max_depth = max_depth
        self.registry = SymbolRegistry(self.file_path, max_depth)
        self.resolver = InheritanceResolver(self.registry)
        self.tracker = UsageTracker()
        self.reporter = DiagnosticReporter(self.file_path)
        self._by_kind: Dict[str, List[SyntaxNode]] = defaultdict(list)
        self._in_order: List[SyntaxNode] = []
        self._class_nodes: Dict[int, ClassRecord] = {}
        self.node_count = 0

    @property
    def is_typescript(self) -> bool:
        return self.file_path.lower().endswith(TYPESCRIPT_SUFFIXES)

    def collect(self) -> int:
        """Run the single traversal that populates the shared state.

        Returns:
            Number of nodes visited
        """
        walker = TreeWalker(self.max_depth)
        walker.on(None, self._index_node)
        walker.on(NodeKind.CLASS, self._on_class)
        walker.on(NodeKind.INTERFACE, self._on_class)
        walker.on(NodeKind.OBJECT, self.registry.register_object_interface)
        walker.on(NodeKind.CALL, self.tracker.on_call)
        walker.on(NodeKind.MEMBER, self.tracker.on_member)
        walker.on_end(lambda: self.tracker.flush(self.registry))
        self.node_count = walker.walk(self.root)
        return self.node_count

    def _index_node(self, node: SyntaxNode):
        self._by_kind[node.kind].append(node)
        self._in_order.append(node)

    def _on_class(self, node: SyntaxNode):
        record = self.registry.register_class(node)
        self._class_nodes[id(node)] = record
        self.resolver.record_edge(record.name, record.superclass)

    def nodes(self, *kinds: str) -> List[SyntaxNode]:
        """Indexed nodes of the given kinds, in source order."""
        if len(kinds) == 1:
            return list(self._by_kind.get(kinds[0], ()))
        wanted = frozenset(kinds)
        return [node for node in self._in_order if node.kind in wanted]

    def record_for(self, class_node: SyntaxNode) -> ClassRecord:
        """Record built from this declaration, even if a later one shadowed its name."""
        return self._class_nodes[id(class_node)]

    def class_records(self) -> List[ClassRecord]:
        """Records for every class/interface declaration, in source order."""
        return [self._class_nodes[id(node)]
                for node in self.nodes(NodeKind.CLASS, NodeKind.INTERFACE)
                if id(node) in self._class_nodes]
