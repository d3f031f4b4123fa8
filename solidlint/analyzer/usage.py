"""Correlates call sites and member accesses with registered methods."""
import logging
from typing import List, Optional, Tuple

from .registry import ClassRecord, SymbolRegistry
from .syntax import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)


class UsageTracker:
    """Marks methods as used from ``obj.method()`` calls and ``obj.prop`` reads.

    Matching is by name only: the object identifier must equal a class name,
    or, for interface-like records, contain it (case-insensitive). Same-named
    methods on unrelated types are conflated and usage through aliases or
    destructuring is missed.

    Events are buffered while the tree is walked and matched in flush(), so
    a call site may precede the declaration it refers to.
    """

    CALL = 'call'
    ACCESS = 'access'

    def __init__(self):
        self._events: List[Tuple[str, str, str]] = []

    def record_call(self, object_name: Optional[str], method_name: Optional[str]):
        if object_name and method_name:
            self._events.append((self.CALL, object_name, method_name))

    def record_access(self, object_name: Optional[str], property_name: Optional[str]):
        if object_name and property_name:
            self._events.append((self.ACCESS, object_name, property_name))

    def on_call(self, node: SyntaxNode):
        """Walker callback for call expressions."""
        callee = node.child('callee')
        if callee is None or callee.kind != NodeKind.MEMBER:
            return
        self.record_call(*_member_names(callee))

    def on_member(self, node: SyntaxNode):
        """Walker callback for member expressions."""
        self.record_access(*_member_names(node))

    def flush(self, registry: SymbolRegistry) -> int:
        """Apply buffered events to registry and clear the buffer.

        Returns:
            Number of method usages recorded
        """
        records = list(registry)
        marked = 0
        for event, object_name, member_name in self._events:
            for record in records:
                if not self._matches(event, record, object_name):
                    continue
                method = record.get_method(member_name)
                if method is not None:
                    method.mark_used()
                    marked += 1
        logger.debug("Usage flush: %d events, %d usages", len(self._events), marked)
        self._events.clear()
        return marked

    def _matches(self, event: str, record: ClassRecord, object_name: str) -> bool:
        if record.name == object_name:
            return True
        # Substring heuristic only applies to calls on interface-like records
        return (event == self.CALL and record.is_interface
                and record.name.lower() in object_name.lower())


def _member_names(member: SyntaxNode) -> Tuple[Optional[str], Optional[str]]:
    obj = member.child('object')
    prop = member.child('property')
    if obj is None or prop is None or obj.kind != NodeKind.IDENTIFIER:
        return None, None
    if obj.source_type == 'this':
        return None, None
    return obj.name, prop.name
